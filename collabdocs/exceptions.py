"""Custom exception hierarchy for CollabDocs."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Not found
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    COMMENT_NOT_FOUND = "COMMENT_NOT_FOUND"
    FORM_NOT_FOUND = "FORM_NOT_FOUND"

    # Request errors
    BAD_REQUEST = "BAD_REQUEST"
    INVALID_PARAM = "INVALID_PARAM"
    MISSING_QUERY = "MISSING_QUERY"

    # Workflow rules
    POLICY_VIOLATION = "POLICY_VIOLATION"
    DOCUMENT_CLOSED = "DOCUMENT_CLOSED"

    # Auth & rate limiting
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    RATE_LIMITED = "RATE_LIMITED"

    # Concurrency errors
    CONFLICT = "CONFLICT"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class CollabException(Exception):
    """
    Base exception for all CollabDocs errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class DocumentNotFoundError(CollabException):
    """Document not found in database."""

    def __init__(self, doc_id: str):
        super().__init__(
            f"Document not found: {doc_id}",
            ErrorCode.DOCUMENT_NOT_FOUND,
            status_code=404,
            details={"doc_id": doc_id}
        )


class VersionNotFoundError(CollabException):
    """Document version not found in database."""

    def __init__(self, version_id: str):
        super().__init__(
            f"Version not found: {version_id}",
            ErrorCode.VERSION_NOT_FOUND,
            status_code=404,
            details={"version_id": version_id}
        )


class CommentNotFoundError(CollabException):
    """Comment not found, or not attached to the requested document."""

    def __init__(self, comment_id: str):
        super().__init__(
            f"Comment not found: {comment_id}",
            ErrorCode.COMMENT_NOT_FOUND,
            status_code=404,
            details={"comment_id": comment_id}
        )


class FormNotFoundError(CollabException):
    """Custom form not found by id or slug."""

    def __init__(self, form_ref: str):
        super().__init__(
            f"Custom form not found: {form_ref}",
            ErrorCode.FORM_NOT_FOUND,
            status_code=404,
            details={"form": form_ref}
        )


class BadRequestError(CollabException):
    """Request references something that cannot be used (e.g. an unknown form)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            ErrorCode.BAD_REQUEST,
            status_code=400,
            details=details
        )


class InvalidParamError(CollabException):
    """A parameter is well-formed but not acceptable (e.g. a non-commentable field)."""

    def __init__(self, message: str, param: Optional[str] = None):
        details = {"param": param} if param else {}
        super().__init__(
            message,
            ErrorCode.INVALID_PARAM,
            status_code=400,
            details=details
        )


class MissingQueryError(CollabException):
    """None of the required query-string parameters were supplied."""

    def __init__(self, expected: list[str]):
        super().__init__(
            f"At least one of these query parameters is required: {', '.join(expected)}",
            ErrorCode.MISSING_QUERY,
            status_code=400,
            details={"expected": expected}
        )


class PolicyViolationError(CollabException):
    """Community policy forbids the operation (e.g. creation limit reached)."""

    def __init__(self, message: str, limit: Optional[int] = None):
        details = {"limit": limit} if limit is not None else {}
        super().__init__(
            message,
            ErrorCode.POLICY_VIOLATION,
            status_code=403,
            details=details
        )


class DocumentClosedError(CollabException):
    """Mutation attempted on a document past its closing date."""

    def __init__(self, doc_id: str):
        super().__init__(
            f"Document is closed: {doc_id}",
            ErrorCode.DOCUMENT_CLOSED,
            status_code=403,
            details={"doc_id": doc_id}
        )


class AuthenticationError(CollabException):
    """Request lacks valid authentication credentials."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class ForbiddenError(CollabException):
    """Authenticated user lacks permission for the requested action."""

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(
            message,
            ErrorCode.FORBIDDEN,
            status_code=403,
        )


class ConflictError(CollabException):
    """Write lost a race against a concurrent modification."""

    def __init__(self, doc_id: str, message: str = "Document was modified by another user"):
        super().__init__(
            message,
            ErrorCode.CONFLICT,
            status_code=409,
            details={"doc_id": doc_id}
        )
