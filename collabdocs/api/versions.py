"""Version API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, optional_auth
from ..database import get_db
from ..schemas.version import VersionResponse
from ..services import DocumentService

router = APIRouter(prefix="/api/documents/{doc_id}/versions", tags=["versions"])


@router.get("", response_model=List[VersionResponse])
def list_versions(
    doc_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(optional_auth),
):
    """Version history of a document, newest first."""
    return DocumentService(db).get_versions(doc_id, auth, skip, limit)


@router.get("/{version}", response_model=VersionResponse)
def get_version(
    doc_id: str,
    version: int,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(optional_auth),
):
    return DocumentService(db).get_version(doc_id, version, auth)
