"""Custom form provider: resolves form references to field schemas."""

import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy.orm import Session

from ..exceptions import BadRequestError, FormNotFoundError
from ..models import CustomForm
from ..repositories import CustomFormRepository
from ..schemas.custom_form import CustomFormCreate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormSchema:
    """What the workflow needs to know about a form."""
    id: str
    slug: str
    fields: tuple
    allow_comments: frozenset

    def is_commentable(self, field: str) -> bool:
        return field in self.allow_comments

    @classmethod
    def from_model(cls, form: CustomForm) -> "FormSchema":
        return cls(
            id=form.id,
            slug=form.slug,
            fields=tuple(form.fields or ()),
            allow_comments=frozenset(form.allow_comments or ()),
        )


class FormService:
    """Custom form lookups and admin management."""

    def __init__(self, db: Session):
        self.db = db
        self.form_repo = CustomFormRepository(db)

    def resolve(self, ref: str) -> FormSchema:
        """Resolve an id or slug. Raises FormNotFoundError."""
        form = self.form_repo.get_by_ref_optional(ref)
        if form is None:
            raise FormNotFoundError(ref)
        return FormSchema.from_model(form)

    def get_form(self, ref: str) -> CustomForm:
        form = self.form_repo.get_by_ref_optional(ref)
        if form is None:
            raise FormNotFoundError(ref)
        return form

    def list_forms(self) -> List[CustomForm]:
        return self.form_repo.get_all()

    def create_form(self, data: CustomFormCreate) -> CustomForm:
        """Define a new form. Slugs are unique."""
        if self.form_repo.get_by_slug_optional(data.slug) is not None:
            raise BadRequestError(f"A form with slug '{data.slug}' already exists", {"slug": data.slug})

        form = self.form_repo.create(
            slug=data.slug,
            name=data.name,
            description=data.description,
            fields=data.fields,
            allow_comments=data.allow_comments,
        )
        self.db.commit()
        self.db.refresh(form)
        logger.info("Custom form created", extra={"form_id": form.id, "slug": form.slug})
        return form
