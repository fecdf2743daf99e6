"""Custom form repository for database operations."""

from typing import List, Optional

from sqlalchemy import or_

from ..models import CustomForm
from ..exceptions import FormNotFoundError
from .base import BaseRepository, new_id


class CustomFormRepository(BaseRepository[CustomForm]):
    """Repository for admin-defined custom forms."""

    model_class = CustomForm
    not_found_error = FormNotFoundError

    def create(
        self,
        slug: str,
        name: str,
        fields: List[str],
        allow_comments: List[str],
        description: Optional[str] = None,
        form_id: Optional[str] = None,
    ) -> CustomForm:
        db_form = CustomForm(
            id=form_id or new_id(),
            slug=slug,
            name=name,
            description=description,
            fields=list(fields),
            allow_comments=list(allow_comments),
        )
        self.db.add(db_form)
        self.db.flush()
        return db_form

    def get_by_ref_optional(self, ref: str) -> Optional[CustomForm]:
        """Look a form up by id or slug."""
        return (
            self.db.query(CustomForm)
            .filter(or_(CustomForm.id == ref, CustomForm.slug == ref))
            .first()
        )

    def get_by_slug_optional(self, slug: str) -> Optional[CustomForm]:
        return self.db.query(CustomForm).filter(CustomForm.slug == slug).first()

    def get_all(self) -> List[CustomForm]:
        return self.db.query(CustomForm).order_by(CustomForm.name).all()
