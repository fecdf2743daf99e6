"""Custom form API endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_admin
from ..database import get_db
from ..schemas.custom_form import CustomFormCreate, CustomFormResponse
from ..services import FormService

router = APIRouter(prefix="/api/custom-forms", tags=["custom-forms"])


@router.get("", response_model=List[CustomFormResponse])
def list_forms(db: Session = Depends(get_db)):
    return FormService(db).list_forms()


@router.post("", response_model=CustomFormResponse, status_code=201)
def create_form(
    form: CustomFormCreate,
    db: Session = Depends(get_db),
    _auth: AuthContext = Depends(require_admin),
):
    """Define a new form (admin only)."""
    return FormService(db).create_form(form)


@router.get("/{form_ref}", response_model=CustomFormResponse)
def get_form(form_ref: str, db: Session = Depends(get_db)):
    """Look a form up by id or slug."""
    return FormService(db).get_form(form_ref)
