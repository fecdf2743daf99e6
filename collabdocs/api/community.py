"""Community policy API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_admin
from ..database import get_db
from ..schemas.community import CommunityResponse, CommunityUpdate
from ..services import CommunityService

router = APIRouter(prefix="/api/community", tags=["community"])


@router.get("", response_model=CommunityResponse)
def get_community(db: Session = Depends(get_db)):
    return CommunityService(db).get()


@router.put("", response_model=CommunityResponse)
def update_community(
    update: CommunityUpdate,
    db: Session = Depends(get_db),
    _auth: AuthContext = Depends(require_admin),
):
    """Rename the community or change the document creation limit."""
    return CommunityService(db).update(update)
