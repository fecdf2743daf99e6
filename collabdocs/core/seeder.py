"""Seed the community and custom forms on first startup.

Idempotent: the community row is created only when missing, and forms
are loaded from the fixture only when no form exists yet.
"""

import json
import logging
from pathlib import Path

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_FIXTURE_PATH = Path(__file__).parent.parent.parent / "fixtures" / "custom_forms.json"


def seed_initial_data(db: Session, fixture_path: Path = _FIXTURE_PATH) -> int:
    """Create the default community and fixture forms on an empty database.

    Args:
        db: An open SQLAlchemy session.
        fixture_path: JSON file with a ``forms`` list.

    Returns:
        Number of forms seeded (0 if skipped).
    """
    from ..models import CustomForm
    from ..schemas.custom_form import CustomFormCreate
    from ..services import CommunityService, FormService

    CommunityService(db).get()
    db.commit()

    existing = db.query(CustomForm).count()
    if existing > 0:
        logger.debug("Database has %d custom forms, skipping seed", existing)
        return 0

    if not fixture_path.exists():
        logger.debug("No seed fixture at %s", fixture_path)
        return 0

    try:
        with open(fixture_path) as f:
            fixture = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to read seed fixture: %s", e)
        return 0

    service = FormService(db)
    seeded = 0
    for form_data in fixture.get("forms", []):
        service.create_form(CustomFormCreate(**form_data))
        seeded += 1

    logger.info("Seeded %d custom form(s)", seeded)
    return seeded
