from __future__ import annotations

import logging

from . import models
from .db import SessionLocal, unit_of_work
from .models import Role
from .settings import FOLIO_SEED_ADMIN_EMAIL, FOLIO_SEED_ADMIN_NAME

logger = logging.getLogger(__name__)


def ensure_seed_data() -> None:
    """
    Create the bootstrap administrator named by FOLIO_SEED_ADMIN_EMAIL.

    Does nothing when the variable is unset. An existing account with that
    email is left untouched, so removing admin rights later is not undone by
    a restart.
    """
    if not FOLIO_SEED_ADMIN_EMAIL:
        logger.info("ensure_seed_data: No seed admin configured.")
        return

    email = FOLIO_SEED_ADMIN_EMAIL.strip().lower()
    db = SessionLocal()
    try:
        existing = db.query(models.User.id).filter(models.User.email == email).first()
        if existing is not None:
            logger.info(f"ensure_seed_data: Seed admin {email} already exists.")
            return
        with unit_of_work(db):
            db.add(models.User(name=FOLIO_SEED_ADMIN_NAME, email=email, role=Role.admin))
        logger.info(f"ensure_seed_data: Created seed admin {email}.")
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level="INFO")
    ensure_seed_data()
