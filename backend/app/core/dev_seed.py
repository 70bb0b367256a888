import os

from sqlalchemy.orm import Session

from backend.app.core.logging import get_logger
from backend.app.core.security import get_password_hash
from backend.app.models.user import User, UserRole

logger = get_logger(__name__)

DEFAULT_DEV_PASSWORD = "Secret123!"
DEFAULT_DEV_USERS = [
    ("payer@test.com", "Dev Payer", UserRole.PAYER),
    ("freelancer@test.com", "Dev Freelancer", UserRole.FREELANCER),
]


def ensure_default_dev_users(db: Session) -> None:
    """
    Create a default payer and freelancer for local development if they do not exist.
    Skips execution when running under pytest to avoid altering test expectations.
    """
    if os.getenv("PYTEST_CURRENT_TEST"):
        return

    created = []
    for email, name, role in DEFAULT_DEV_USERS:
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            continue

        user = User(
            email=email,
            name=name,
            role=role.value,
            hashed_password=get_password_hash(DEFAULT_DEV_PASSWORD),
            is_active=True,
        )
        db.add(user)
        created.append(email)

    if created:
        db.commit()
        logger.info("dev_users_seeded", emails=created)
