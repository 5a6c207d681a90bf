"""
Database Engine & Session Management
SQLAlchemy setup with dependency injection for FastAPI.
"""
import os
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session

from neobank.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

_connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    _connect_args = {"check_same_thread": False}  # Required for SQLite
    db_path = settings.DATABASE_URL.replace("sqlite:///", "")
    if db_path and db_path != "sqlite://":
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args,
    echo=settings.DEBUG,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency: yields a database session, auto-closes on finish."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables and the demo organization. Called once at startup."""
    from neobank import models as _models  # noqa: F401

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed_demo_data(db)
    finally:
        db.close()


def seed_demo_data(db: Session) -> None:
    """Insert the demo organization and its primary account if missing."""
    from neobank.models.organization import Organization, Account

    if db.get(Organization, settings.DEMO_ORG_ID) is None:
        db.add(Organization(
            id=settings.DEMO_ORG_ID,
            name=settings.DEMO_ORG_NAME,
            legal_form="llc",
            jurisdiction="Dubai",
        ))
        logger.info("Seeded demo organization %s", settings.DEMO_ORG_ID)

    if db.get(Account, settings.DEMO_ACCOUNT_ID) is None:
        db.add(Account(
            id=settings.DEMO_ACCOUNT_ID,
            organization_id=settings.DEMO_ORG_ID,
            account_name="Business Current Account",
            account_number="1012345678",
            iban="AE070331234567890123456",
            balance=0.0,
            available_balance=0.0,
            currency=settings.DEFAULT_CURRENCY,
            is_primary=True,
        ))
        logger.info("Seeded demo account %s", settings.DEMO_ACCOUNT_ID)

    db.commit()
