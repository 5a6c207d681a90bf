"""
Mutation boundary — turns service failures into the message the UI shows.
Nothing is retried; the session is rolled back so prior state stays intact.
"""
import logging
from contextlib import contextmanager

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@contextmanager
def mutation_errors(db: Session, action: str):
    """Wrap a write; ``action`` completes "Failed to ..." (e.g. "request card")."""
    try:
        yield
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=f"Failed to {action}: {exc}")
    except FileExistsError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Failed to {action}: {exc}")
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error while trying to %s", action)
        raise HTTPException(status_code=500, detail=f"Failed to {action}: {exc.__class__.__name__}")
