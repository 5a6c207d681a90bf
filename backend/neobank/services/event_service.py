"""
Event Service — writes and reads the onboarding case timeline.
"""
import logging
from datetime import datetime
from typing import Optional, Dict

from sqlalchemy.orm import Session

from neobank.models.onboarding import OnboardingEvent

logger = logging.getLogger(__name__)

ACTORS = ("user", "system")


class EventService:
    """Appends timeline events to onboarding cases."""

    @staticmethod
    def log(
        db: Session,
        case_id: str,
        event_type: str,
        actor: str = "user",
        metadata: Optional[Dict] = None,
        commit: bool = True,
    ) -> OnboardingEvent:
        """Record a case event.

        Args:
            db: Database session.
            case_id: Case the event belongs to.
            event_type: Event identifier (e.g. case_created, case_submitted).
            actor: "user" or "system".
            metadata: Free-form details shown on the timeline.
            commit: Commit immediately; pass False to join the caller's transaction.

        Returns:
            The created OnboardingEvent.
        """
        if actor not in ACTORS:
            raise ValueError(f"Unknown event actor '{actor}'")

        event = OnboardingEvent(
            case_id=case_id,
            event_type=event_type,
            actor=actor,
            event_metadata=metadata or {},
            created_at=datetime.utcnow(),
        )
        db.add(event)
        if commit:
            db.commit()
            db.refresh(event)
        else:
            db.flush()

        logger.info("Case %s: %s (%s)", case_id, event_type, actor)
        return event

    @staticmethod
    def get_timeline(db: Session, case_id: str) -> list[OnboardingEvent]:
        """All events for a case, newest first."""
        return (
            db.query(OnboardingEvent)
            .filter(OnboardingEvent.case_id == case_id)
            .order_by(OnboardingEvent.created_at.desc(), OnboardingEvent.id.desc())
            .all()
        )
