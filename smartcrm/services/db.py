"""
Postgres read/write helpers used by the routes and agents.

Reads return plain dicts (or None) so callers never hold a detached ORM
object. Context reads that only enrich a prompt (activities, agent memory)
degrade to an empty list on DB errors; everything else propagates.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from smartcrm.database import get_session
from smartcrm.models.activity import Activity
from smartcrm.models.agent import AgentLog
from smartcrm.models.contact import Contact
from smartcrm.models.deal import Deal
from smartcrm.models.video import Video

logger = logging.getLogger('services.db')


def get_contact(contact_id: str) -> Optional[Dict[str, Any]]:
    session = get_session()
    try:
        contact = session.get(Contact, contact_id)
        return contact.to_dict() if contact else None
    finally:
        session.close()


def get_deal(deal_id: str) -> Optional[Dict[str, Any]]:
    session = get_session()
    try:
        deal = session.get(Deal, deal_id)
        return deal.to_dict() if deal else None
    finally:
        session.close()


def get_latest_deal_for_contact(contact_id: str) -> Optional[Dict[str, Any]]:
    session = get_session()
    try:
        deal = (
            session.query(Deal)
            .filter_by(contact_id=contact_id)
            .order_by(Deal.created_at.desc())
            .first()
        )
        return deal.to_dict() if deal else None
    finally:
        session.close()


def recent_activities(contact_id: str, limit: int = 10) -> List[Dict[str, Any]]:
    """Newest-first activity history. Empty list if the read fails."""
    try:
        session = get_session()
        try:
            rows = (
                session.query(Activity)
                .filter_by(contact_id=contact_id)
                .order_by(Activity.created_at.desc())
                .limit(limit)
                .all()
            )
            return [row.to_dict() for row in rows]
        finally:
            session.close()
    except Exception:
        logger.warning("Could not fetch activities for contact %s", contact_id, exc_info=True)
        return []


def recent_agent_logs(contact_id: str, limit: int = 10) -> List[Dict[str, Any]]:
    """Newest-first agent log lines — the AE agent's memory. Empty list on error."""
    try:
        session = get_session()
        try:
            rows = (
                session.query(AgentLog)
                .filter_by(contact_id=contact_id)
                .order_by(AgentLog.created_at.desc())
                .limit(limit)
                .all()
            )
            return [row.to_dict() for row in rows]
        finally:
            session.close()
    except Exception:
        logger.warning("Could not fetch agent logs for contact %s", contact_id, exc_info=True)
        return []


def append_agent_log(contact_id: Optional[str], agent: str, message: str, level: str = 'info'):
    """Append an agent trace line. A failed write is logged, never raised."""
    session = get_session()
    try:
        session.add(AgentLog(contact_id=contact_id, agent=agent, level=level, message=message))
        session.commit()
    except Exception:
        session.rollback()
        logger.error("Failed to write agent log for contact %s", contact_id, exc_info=True)
    finally:
        session.close()


def update_contact(contact_id: str, **fields) -> bool:
    """Apply column updates to a contact. Returns False if the contact does not exist."""
    session = get_session()
    try:
        contact = session.get(Contact, contact_id)
        if contact is None:
            return False
        for key, value in fields.items():
            setattr(contact, key, value)
        contact.updated_at = datetime.now(timezone.utc)
        session.commit()
        return True
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def find_or_create_contact_by_email(email: str, name: str = None) -> Dict[str, Any]:
    """Look up a contact by email; create a medium-interest lead if none exists."""
    session = get_session()
    try:
        contact = session.query(Contact).filter_by(email=email).first()
        if contact is None:
            contact = Contact(
                name=name or email.split('@')[0],
                email=email,
                status='lead',
                interest_level='medium',
            )
            session.add(contact)
            session.commit()
            logger.info("Created lead contact %s for %s", contact.id, email)
        return contact.to_dict()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def insert_video(**fields) -> Dict[str, Any]:
    session = get_session()
    try:
        video = Video(**fields)
        session.add(video)
        session.commit()
        return video.to_dict()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
