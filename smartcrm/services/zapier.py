"""
Zapier polling triggers — newest-first pages with a keyset cursor.

Each trigger maps to (model, sort column, row formatter). A page is the
`limit` newest rows strictly older than the cursor, so consecutive pages
never overlap. The next cursor is the sort value of the last row returned.
"""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from smartcrm.config import ZAPIER_DEFAULT_LIMIT, ZAPIER_MAX_LIMIT
from smartcrm.database import get_session
from smartcrm.models.contact import Contact
from smartcrm.models.deal import Deal
from smartcrm.models.events import AutomationTrigger, EmailEvent, FormSubmission

logger = logging.getLogger('services.zapier')


class TriggerError(ValueError):
    """Bad trigger name, cursor or limit — a client error."""


class TriggerSpec(NamedTuple):
    model: Any
    sort_column: str
    formatter: Callable[[Any], Dict[str, Any]]


def _iso(value) -> Optional[str]:
    return value.isoformat() if isinstance(value, datetime) else value


def _contact_ref(contact: Optional[Contact], with_company: bool = False) -> Optional[Dict[str, Any]]:
    if contact is None:
        return None
    ref = {
        'id': contact.id,
        'first_name': contact.first_name,
        'last_name': contact.last_name,
        'email': contact.email,
    }
    if with_company:
        ref['company'] = contact.company
    return ref


# ── Row formatters ───────────────────────────────────────────────────────────

def format_new_contact(contact: Contact) -> Dict[str, Any]:
    row = {
        'id': contact.id,
        'firstName': contact.first_name,
        'lastName': contact.last_name,
        'email': contact.email,
        'phone': contact.phone,
        'title': contact.title,
        'company': contact.company,
        'industry': contact.industry,
        'status': contact.status,
        'interestLevel': contact.interest_level,
        'aiScore': contact.ai_score,
        'source': contact.source,
        'createdAt': _iso(contact.created_at),
        'updatedAt': _iso(contact.updated_at),
    }
    if isinstance(contact.custom_fields, dict):
        row.update(contact.custom_fields)
    return row


def format_updated_contact(contact: Contact) -> Dict[str, Any]:
    return {
        'id': contact.id,
        'firstName': contact.first_name,
        'lastName': contact.last_name,
        'email': contact.email,
        'status': contact.status,
        'updatedAt': _iso(contact.updated_at),
    }


def format_deal(deal: Deal) -> Dict[str, Any]:
    return {
        'id': deal.id,
        'title': deal.title,
        'value': deal.value,
        'currency': deal.currency,
        'stage': deal.stage,
        'contact': _contact_ref(deal.contact, with_company=True),
        'expectedCloseDate': _iso(deal.expected_close_date),
        'createdAt': _iso(deal.created_at),
        'source': deal.source,
    }


def format_email_event(event: EmailEvent) -> Dict[str, Any]:
    return {
        'id': event.id,
        'emailId': event.email_id,
        'contact': _contact_ref(event.contact),
        'eventType': event.event_type,
        'linkUrl': event.link_url,
        'userAgent': event.user_agent,
        'ipAddress': event.ip_address,
        'deviceInfo': event.device_info,
        'createdAt': _iso(event.created_at),
    }


def format_form_submission(submission: FormSubmission) -> Dict[str, Any]:
    return {
        'id': submission.id,
        'formId': submission.form_id,
        'contact': _contact_ref(submission.contact),
        'responses': submission.responses,
        'submittedAt': _iso(submission.submitted_at),
        'source': submission.source,
    }


def format_automation_trigger(trigger: AutomationTrigger) -> Dict[str, Any]:
    return {
        'id': trigger.id,
        'eventType': trigger.event_type,
        'recordId': trigger.record_id,
        'contact': _contact_ref(trigger.contact),
        'source': trigger.source,
        'webhookId': trigger.webhook_id,
        'triggeredAt': _iso(trigger.triggered_at),
        'metadata': trigger.meta,
    }


TRIGGERS = {
    'new_contacts':        TriggerSpec(Contact, 'created_at', format_new_contact),
    'updated_contacts':    TriggerSpec(Contact, 'updated_at', format_updated_contact),
    'new_deals':           TriggerSpec(Deal, 'created_at', format_deal),
    'email_events':        TriggerSpec(EmailEvent, 'created_at', format_email_event),
    'form_submissions':    TriggerSpec(FormSubmission, 'submitted_at', format_form_submission),
    'automation_triggers': TriggerSpec(AutomationTrigger, 'triggered_at', format_automation_trigger),
}


# ── Parameter parsing ────────────────────────────────────────────────────────

def parse_limit(raw) -> int:
    if raw is None or raw == '':
        return ZAPIER_DEFAULT_LIMIT
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        raise TriggerError(f'Invalid limit: {raw}')
    if limit < 1:
        raise TriggerError(f'Invalid limit: {raw}')
    return min(limit, ZAPIER_MAX_LIMIT)


def parse_cursor(raw) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(str(raw).replace('Z', '+00:00'))
    except ValueError:
        raise TriggerError(f'Invalid cursor: {raw}')


# ── Polling ──────────────────────────────────────────────────────────────────

def fetch_trigger_page(trigger: str, cursor: str = None, limit=None) -> Dict[str, Any]:
    """
    One page for a trigger.

    Returns {'data', 'cursor', 'nextCursor', 'has_more', 'count'}; `cursor`
    mirrors `nextCursor` for clients that still read the old key.
    Raises TriggerError for an unknown trigger or bad parameters.
    """
    if not trigger:
        raise TriggerError('Trigger type is required')
    spec = TRIGGERS.get(trigger)
    if spec is None:
        raise TriggerError(f'Unknown trigger type: {trigger}')

    page_size = parse_limit(limit)
    before = parse_cursor(cursor)
    column = getattr(spec.model, spec.sort_column)

    session = get_session()
    try:
        query = session.query(spec.model).filter(column.isnot(None))
        if before is not None:
            query = query.filter(column < before)
        rows = query.order_by(column.desc()).limit(page_size).all()

        data: List[Dict[str, Any]] = [spec.formatter(row) for row in rows]
        next_cursor = _iso(getattr(rows[-1], spec.sort_column)) if rows else None
    finally:
        session.close()

    logger.info("Zapier trigger %s: %d rows (cursor=%s)", trigger, len(data), cursor)
    return {
        'data': data,
        'cursor': next_cursor,
        'nextCursor': next_cursor,
        'has_more': len(data) == page_size,
        'count': len(data),
    }
