"""
Automation rule engine — maps a CRM trigger plus a rules dict to a list of
actions for the front end's automation runner to execute.
"""
import hashlib
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from smartcrm.config import CONTACT_OWNER_IDS

logger = logging.getLogger('services.automation')

DEFAULT_NURTURE_DELAY = 86400   # 1 day
DEFAULT_FOLLOWUP_DELAY = 3600   # 1 hour


def next_owner(contact_id) -> str:
    """Stable owner pick for a contact — same contact, same owner, no shared state."""
    digest = hashlib.sha256(str(contact_id).encode()).hexdigest()
    return CONTACT_OWNER_IDS[int(digest, 16) % len(CONTACT_OWNER_IDS)]


def handle_contact_created(contact: Dict[str, Any], rules: Dict[str, Any]) -> List[Dict[str, Any]]:
    actions = []

    if rules.get('sendWelcomeEmail'):
        actions.append({
            'type': 'send_email',
            'template': 'welcome',
            'to': contact.get('email'),
            'contactId': contact.get('id'),
            'priority': 'high',
        })

    if rules.get('addToNurture'):
        actions.append({
            'type': 'add_to_sequence',
            'sequence': 'nurture',
            'contactId': contact.get('id'),
            'delay': rules.get('nurtureDelay') or DEFAULT_NURTURE_DELAY,
        })

    if rules.get('autoAssign'):
        actions.append({
            'type': 'assign_owner',
            'contactId': contact.get('id'),
            'ownerId': next_owner(contact.get('id')),
        })

    return actions


def handle_email_opened(data: Dict[str, Any], rules: Dict[str, Any]) -> List[Dict[str, Any]]:
    if not rules.get('followUpSequence'):
        return []
    return [{
        'type': 'schedule_followup',
        'contactId': data.get('contactId'),
        'delay': rules.get('followUpDelay') or DEFAULT_FOLLOWUP_DELAY,
        'template': 'followup',
    }]


def handle_form_submitted(data: Dict[str, Any], rules: Dict[str, Any]) -> List[Dict[str, Any]]:
    form_data = data.get('formData') or {}
    actions = [{
        'type': 'create_lead',
        'data': form_data,
        'source': 'form',
        'priority': 'medium',
    }]

    if rules.get('notifyTeam'):
        actions.append({
            'type': 'notify_team',
            'message': f"New form submission from {form_data.get('email')}",
            'channel': rules.get('notificationChannel') or 'leads',
        })

    return actions


def handle_meeting_booked(data: Dict[str, Any], rules: Dict[str, Any]) -> List[Dict[str, Any]]:
    actions = [{
        'type': 'add_to_calendar',
        'meeting': data.get('meeting'),
        'contactId': data.get('contactId'),
    }]

    if rules.get('sendConfirmation'):
        actions.append({
            'type': 'send_email',
            'template': 'meeting_confirmation',
            'to': data.get('contactEmail'),
            'meeting': data.get('meeting'),
        })

    return actions


TRIGGER_HANDLERS = {
    'contact_created': handle_contact_created,
    'email_opened': handle_email_opened,
    'form_submitted': handle_form_submitted,
    'meeting_booked': handle_meeting_booked,
}


def process_automation(trigger: str, data: Dict[str, Any], rules: Dict[str, Any] = None) -> List[Dict[str, Any]]:
    """Return the actions a trigger produces; an unknown trigger yields a single log action."""
    handler = TRIGGER_HANDLERS.get(trigger)
    if handler is None:
        logger.info("Unknown automation trigger: %s", trigger)
        return [{
            'type': 'log',
            'message': f'Unknown trigger: {trigger}',
            'timestamp': datetime.now(timezone.utc).isoformat(),
        }]
    if not isinstance(data, dict):
        raise ValueError('data must be an object')
    return handler(data, rules or {})
