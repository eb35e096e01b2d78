"""
Inbound email router — AgentMail webhook payload → per-agent RQ job.

The webhook only parses and enqueues; run_inbound_agent() executes on an RQ
worker, so nothing here blocks the webhook response and no completion is
tracked.
"""
import logging
import re
from typing import Any, Dict, Optional, Tuple

from smartcrm.config import EMAIL_TO_AGENT_MAP
from smartcrm.database import get_session
from smartcrm.models.agent import OutboundAgent
from smartcrm.services.db import append_agent_log, find_or_create_contact_by_email

logger = logging.getLogger('agents.inbound')

_ADDRESS_RE = re.compile(r'^(.+?)\s*<(.+)>$')

AGENT_RESPONSES = {
    'sales_qualification': (
        "Hi {name}! Thanks for reaching out about our services. I'd love to learn more "
        "about your needs. Could you tell me about your current challenges and what "
        "you're hoping to achieve?"
    ),
    'support_response': (
        "Hi {name}! I'm here to help with your support question. Could you provide more "
        "details about the issue you're experiencing so I can assist you better?"
    ),
    'general_agent': "Hi {name}! Thank you for your email. How can I help you today?",
}


# ── Lazy RQ queue (no Redis connection until the first enqueue) ─────────────

_queue = None

def _get_queue():
    global _queue
    if _queue is None:
        from smartcrm.extensions import redis_client
        from rq import Queue
        _queue = Queue(connection=redis_client)
    return _queue


# ── Payload parsing ──────────────────────────────────────────────────────────

def parse_address(field: str) -> Tuple[Optional[str], str]:
    """'Jane Doe <jane@x.com>' → ('Jane Doe', 'jane@x.com'); bare addresses have no name."""
    field = (field or '').strip()
    if '<' in field:
        match = _ADDRESS_RE.match(field)
        if match:
            return match.group(1).strip(), match.group(2).strip()
    return None, field


def extract_email_data(message: Dict[str, Any]) -> Dict[str, Any]:
    sender_name, sender_email = parse_address(message.get('from_') or message.get('from') or '')

    to_field = message.get('to') or ''
    if isinstance(to_field, list):
        recipient_email = to_field[0] if to_field else ''
    else:
        recipient_email = parse_address(str(to_field))[1]

    return {
        'senderEmail': sender_email,
        'senderName': sender_name,
        'recipientEmail': recipient_email,
        'subject': message.get('subject'),
        'body': message.get('text') or message.get('body') or message.get('html'),
        'threadId': message.get('thread_id'),
        'messageId': message.get('message_id'),
    }


def dispatch_inbound_email(payload: Dict[str, Any]) -> Optional[str]:
    """
    Route one webhook payload. Returns the agent key a job was enqueued for,
    or None when the event is ignored.
    """
    event_type = payload.get('event_type') or payload.get('type')
    logger.info("Webhook received: %s", event_type)

    if event_type == 'message.sent':
        return None

    message = payload.get('message')
    if not isinstance(message, dict) or not message.get('message_id') or not message.get('inbox_id'):
        logger.warning("Invalid message data in webhook payload")
        return None

    email_data = extract_email_data(message)
    logger.info("From: %s To: %s", email_data['senderEmail'], email_data['recipientEmail'])

    if event_type != 'message.received' or not email_data['recipientEmail']:
        return None

    agent_key = EMAIL_TO_AGENT_MAP.get(email_data['recipientEmail'].lower())
    if not agent_key:
        logger.info("No agent found for email: %s", email_data['recipientEmail'])
        return None

    _get_queue().enqueue(run_inbound_agent, agent_key, email_data, job_timeout=300)
    logger.info("Routed message %s to agent %s", email_data['messageId'], agent_key)
    return agent_key


# ── RQ job ───────────────────────────────────────────────────────────────────

def generate_agent_response(agent_key: str, email_data: Dict[str, Any]) -> str:
    template = AGENT_RESPONSES.get(agent_key, AGENT_RESPONSES['general_agent'])
    return template.format(name=email_data.get('senderName') or 'there')


def run_inbound_agent(agent_key: str, email_data: Dict[str, Any]) -> Optional[str]:
    """RQ entry point: answer one inbound email as the given outbound agent."""
    session = get_session()
    try:
        agent = session.query(OutboundAgent).filter_by(key=agent_key).first()
    finally:
        session.close()

    if agent is None:
        logger.error("Agent %s not found", agent_key)
        return None

    contact = find_or_create_contact_by_email(email_data['senderEmail'], email_data.get('senderName'))
    response = generate_agent_response(agent_key, email_data)

    append_agent_log(
        contact['id'], agent_key,
        f"[{agent_key}] Reply to {email_data['senderEmail']} "
        f"re: {email_data.get('subject') or '(no subject)'}: {response}",
    )
    logger.info("Agent %s responded to %s", agent_key, email_data['senderEmail'])
    return response
