"""
SDR email agents — cold email, follow-up sequence, reactivation.

Each agent builds one prompt from the contact row (plus recent activities for
follow-up and reactivation), asks GPT-4o for {"subject", "body"} JSON, and
degrades to the raw reply under a synthesized subject line when the model
does not return parseable JSON.
"""
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from smartcrm.services.openai_client import complete_prompt, parse_json_reply

logger = logging.getLogger('agents.sdr')

MODEL = 'gpt-4o'
TEMPERATURE = 0.7
MAX_TOKENS = 1000

REPLY_ACTIVITY_TYPES = ('email_reply', 'email_received')

EMPTY_REPLY_BODY = 'Email content could not be generated. Please try again.'


@dataclass
class EmailDraft:
    """Generated email plus diagnostics for the UI's debug panel."""
    subject: str
    body: str
    debug: Dict[str, Any] = field(default_factory=dict)


# ── Shared helpers ───────────────────────────────────────────────────────────

def contact_display_name(contact: Dict[str, Any]) -> str:
    return contact.get('first_name') or contact.get('name') or 'there'


def days_since(timestamp: Optional[str], default: int, now: datetime = None) -> int:
    """Whole days between an ISO timestamp and now; `default` when missing or unparseable."""
    if not timestamp:
        return default
    try:
        then = datetime.fromisoformat(str(timestamp).replace('Z', '+00:00'))
    except ValueError:
        return default
    if then.tzinfo is None:
        then = then.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return int((now - then).total_seconds() // 86400)


def _to_json(value) -> str:
    return json.dumps(value, default=str)


def _draft_from_reply(content: str, fallback_subject: str, debug: Dict[str, Any]) -> EmailDraft:
    if not (content or '').strip():
        logger.warning("Model returned an empty reply, using placeholder body")
        debug['emptyReply'] = True
        return EmailDraft(subject=fallback_subject, body=EMPTY_REPLY_BODY, debug=debug)

    try:
        parsed = parse_json_reply(content)
    except ValueError as e:
        logger.info("Reply was not JSON, using raw text (%s)", e)
        debug['parseError'] = str(e)
        return EmailDraft(subject=fallback_subject, body=content, debug=debug)

    return EmailDraft(
        subject=parsed.get('subject') or fallback_subject,
        body=parsed.get('body') or content,
        debug=debug,
    )


def _generate(prompt: str) -> str:
    return complete_prompt(prompt, model=MODEL, temperature=TEMPERATURE, max_tokens=MAX_TOKENS)['content']


# ── Cold email ───────────────────────────────────────────────────────────────

def build_cold_email_prompt(contact: Dict[str, Any]) -> str:
    name = contact_display_name(contact)
    company = contact.get('company') or 'your company'
    title = contact.get('title') or ''

    details = _to_json({
        'name': name,
        'company': company,
        'title': title,
        'email': contact.get('email'),
        'industry': contact.get('industry'),
        'notes': contact.get('notes'),
    })

    return f"""Generate a personalized cold email to {name}{f' ({title})' if title else ''} at {company}.

Contact details: {details}

The cold email should:
- Have an attention-grabbing subject line
- Open with something relevant to them or their company
- Clearly articulate value proposition
- Include a soft call-to-action (not pushy)
- Be concise (under 150 words)
- Sound human, not templated

Return JSON with "subject" and "body" fields."""


def generate_cold_email(contact: Dict[str, Any]) -> EmailDraft:
    name = contact_display_name(contact)
    company = contact.get('company') or 'your company'

    content = _generate(build_cold_email_prompt(contact))
    return _draft_from_reply(
        content,
        fallback_subject=f'Quick question for {name} at {company}',
        debug={'model': MODEL, 'contactName': name, 'company': company},
    )


# ── Follow-up sequence ───────────────────────────────────────────────────────

# step number → (opening line, guidance bullets)
FOLLOW_UP_STEPS = {
    1: ('Generate a gentle first follow-up email', [
        'Reference any previous conversation',
        'Provide additional value or resources',
        'Ask a specific question to encourage response',
        'Keep it concise and friendly',
    ]),
    2: ('Generate a second follow-up email', [
        'Acknowledge that this is a second attempt',
        'Offer something new or different value',
        'Create urgency or scarcity if appropriate',
        'Be more direct about next steps',
    ]),
    3: ('Generate a third follow-up email', [
        'Be more assertive about the value proposition',
        'Include social proof or case studies if relevant',
        "Give them an easy out if they're not interested",
        'Consider this might be the last attempt',
    ]),
}


def _activity_context(activities: List[Dict[str, Any]], default_gap_days: int) -> Dict[str, Any]:
    last_activity = activities[0] if activities else None
    return {
        'last_activity': last_activity,
        'days_since_last_activity': days_since(
            last_activity.get('created_at') if last_activity else None, default_gap_days,
        ),
        'has_replied': any(a.get('type') in REPLY_ACTIVITY_TYPES for a in activities),
    }


def build_follow_up_prompt(contact: Dict[str, Any], follow_up_number: int,
                           activities: List[Dict[str, Any]]) -> str:
    ctx = _activity_context(activities, default_gap_days=30)
    name = contact.get('first_name') or contact.get('name')
    last = _to_json(ctx['last_activity']) if ctx['last_activity'] else 'No recent activity'

    context_block = f"""Contact details: {_to_json(contact)}
Last activity: {last}
Days since last contact: {ctx['days_since_last_activity']}
Has replied before: {str(ctx['has_replied']).lower()}"""

    step = FOLLOW_UP_STEPS.get(follow_up_number)
    if step:
        opening, bullets = step
        guidance = 'The follow-up should:\n' + '\n'.join(f'- {b}' for b in bullets)
    else:
        opening = f'Generate a follow-up email (attempt #{follow_up_number})'
        guidance = 'Create a compelling follow-up that re-engages the contact.'

    return f"""{opening} to {name} at {contact.get('company')}.

{context_block}

{guidance}

Return JSON with "subject" and "body" fields."""


def generate_follow_up(contact: Dict[str, Any], follow_up_number: int,
                       activities: List[Dict[str, Any]]) -> EmailDraft:
    ctx = _activity_context(activities, default_gap_days=30)
    content = _generate(build_follow_up_prompt(contact, follow_up_number, activities))
    return _draft_from_reply(
        content,
        fallback_subject=f"Follow-up #{follow_up_number} - {contact.get('company') or contact_display_name(contact)}",
        debug={
            'followUpNumber': follow_up_number,
            'daysSinceLastActivity': ctx['days_since_last_activity'],
            'hasReplied': ctx['has_replied'],
            'lastActivityType': ctx['last_activity'].get('type') if ctx['last_activity'] else None,
        },
    )


# ── Reactivation ─────────────────────────────────────────────────────────────

def build_reactivation_prompt(contact: Dict[str, Any], activities: List[Dict[str, Any]]) -> str:
    ctx = _activity_context(activities, default_gap_days=90)
    name = contact.get('first_name') or contact.get('name')
    last = _to_json(ctx['last_activity']) if ctx['last_activity'] else 'No recent activity'

    return f"""Generate a reactivation email to re-engage {name} at {contact.get('company')}.

Contact details: {_to_json(contact)}
Last activity: {last}
Days since last contact: {ctx['days_since_last_activity']}

The reactivation email should:
- Reference the time gap since last contact
- Provide new value or updates that might interest them
- Ask about their current situation or needs
- Suggest reconnecting for a conversation
- Be warm and non-pushy

Return JSON with "subject" and "body" fields."""


def generate_reactivation(contact: Dict[str, Any], activities: List[Dict[str, Any]]) -> EmailDraft:
    ctx = _activity_context(activities, default_gap_days=90)
    logger.info("Generating reactivation email for contact %s", contact.get('id'))
    content = _generate(build_reactivation_prompt(contact, activities))
    return _draft_from_reply(
        content,
        fallback_subject=f'Checking back in, {contact_display_name(contact)}',
        debug={
            'daysSinceLastActivity': ctx['days_since_last_activity'],
            'activitiesCount': len(activities),
        },
    )
