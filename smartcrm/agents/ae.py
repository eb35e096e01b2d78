"""
AE (account executive) agent — one relationship-building pass over a contact.

Reads the contact, its most recent deal and the last agent-log lines for the
contact (the agent's memory), asks GPT-4o for next steps, then records the
run in agent_logs and moves the contact's autopilot into
'relationship_building'.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from smartcrm.services.db import (
    append_agent_log, get_latest_deal_for_contact, recent_agent_logs, update_contact,
)
from smartcrm.services.openai_client import complete_prompt

logger = logging.getLogger('agents.ae')

AGENT_NAME = 'ae_agent'
MODEL = 'gpt-4o'
TEMPERATURE = 0.7
MAX_TOKENS = 1500
RESPONSE_PREVIEW_CHARS = 500
LOG_PREVIEW_CHARS = 200
MEMORY_LINES_IN_PROMPT = 5
AUTOPILOT_STATE = 'relationship_building'

SYSTEM_PROMPT = (
    "You are an Account Executive (AE) agent. Focus on closing deals, building "
    "relationships, and moving opportunities forward. Recommend concrete follow-up "
    "emails, meetings and deal status updates."
)


def _memory_line(entry: Dict[str, Any]) -> str:
    day = (entry.get('created_at') or '')[:10] or 'unknown date'
    message = (entry.get('message') or 'No content')[:100]
    return f"- {day}: {entry.get('agent') or 'agent'} - {message}"


def build_ae_prompt(contact: Dict[str, Any], deal: Optional[Dict[str, Any]],
                    memory: List[Dict[str, Any]]) -> str:
    prompt = f"""You are an Account Executive (AE) agent following up with a qualified lead.

Contact Information:
- Name: {contact.get('name') or 'Unknown'}
- Email: {contact.get('email') or 'Not provided'}
- Company: {contact.get('company') or 'Not provided'}
- Title: {contact.get('title') or 'Not provided'}
- Status: {contact.get('status') or 'Unknown'}
- Interest Level: {contact.get('interest_level') or 'Unknown'}

"""

    if deal:
        prompt += f"""Deal Information:
- Deal Name: {deal.get('title') or 'Unnamed Deal'}
- Value: {deal.get('value') or 'Not specified'}
- Stage: {deal.get('stage') or 'Not specified'}
- Close Date: {deal.get('expected_close_date') or 'Not specified'}

"""

    if memory:
        lines = '\n'.join(_memory_line(m) for m in memory[:MEMORY_LINES_IN_PROMPT])
        prompt += f"""Recent Interaction History:
{lines}

"""

    prompt += """Your Goals as AE Agent:
1. Build strong relationship with the contact
2. Understand their specific needs and pain points
3. Move the deal forward toward closure
4. Schedule meetings or calls when appropriate
5. Provide value through insights and solutions

Current Task: Decide the appropriate follow-up actions based on the contact's status and history.

Focus on being helpful, professional, and closing-oriented while maintaining relationship-building approach."""
    return prompt


def run_ae_agent(contact: Dict[str, Any]) -> Dict[str, Any]:
    """
    Execute the AE agent for an already-loaded contact.

    On failure an error line is written to agent_logs before the exception
    propagates to the route.
    """
    contact_id = contact['id']
    try:
        deal = get_latest_deal_for_contact(contact_id)
        memory = recent_agent_logs(contact_id, limit=10)

        reply = complete_prompt(
            build_ae_prompt(contact, deal, memory),
            system=SYSTEM_PROMPT,
            model=MODEL,
            temperature=TEMPERATURE,
            max_tokens=MAX_TOKENS,
        )
        response = reply['content']

        append_agent_log(
            contact_id, AGENT_NAME,
            f"[AE Agent] Executed for contact {contact.get('name')}. "
            f"Response: {response[:LOG_PREVIEW_CHARS]}...",
        )
        update_contact(contact_id, autopilot_state=AUTOPILOT_STATE)
    except Exception as e:
        append_agent_log(contact_id, AGENT_NAME, f"[AE Agent Error] {e}", level='error')
        raise

    logger.info("AE agent ran for contact %s (%d tokens)", contact_id, reply['tokens'])
    return {
        'success': True,
        'contactId': contact_id,
        'response': response[:RESPONSE_PREVIEW_CHARS],
        'executedAt': datetime.now(timezone.utc).isoformat(),
    }
