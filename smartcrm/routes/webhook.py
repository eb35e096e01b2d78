"""
Webhook routes — AgentMail inbound email.

Always answers 200 'OK' so AgentMail never retries; routing problems are
logged instead.
"""
import logging

from flask import Blueprint, request

from smartcrm.agents.inbound import dispatch_inbound_email

logger = logging.getLogger('routes.webhook')

bp = Blueprint('webhook', __name__)


@bp.route('/webhook/agentmail', methods=['POST'])
def agentmail_webhook():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        logger.warning("AgentMail webhook body was not a JSON object")
        return 'OK', 200

    try:
        dispatch_inbound_email(payload)
    except Exception:
        logger.error("Webhook processing error", exc_info=True)
    return 'OK', 200
