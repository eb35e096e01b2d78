"""
AE agent route.
"""
import logging

from flask import Blueprint, request, jsonify

from smartcrm.agents.ae import run_ae_agent
from smartcrm.services.db import get_contact

logger = logging.getLogger('routes.ae')

bp = Blueprint('ae', __name__)


@bp.route('/api/ae/run', methods=['POST'])
def run_ae():
    data = request.get_json(silent=True) or {}
    contact_id = data.get('contactId')
    if not contact_id:
        return jsonify({'error': 'contactId is required'}), 400

    try:
        contact = get_contact(contact_id)
        if contact is None:
            return jsonify({'error': 'Contact not found'}), 404
        return jsonify(run_ae_agent(contact))
    except Exception as e:
        logger.error("AE agent execution failed for %s", contact_id, exc_info=True)
        return jsonify({'error': 'AE agent execution failed', 'details': str(e)}), 500
