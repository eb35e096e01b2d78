"""
Automation route — rule engine that turns a CRM trigger into actions.
"""
import logging
from datetime import datetime, timezone

from flask import Blueprint, request, jsonify

from smartcrm.services.automation import process_automation

logger = logging.getLogger('routes.automation')

bp = Blueprint('automation', __name__)


@bp.route('/api/automation', methods=['POST'])
def automation():
    data = request.get_json(silent=True) or {}
    trigger = data.get('trigger')
    try:
        actions = process_automation(trigger, data.get('data') or {}, data.get('rules') or {})
    except Exception as e:
        logger.warning("Automation processing failed for %s: %s", trigger, e)
        return jsonify({'error': 'Automation processing failed', 'details': str(e)}), 400

    return jsonify({
        'success': True,
        'trigger': trigger,
        'actions': actions,
        'processedAt': datetime.now(timezone.utc).isoformat(),
    })
