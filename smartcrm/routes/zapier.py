"""
Zapier polling trigger route.
"""
import logging

from flask import Blueprint, request, jsonify

from smartcrm.services.zapier import TriggerError, fetch_trigger_page

logger = logging.getLogger('routes.zapier')

bp = Blueprint('zapier', __name__)


@bp.route('/api/zapier/trigger', methods=['GET'])
def zapier_trigger():
    try:
        page = fetch_trigger_page(
            request.args.get('trigger'),
            cursor=request.args.get('cursor'),
            limit=request.args.get('limit'),
        )
        return jsonify(page)
    except TriggerError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error("Zapier trigger failed", exc_info=True)
        return jsonify({'error': 'Trigger failed', 'details': str(e)}), 500
