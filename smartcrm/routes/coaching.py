"""
Negotiation coach route.
"""
import logging

from flask import Blueprint, request, jsonify

from smartcrm.agents.negotiation import coach_negotiation
from smartcrm.services.db import get_deal

logger = logging.getLogger('routes.coaching')

bp = Blueprint('coaching', __name__)


@bp.route('/api/agents/negotiation-coach', methods=['POST'])
def negotiation_coach():
    data = request.get_json(silent=True) or {}
    deal_id = data.get('deal_id')
    if not deal_id:
        return jsonify({'error': 'Deal ID is required'}), 400

    try:
        deal = get_deal(deal_id)
        if deal is None:
            return jsonify({'error': 'Deal not found'}), 404
        result = coach_negotiation(
            deal,
            negotiation_stage=data.get('negotiation_stage'),
            buyer_persona=data.get('buyer_persona'),
            deal_value=data.get('deal_value'),
            current_objections=data.get('current_objections'),
        )
        return jsonify(result)
    except Exception as e:
        logger.error("Negotiation coach failed for deal %s", deal_id, exc_info=True)
        return jsonify({'error': 'Failed to generate negotiation coaching', 'details': str(e)}), 500
