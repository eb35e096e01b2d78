"""
Email engagement scoring route.
"""
import logging
from datetime import datetime, timezone

from flask import Blueprint, request, jsonify

from smartcrm.services.db import update_contact
from smartcrm.services.engagement import apply_engagement_actions, calculate_engagement_score

logger = logging.getLogger('routes.engagement')

bp = Blueprint('engagement', __name__)

NUMERIC_METRICS = ('openRate', 'clickRate', 'responseRate', 'spamComplaints')


def _invalid_metric(metrics):
    """Name of the first numeric metric that holds a non-number, else None."""
    for key in NUMERIC_METRICS:
        value = metrics.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return key
    return None


@bp.route('/api/email/engagement-score', methods=['POST'])
def engagement_score():
    data = request.get_json(silent=True) or {}
    contact = data.get('contact') if isinstance(data.get('contact'), dict) else {}
    contact_id = contact.get('id')
    if not contact_id:
        return jsonify({'error': 'Contact ID is required'}), 400

    metrics = data.get('emailMetrics') if isinstance(data.get('emailMetrics'), dict) else {}
    bad_key = _invalid_metric(metrics)
    if bad_key:
        return jsonify({'error': f'{bad_key} must be a number'}), 400
    logger.info("Processing email engagement scoring for contact %s", contact_id)

    try:
        now = datetime.now(timezone.utc)
        engagement = calculate_engagement_score(metrics, now=now)

        found = update_contact(
            contact_id,
            email_engagement_score=engagement['overall'],
            last_email_engagement=now,
            email_metrics=metrics,
        )
        if not found:
            return jsonify({'error': 'Contact not found'}), 404

        actions = apply_engagement_actions(contact_id, engagement, now=now)
        return jsonify({
            'engagementScore': engagement,
            'actionsTriggered': engagement['recommendations'],
            'actions': actions,
        })
    except Exception as e:
        logger.error("Email engagement scoring failed for %s", contact_id, exc_info=True)
        return jsonify({'error': 'Email engagement scoring failed', 'details': str(e)}), 500
