"""
SDR routes — cold email, follow-up and reactivation drafts for a contact.
"""
import logging

from flask import Blueprint, request, jsonify

from smartcrm.agents.sdr import generate_cold_email, generate_follow_up, generate_reactivation
from smartcrm.services.db import get_contact, recent_activities

logger = logging.getLogger('routes.sdr')

bp = Blueprint('sdr', __name__)


def _load_contact():
    """Return (contact, error_response) for the request's contactId."""
    data = request.get_json(silent=True) or {}
    contact_id = data.get('contactId')
    if not contact_id:
        return None, (jsonify({'error': 'Contact ID is required'}), 400)
    contact = get_contact(contact_id)
    if contact is None:
        return None, (jsonify({'error': 'Contact not found'}), 404)
    return contact, None


@bp.route('/api/sdr/cold-email', methods=['POST'])
def cold_email():
    try:
        contact, error = _load_contact()
        if error:
            return error
        draft = generate_cold_email(contact)
        return jsonify({
            'contactId': contact['id'],
            'subject': draft.subject,
            'body': draft.body,
            'debug': draft.debug,
        })
    except Exception as e:
        logger.error("Cold email SDR failed", exc_info=True)
        return jsonify({'error': 'Cold email generation failed', 'details': str(e)}), 500


@bp.route('/api/sdr/follow-up', methods=['POST'])
def follow_up():
    try:
        contact, error = _load_contact()
        if error:
            return error
        data = request.get_json(silent=True) or {}
        try:
            follow_up_number = int(data.get('followUpNumber') or 1)
        except (TypeError, ValueError):
            return jsonify({'error': 'followUpNumber must be an integer'}), 400

        activities = recent_activities(contact['id'], limit=10)
        draft = generate_follow_up(contact, follow_up_number, activities)
        return jsonify({
            'contactId': contact['id'],
            'subject': draft.subject,
            'body': draft.body,
            'followUpNumber': follow_up_number,
            'debug': draft.debug,
        })
    except Exception as e:
        logger.error("Follow-up SDR failed", exc_info=True)
        return jsonify({'error': 'Follow-up generation failed', 'details': str(e)}), 500


@bp.route('/api/sdr/reactivation', methods=['POST'])
def reactivation():
    try:
        contact, error = _load_contact()
        if error:
            return error
        activities = recent_activities(contact['id'], limit=10)
        draft = generate_reactivation(contact, activities)
        return jsonify({
            'contactId': contact['id'],
            'subject': draft.subject,
            'body': draft.body,
            'debug': draft.debug,
        })
    except Exception as e:
        logger.error("Reactivation SDR failed", exc_info=True)
        return jsonify({'error': 'Reactivation email generation failed', 'details': str(e)}), 500
