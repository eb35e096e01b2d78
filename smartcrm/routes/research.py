"""
Research routes — Gemini contact research and rule-based smart enrichment.
"""
import logging

from flask import Blueprint, request, jsonify

from smartcrm.agents.research import research_contact
from smartcrm.services.enrichment import perform_smart_enrichment
from smartcrm.services.openai_client import LLMConfigError

logger = logging.getLogger('routes.research')

bp = Blueprint('research', __name__)


@bp.route('/api/contacts/research', methods=['POST'])
def contact_research():
    data = request.get_json(silent=True) or {}
    first_name = data.get('firstName')
    last_name = data.get('lastName')
    linkedin_url = data.get('linkedinUrl')
    if not first_name and not last_name and not linkedin_url:
        return jsonify({'error': 'Name or LinkedIn URL is required'}), 400
    for key in ('firstName', 'lastName', 'company', 'linkedinUrl'):
        if data.get(key) is not None and not isinstance(data.get(key), str):
            return jsonify({'error': f'{key} must be a string'}), 400

    try:
        result = research_contact(
            first_name=first_name,
            last_name=last_name,
            company=data.get('company'),
            linkedin_url=linkedin_url,
            research_type=data.get('researchType') or 'basic',
        )
    except LLMConfigError as e:
        return jsonify({'error': str(e)}), 500
    return jsonify(result)


@bp.route('/api/enrichment', methods=['POST'])
def smart_enrichment():
    data = request.get_json(silent=True) or {}
    try:
        result = perform_smart_enrichment(
            data.get('data'),
            data.get('enrichmentType'),
            data.get('options') or {},
        )
        return jsonify(result)
    except Exception as e:
        logger.warning("Smart enrichment failed: %s", e)
        return jsonify({'error': 'Smart enrichment failed', 'details': str(e)}), 400
