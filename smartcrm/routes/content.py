"""
Content routes — video scripts and document summaries.
"""
import logging

from flask import Blueprint, request, jsonify

from smartcrm.agents.documents import summarize_document
from smartcrm.agents.video import generate_video
from smartcrm.services.db import get_contact
from smartcrm.services.openai_client import LLMConfigError

logger = logging.getLogger('routes.content')

bp = Blueprint('content', __name__)


@bp.route('/api/agents/video', methods=['POST'])
def video_agent():
    data = request.get_json(silent=True) or {}
    contact_id = data.get('contactId')
    product_url = data.get('productUrl')
    if not contact_id or not product_url:
        return jsonify({'error': 'Missing required fields: contactId and productUrl'}), 400

    try:
        contact = get_contact(contact_id)
        if contact is None:
            return jsonify({'error': 'Contact not found'}), 404
        return jsonify(generate_video(contact, product_url, data.get('goal')))
    except Exception as e:
        logger.error("Video agent failed for contact %s", contact_id, exc_info=True)
        return jsonify({'error': 'Video agent request failed', 'details': str(e)}), 500


@bp.route('/api/documents/summarize', methods=['POST'])
def summarize():
    data = request.get_json(silent=True) or {}
    text = data.get('text') or ''
    if not isinstance(text, str) or not text.strip():
        return jsonify({'error': 'No text provided for summarization'}), 400

    context = data.get('context') if isinstance(data.get('context'), dict) else None
    try:
        result = summarize_document(text, file_name=data.get('fileName'), context=context,
                                    model=data.get('model'))
        return jsonify(result)
    except LLMConfigError as e:
        return jsonify({'error': str(e)}), 500
    except Exception as e:
        logger.error("Document summarization failed", exc_info=True)
        return jsonify({'error': 'Summarization failed', 'details': str(e)}), 500
