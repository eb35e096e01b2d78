"""
Health check — provider configuration and database reachability.
"""
import logging

from flask import Blueprint, jsonify
from sqlalchemy import text

from smartcrm.config import GEMINI_API_KEY
from smartcrm.database import get_session
from smartcrm.extensions import openai_client

logger = logging.getLogger('routes.health')

bp = Blueprint('health', __name__)


@bp.route('/api/health')
def health():
    checks = {
        'openai': openai_client is not None,
        'gemini': bool(GEMINI_API_KEY),
    }

    session = get_session()
    try:
        session.execute(text('SELECT 1'))
        checks['database'] = True
    except Exception as e:
        logger.warning("Database health check failed: %s", e)
        checks['database'] = False
    finally:
        session.close()

    status = 'healthy' if checks['database'] else 'degraded'
    return jsonify({'status': status, 'checks': checks}), 200 if checks['database'] else 503
