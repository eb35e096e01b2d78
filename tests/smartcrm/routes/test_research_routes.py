"""Tests for smartcrm.routes.research — POST /api/contacts/research."""
import pytest
from unittest.mock import patch

from smartcrm.services.gemini import GeminiError


@pytest.fixture
def gemini_down():
    with patch('smartcrm.services.gemini.GEMINI_API_KEY', 'test-key'), \
         patch('smartcrm.agents.research.gemini.generate_content', side_effect=GeminiError('upstream 503')) as mock_generate:
        yield mock_generate


class TestContactResearchRoute:

    def test_requires_name_or_url(self, client):
        resp = client.post('/api/contacts/research', json={'company': 'Acme'})
        assert resp.status_code == 400
        assert resp.get_json() == {'error': 'Name or LinkedIn URL is required'}

    @pytest.mark.parametrize('payload, field', [
        ({'linkedinUrl': 12345}, 'linkedinUrl'),
        ({'firstName': ['Jane']}, 'firstName'),
        ({'firstName': 'Jane', 'lastName': 7}, 'lastName'),
        ({'firstName': 'Jane', 'company': {'name': 'Acme'}}, 'company'),
    ])
    def test_non_string_fields_are_400(self, client, gemini_down, payload, field):
        resp = client.post('/api/contacts/research', json=payload)

        assert resp.status_code == 400
        assert resp.get_json() == {'error': f'{field} must be a string'}
        gemini_down.assert_not_called()

    def test_upstream_failure_returns_json_fallback(self, client, gemini_down):
        resp = client.post('/api/contacts/research', json={'linkedinUrl': 'https://linkedin.com/in/sam-lee'})

        assert resp.status_code == 200
        body = resp.get_json()
        assert body['provider'] == 'fallback'
        assert body['name'] == 'Sam Lee'
        assert body['error'] == 'upstream 503'

    @patch('smartcrm.services.gemini.GEMINI_API_KEY', None)
    def test_missing_key_is_500(self, client):
        resp = client.post('/api/contacts/research', json={'firstName': 'Jane'})
        assert resp.status_code == 500
        assert 'error' in resp.get_json()
