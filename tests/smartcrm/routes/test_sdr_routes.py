"""Tests for smartcrm.routes.sdr, ae and coaching — contact/deal lookups and error mapping."""
import json
from unittest.mock import MagicMock, patch

import pytest

from smartcrm.models.deal import Deal


def _mock_chat_response(content):
    response = MagicMock()
    response.choices[0].message.content = json.dumps(content) if isinstance(content, dict) else content
    response.usage.total_tokens = 10
    return response


class TestColdEmailRoute:

    def test_requires_contact_id(self, client):
        resp = client.post('/api/sdr/cold-email', json={})
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Contact ID is required'

    @pytest.mark.parametrize('path', ['/api/sdr/cold-email', '/api/sdr/reactivation', '/api/sdr/follow-up'])
    def test_unknown_contact_is_404(self, client, path):
        resp = client.post(path, json={'contactId': '00000000-0000-0000-0000-000000000000'})
        assert resp.status_code == 404
        assert resp.get_json() == {'error': 'Contact not found'}

    def test_non_json_reply_still_returns_email(self, client, openai_mock, make_contact):
        contact_id = make_contact()
        openai_mock.chat.completions.create.return_value = _mock_chat_response('Hey Jane, loved your talk.')

        resp = client.post('/api/sdr/cold-email', json={'contactId': contact_id})

        assert resp.status_code == 200
        body = resp.get_json()
        assert body['contactId'] == contact_id
        assert body['subject']
        assert body['body'] == 'Hey Jane, loved your talk.'

    @patch('smartcrm.services.openai_client.client', None)
    def test_missing_key_is_500(self, client, make_contact):
        contact_id = make_contact()

        resp = client.post('/api/sdr/cold-email', json={'contactId': contact_id})

        assert resp.status_code == 500
        assert resp.get_json()['details'] == 'OpenAI API key not configured'

    def test_upstream_error_is_500(self, client, openai_mock, make_contact):
        contact_id = make_contact()
        openai_mock.chat.completions.create.side_effect = RuntimeError('rate limited')

        resp = client.post('/api/sdr/reactivation', json={'contactId': contact_id})

        assert resp.status_code == 500
        assert resp.get_json() == {'error': 'Reactivation email generation failed', 'details': 'rate limited'}


class TestFollowUpRoute:

    def test_defaults_to_step_one(self, client, openai_mock, make_contact):
        contact_id = make_contact()
        openai_mock.chat.completions.create.return_value = _mock_chat_response({'subject': 's', 'body': 'b'})

        resp = client.post('/api/sdr/follow-up', json={'contactId': contact_id})

        assert resp.status_code == 200
        assert resp.get_json()['followUpNumber'] == 1
        prompt = openai_mock.chat.completions.create.call_args[1]['messages'][-1]['content']
        assert prompt.startswith('Generate a gentle first follow-up email')

    def test_bad_follow_up_number(self, client, make_contact):
        contact_id = make_contact()
        resp = client.post('/api/sdr/follow-up', json={'contactId': contact_id, 'followUpNumber': 'two'})
        assert resp.status_code == 400


class TestAeRoute:

    def test_requires_contact_id(self, client):
        assert client.post('/api/ae/run', json={}).status_code == 400

    def test_unknown_contact(self, client):
        assert client.post('/api/ae/run', json={'contactId': 'nope'}).status_code == 404

    def test_runs_agent(self, client, openai_mock, make_contact):
        contact_id = make_contact()
        openai_mock.chat.completions.create.return_value = _mock_chat_response('Schedule a demo.')

        resp = client.post('/api/ae/run', json={'contactId': contact_id})

        assert resp.status_code == 200
        assert resp.get_json()['response'] == 'Schedule a demo.'

    def test_failure_is_500(self, client, openai_mock, make_contact):
        contact_id = make_contact()
        openai_mock.chat.completions.create.side_effect = RuntimeError('boom')

        resp = client.post('/api/ae/run', json={'contactId': contact_id})

        assert resp.status_code == 500
        assert resp.get_json() == {'error': 'AE agent execution failed', 'details': 'boom'}


class TestNegotiationRoute:

    def test_requires_deal_id(self, client):
        resp = client.post('/api/agents/negotiation-coach', json={})
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Deal ID is required'

    def test_unknown_deal(self, client):
        assert client.post('/api/agents/negotiation-coach', json={'deal_id': 'nope'}).status_code == 404

    def test_coaching(self, client, openai_mock, db_session):
        db_session.add(Deal(id='d1', title='Rollout', company='Acme', value=20000.0))
        db_session.commit()
        openai_mock.chat.completions.create.return_value = _mock_chat_response('Anchor high.')

        resp = client.post('/api/agents/negotiation-coach', json={'deal_id': 'd1', 'buyer_persona': 'champion'})

        assert resp.status_code == 200
        body = resp.get_json()
        assert body['coaching_summary'] == 'Anchor high.'
        assert body['buyer_persona'] == 'champion'
        assert body['deal_value'] == 20000.0
        assert body['success_probability']['current'] == 68
