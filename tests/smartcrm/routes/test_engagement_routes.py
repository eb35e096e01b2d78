"""Tests for smartcrm.routes.engagement — POST /api/email/engagement-score."""
import pytest
from datetime import datetime, timezone
from unittest.mock import patch

from smartcrm.models.contact import Contact
from smartcrm.models.engagement import CampaignTrigger, ScheduledAction


class TestEngagementScoreRoute:

    def test_requires_contact_id(self, client):
        resp = client.post('/api/email/engagement-score', json={'emailMetrics': {}})
        assert resp.status_code == 400

    def test_unknown_contact(self, client):
        resp = client.post('/api/email/engagement-score', json={'contact': {'id': 'nope'}, 'emailMetrics': {}})
        assert resp.status_code == 404

    def test_scores_updates_and_dispatches(self, client, make_contact, db_session):
        contact_id = make_contact()
        metrics = {
            'openRate': 0.9,
            'clickRate': 0.2,
            'responseRate': 0.15,
            'lastActivity': datetime.now(timezone.utc).isoformat(),
        }

        resp = client.post('/api/email/engagement-score', json={'contact': {'id': contact_id}, 'emailMetrics': metrics})

        assert resp.status_code == 200
        body = resp.get_json()
        assert body['engagementScore']['overall'] == 100
        assert body['actionsTriggered'] == ['high_engagement_followup', 'upgrade_sequence']

        contact = db_session.get(Contact, contact_id)
        assert contact.email_engagement_score == 100
        assert contact.email_metrics == metrics
        assert contact.last_email_engagement is not None
        assert db_session.query(ScheduledAction).count() == 1
        assert db_session.query(CampaignTrigger).one().campaign_type == 'upgrade_sequence'

    def test_side_effect_failure_is_500(self, client, make_contact):
        contact_id = make_contact()

        with patch('smartcrm.routes.engagement.apply_engagement_actions', side_effect=RuntimeError('insert failed')):
            resp = client.post('/api/email/engagement-score', json={'contact': {'id': contact_id}, 'emailMetrics': {}})

        assert resp.status_code == 500
        assert resp.get_json() == {'error': 'Email engagement scoring failed', 'details': 'insert failed'}

    @pytest.mark.parametrize('metrics, field', [
        ({'openRate': '0.9'}, 'openRate'),
        ({'spamComplaints': '1'}, 'spamComplaints'),
        ({'clickRate': True}, 'clickRate'),
    ])
    def test_non_numeric_metric_is_400(self, client, make_contact, db_session, metrics, field):
        contact_id = make_contact()

        resp = client.post('/api/email/engagement-score', json={'contact': {'id': contact_id}, 'emailMetrics': metrics})

        assert resp.status_code == 400
        assert resp.get_json() == {'error': f'{field} must be a number'}
        assert db_session.get(Contact, contact_id).email_engagement_score is None

    def test_epoch_millisecond_last_activity(self, client, make_contact):
        contact_id = make_contact()
        now_ms = int(datetime.now(timezone.utc).timestamp() * 1000)

        resp = client.post('/api/email/engagement-score', json={
            'contact': {'id': contact_id},
            'emailMetrics': {'openRate': 0.5, 'lastActivity': now_ms},
        })

        assert resp.status_code == 200
        assert resp.get_json()['engagementScore']['overall'] == 75
