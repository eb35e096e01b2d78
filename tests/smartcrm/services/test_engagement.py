"""Tests for smartcrm.services.engagement — email engagement scoring + side effects."""
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from smartcrm.services.engagement import (
    calculate_engagement_score,
    apply_engagement_actions,
    load_bands_config,
    _band_points,
    _default_config,
)
from smartcrm.models.contact import Contact
from smartcrm.models.engagement import ScheduledAction, CampaignTrigger, ComplianceAction

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_config_cache():
    """Reset the module-level bands cache so each test starts clean."""
    import smartcrm.services.engagement as mod
    mod._bands_config = None
    yield
    mod._bands_config = None


# ── Config loading ───────────────────────────────────────────────────────────

class TestLoadBandsConfig:

    def test_yaml_matches_hardcoded_defaults(self):
        config = load_bands_config()
        default = _default_config()
        for key in ('base', 'open_rate', 'click_rate', 'response_rate', 'recency_days', 'penalties'):
            assert config[key] == default[key]

    def test_missing_yaml_falls_back(self):
        with patch('builtins.open', side_effect=FileNotFoundError('gone')):
            config = load_bands_config()
        assert config['version'] == 'default'

    def test_config_is_cached(self):
        assert load_bands_config() is load_bands_config()


class TestBandPoints:

    def test_first_matching_band_wins(self):
        bands = [{'above': 0.8, 'points': 30}, {'above': 0.6, 'points': 20}]
        assert _band_points(0.9, bands) == 30
        assert _band_points(0.7, bands) == 20

    def test_no_band_is_zero(self):
        assert _band_points(0.5, [{'above': 0.8, 'points': 30}]) == 0

    def test_boundaries_are_exclusive(self):
        assert _band_points(0.8, [{'above': 0.8, 'points': 30}]) == 0
        assert _band_points(1, [{'below': 1, 'points': 15}]) == 0


# ── Scoring ──────────────────────────────────────────────────────────────────

class TestCalculateEngagementScore:

    def test_highly_engaged_contact_clamps_to_100(self):
        result = calculate_engagement_score({
            'openRate': 0.9,
            'clickRate': 0.2,
            'responseRate': 0.15,
            'lastActivity': NOW.isoformat(),
        }, now=NOW)

        assert result['overall'] == 100
        assert result['recommendations'] == ['high_engagement_followup', 'upgrade_sequence']
        assert result['riskLevel'] == 'low'
        assert result['breakdown']['recency'] == 15

    def test_empty_metrics_score_base(self):
        result = calculate_engagement_score({}, now=NOW)

        assert result['overall'] == 50
        assert result['recommendations'] == ['low_engagement_reengagement']
        assert result['riskLevel'] == 'medium'
        assert result['breakdown'] == {'openRate': 0, 'clickRate': 0, 'responseRate': 0, 'recency': 0}

    def test_medium_band(self):
        result = calculate_engagement_score({'openRate': 0.7}, now=NOW)
        assert result['overall'] == 70
        assert result['recommendations'] == ['medium_engagement_nurture']
        assert result['riskLevel'] == 'low'

    def test_penalties_floor_at_zero(self):
        result = calculate_engagement_score({
            'openRate': 0.1,
            'lastActivity': (NOW - timedelta(days=60)).isoformat(),
            'unsubscribed': True,
            'spamComplaints': 2,
        }, now=NOW)

        assert result['overall'] == 0
        assert result['riskLevel'] == 'high'
        assert result['recommendations'] == [
            'unsubscribe_penalty',
            'spam_complaint_penalty',
            'disengage_contact',
            'review_contact_strategy',
        ]

    def test_recency_breakdown(self):
        result = calculate_engagement_score(
            {'lastActivity': (NOW - timedelta(days=2)).isoformat()}, now=NOW,
        )
        assert result['overall'] == 60
        assert result['breakdown']['recency'] == 13

    def test_zulu_timestamps_parse(self):
        result = calculate_engagement_score({'lastActivity': '2026-03-01T11:00:00Z'}, now=NOW)
        assert result['overall'] == 65

    def test_epoch_millisecond_timestamps_parse(self):
        last_activity_ms = int(NOW.timestamp() * 1000)
        result = calculate_engagement_score({'openRate': 0.5, 'lastActivity': last_activity_ms}, now=NOW)
        assert result['overall'] == 75
        assert result['breakdown']['recency'] == 15

    def test_unparseable_timestamp_is_ignored(self):
        result = calculate_engagement_score({'lastActivity': 'yesterday'}, now=NOW)
        assert result['overall'] == 50

    @pytest.mark.parametrize('metrics', [
        {'openRate': 1, 'clickRate': 1, 'responseRate': 1, 'lastActivity': NOW.isoformat()},
        {'openRate': 0, 'unsubscribed': True, 'spamComplaints': 10},
        {'openRate': 0.5, 'clickRate': 0.07, 'responseRate': 0.03},
    ])
    def test_overall_always_within_bounds(self, metrics):
        assert 0 <= calculate_engagement_score(metrics, now=NOW)['overall'] <= 100


# ── Side effects ─────────────────────────────────────────────────────────────

class TestApplyEngagementActions:

    def test_high_engagement_schedules_followup_and_campaign(self, make_contact, db_session):
        contact_id = make_contact()
        engagement = {'recommendations': ['high_engagement_followup', 'upgrade_sequence']}

        actions = apply_engagement_actions(contact_id, engagement, now=NOW)

        assert [a['type'] for a in actions] == ['high_engagement_followup', 'upgrade_sequence_triggered']
        scheduled = db_session.query(ScheduledAction).one()
        assert scheduled.contact_id == contact_id
        assert scheduled.config == {'priority': 'high', 'type': 'personalized_followup'}
        assert scheduled.scheduled_for.replace(tzinfo=None) == (NOW + timedelta(hours=24)).replace(tzinfo=None)
        campaign = db_session.query(CampaignTrigger).one()
        assert campaign.campaign_type == 'upgrade_sequence'
        assert campaign.source == 'email_engagement'

    def test_nurture_and_reengagement_campaign_types(self, make_contact, db_session):
        contact_id = make_contact()

        apply_engagement_actions(contact_id, {'recommendations': ['medium_engagement_nurture']}, now=NOW)
        apply_engagement_actions(contact_id, {'recommendations': ['low_engagement_reengagement']}, now=NOW)

        types = sorted(c.campaign_type for c in db_session.query(CampaignTrigger).all())
        assert types == ['nurture_campaign', 'reengagement_campaign']

    @pytest.mark.parametrize('recommendation, action_type', [
        ('upgrade_sequence', 'upgrade_sequence_triggered'),
        ('medium_engagement_nurture', 'nurture_campaign_scheduled'),
        ('low_engagement_reengagement', 'reengagement_campaign_triggered'),
    ])
    def test_campaign_action_types(self, make_contact, recommendation, action_type):
        contact_id = make_contact()
        actions = apply_engagement_actions(contact_id, {'recommendations': [recommendation]}, now=NOW)
        assert actions == [{'type': action_type}]

    def test_disengage_updates_contact(self, make_contact, db_session):
        contact_id = make_contact()

        actions = apply_engagement_actions(
            contact_id, {'recommendations': ['disengage_contact', 'review_contact_strategy']}, now=NOW,
        )

        assert actions == [{'type': 'marked_for_disengagement'}]
        contact = db_session.get(Contact, contact_id)
        assert contact.status == 'disengaged'
        assert contact.disengagement_reason == 'low_email_engagement'
        assert contact.disengaged_at is not None

    def test_penalties_log_compliance_severity(self, make_contact, db_session):
        contact_id = make_contact()

        apply_engagement_actions(
            contact_id, {'recommendations': ['unsubscribe_penalty', 'spam_complaint_penalty']}, now=NOW,
        )

        rows = {r.action_type: r.severity for r in db_session.query(ComplianceAction).all()}
        assert rows == {'unsubscribe_penalty': 'medium', 'spam_complaint_penalty': 'high'}

    def test_failed_write_keeps_earlier_rows(self, make_contact, db_session):
        contact_id = make_contact()
        engagement = {'recommendations': ['high_engagement_followup', 'disengage_contact']}

        with patch('smartcrm.services.engagement.update_contact', side_effect=RuntimeError('db down')):
            with pytest.raises(RuntimeError):
                apply_engagement_actions(contact_id, engagement, now=NOW)

        assert db_session.query(ScheduledAction).count() == 1
