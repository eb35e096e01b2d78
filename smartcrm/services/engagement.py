"""
Email engagement scoring — 0-100 heuristic plus follow-up side effects.

calculate_engagement_score() is pure: metrics in, score/recommendations out.
apply_engagement_actions() turns each recommendation into one independent
write. There is no transaction across writes: if the third insert fails, the
first two stay committed and the error propagates to the caller.
"""
import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import yaml

from smartcrm.database import get_session
from smartcrm.models.engagement import ScheduledAction, CampaignTrigger, ComplianceAction
from smartcrm.services.db import update_contact

logger = logging.getLogger('services.engagement')

HIGH_ENGAGEMENT_FOLLOWUP = 'high_engagement_followup'
UPGRADE_SEQUENCE = 'upgrade_sequence'
MEDIUM_ENGAGEMENT_NURTURE = 'medium_engagement_nurture'
LOW_ENGAGEMENT_REENGAGEMENT = 'low_engagement_reengagement'
DISENGAGE_CONTACT = 'disengage_contact'
REVIEW_CONTACT_STRATEGY = 'review_contact_strategy'
UNSUBSCRIBE_PENALTY = 'unsubscribe_penalty'
SPAM_COMPLAINT_PENALTY = 'spam_complaint_penalty'

# recommendation → campaign_type written to campaign_triggers
CAMPAIGN_FOR_RECOMMENDATION = {
    UPGRADE_SEQUENCE: 'upgrade_sequence',
    MEDIUM_ENGAGEMENT_NURTURE: 'nurture_campaign',
    LOW_ENGAGEMENT_REENGAGEMENT: 'reengagement_campaign',
}

# campaign_type → action type reported back; nurture is scheduled, not fired
CAMPAIGN_ACTION_TYPE = {
    'upgrade_sequence': 'upgrade_sequence_triggered',
    'nurture_campaign': 'nurture_campaign_scheduled',
    'reengagement_campaign': 'reengagement_campaign_triggered',
}


# ── Band config (YAML with hardcoded fallback) ───────────────────────────────

_bands_config = None


def _default_config():
    """Hardcoded fallback if YAML is missing."""
    return {
        'version': 'default',
        'base': 50,
        'open_rate': [
            {'above': 0.8, 'points': 30},
            {'above': 0.6, 'points': 20},
            {'above': 0.4, 'points': 10},
            {'below': 0.2, 'points': -10},
        ],
        'click_rate': [
            {'above': 0.15, 'points': 25},
            {'above': 0.1, 'points': 15},
            {'above': 0.05, 'points': 5},
        ],
        'response_rate': [
            {'above': 0.1, 'points': 20},
            {'above': 0.05, 'points': 10},
            {'above': 0.02, 'points': 5},
        ],
        'recency_days': [
            {'below': 1, 'points': 15},
            {'below': 3, 'points': 10},
            {'below': 7, 'points': 5},
            {'above': 30, 'points': -10},
        ],
        'penalties': {'unsubscribed': 30, 'spam_complaint': 50},
        'recommendation_thresholds': {'high': 80, 'medium': 60, 'low': 40},
        'risk_thresholds': {'high_below': 30, 'medium_below': 60},
    }


def load_bands_config():
    """Load band config from YAML, with in-memory cache and hardcoded fallback."""
    global _bands_config
    if _bands_config is not None:
        return _bands_config

    config_path = os.path.join(os.path.dirname(__file__), 'engagement_bands.yaml')
    try:
        with open(config_path, 'r') as f:
            _bands_config = yaml.safe_load(f)
        logger.info("Engagement bands loaded from YAML (version=%s)", _bands_config.get('version', '?'))
    except Exception as e:
        logger.warning("Engagement bands YAML not loaded (%s), using defaults", e)
        _bands_config = _default_config()

    return _bands_config


def _band_points(value: float, bands: List[Dict[str, Any]]) -> int:
    """Points for the first band the value falls in, 0 if none."""
    for band in bands:
        if 'above' in band and value > band['above']:
            return band['points']
        if 'below' in band and value < band['below']:
            return band['points']
    return 0


def _parse_timestamp(value) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        # epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


# ── Scoring ──────────────────────────────────────────────────────────────────

def calculate_engagement_score(metrics: Dict[str, Any], now: datetime = None) -> Dict[str, Any]:
    """
    Score email engagement metrics.

    Args:
        metrics: openRate, clickRate, responseRate (0-1 floats), lastActivity
                 (ISO timestamp or epoch ms), unsubscribed (bool), spamComplaints (int).
                 Any of them may be missing.
        now:     Reference time for recency (defaults to current UTC time).

    Returns:
        {'overall', 'breakdown', 'recommendations', 'riskLevel'}. Recommendation
        and risk bands read the raw score; only 'overall' is clamped to 0-100.
    """
    config = load_bands_config()
    now = now or datetime.now(timezone.utc)
    metrics = metrics or {}

    score = config['base']
    recommendations = []

    open_rate = metrics.get('openRate')
    if open_rate is not None:
        score += _band_points(open_rate, config['open_rate'])

    click_rate = metrics.get('clickRate')
    if click_rate is not None:
        score += _band_points(click_rate, config['click_rate'])

    response_rate = metrics.get('responseRate')
    if response_rate is not None:
        score += _band_points(response_rate, config['response_rate'])

    days_since_activity = None
    last_activity = _parse_timestamp(metrics.get('lastActivity'))
    if last_activity is not None:
        days_since_activity = (now - last_activity).total_seconds() / 86400
        score += _band_points(days_since_activity, config['recency_days'])

    penalties = config['penalties']
    if metrics.get('unsubscribed'):
        score = max(0, score - penalties['unsubscribed'])
        recommendations.append(UNSUBSCRIBE_PENALTY)

    if (metrics.get('spamComplaints') or 0) > 0:
        score = max(0, score - penalties['spam_complaint'])
        recommendations.append(SPAM_COMPLAINT_PENALTY)

    thresholds = config['recommendation_thresholds']
    if score >= thresholds['high']:
        recommendations.extend([HIGH_ENGAGEMENT_FOLLOWUP, UPGRADE_SEQUENCE])
    elif score >= thresholds['medium']:
        recommendations.append(MEDIUM_ENGAGEMENT_NURTURE)
    elif score >= thresholds['low']:
        recommendations.append(LOW_ENGAGEMENT_REENGAGEMENT)
    else:
        recommendations.extend([DISENGAGE_CONTACT, REVIEW_CONTACT_STRATEGY])

    risk = config['risk_thresholds']
    if score < risk['high_below']:
        risk_level = 'high'
    elif score < risk['medium_below']:
        risk_level = 'medium'
    else:
        risk_level = 'low'

    return {
        'overall': max(0, min(100, score)),
        'breakdown': {
            'openRate': open_rate or 0,
            'clickRate': click_rate or 0,
            'responseRate': response_rate or 0,
            'recency': round(max(0.0, 15 - days_since_activity), 2) if days_since_activity is not None else 0,
        },
        'recommendations': recommendations,
        'riskLevel': risk_level,
    }


# ── Side effects ─────────────────────────────────────────────────────────────

def _insert(row) -> None:
    """Commit a single row in its own session."""
    session = get_session()
    try:
        session.add(row)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def apply_engagement_actions(contact_id: str, engagement: Dict[str, Any],
                             now: datetime = None) -> List[Dict[str, Any]]:
    """Dispatch one write per recommendation, in order. Returns what was done."""
    now = now or datetime.now(timezone.utc)
    actions = []

    for recommendation in engagement['recommendations']:
        if recommendation == HIGH_ENGAGEMENT_FOLLOWUP:
            scheduled_for = now + timedelta(hours=24)
            _insert(ScheduledAction(
                contact_id=contact_id,
                action_type=HIGH_ENGAGEMENT_FOLLOWUP,
                scheduled_for=scheduled_for,
                config={'priority': 'high', 'type': 'personalized_followup'},
            ))
            actions.append({'type': HIGH_ENGAGEMENT_FOLLOWUP, 'scheduled': scheduled_for.isoformat()})

        elif recommendation in CAMPAIGN_FOR_RECOMMENDATION:
            campaign_type = CAMPAIGN_FOR_RECOMMENDATION[recommendation]
            _insert(CampaignTrigger(
                contact_id=contact_id,
                campaign_type=campaign_type,
                triggered_at=now,
                source='email_engagement',
            ))
            actions.append({'type': CAMPAIGN_ACTION_TYPE[campaign_type]})

        elif recommendation == DISENGAGE_CONTACT:
            update_contact(
                contact_id,
                status='disengaged',
                disengagement_reason='low_email_engagement',
                disengaged_at=now,
            )
            actions.append({'type': 'marked_for_disengagement'})

        elif recommendation in (UNSUBSCRIBE_PENALTY, SPAM_COMPLAINT_PENALTY):
            _insert(ComplianceAction(
                contact_id=contact_id,
                action_type=recommendation,
                triggered_at=now,
                severity='high' if recommendation == SPAM_COMPLAINT_PENALTY else 'medium',
            ))
            actions.append({'type': 'compliance_action_logged', 'action': recommendation})

    logger.info("Contact %s: %d engagement actions dispatched", contact_id, len(actions))
    return actions
