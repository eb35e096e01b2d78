"""
Negotiation coach — GPT-4o coaching for a deal, plus a fixed playbook.

The model's free-text answer becomes `coaching_summary`; everything else in
the response is the static playbook below, attached so the UI always has
structured sections to render.
"""
import copy
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from smartcrm.services.openai_client import complete_prompt

logger = logging.getLogger('agents.negotiation')

MODEL = 'gpt-4o'
TEMPERATURE = 0.6
MAX_TOKENS = 2500

DEFAULT_STAGE = 'discovery'
DEFAULT_PERSONA = 'economic_buyer'

NEGOTIATION_PLAYBOOK = {
    'strategy_recommendations': [
        'Focus on value demonstration rather than price negotiation',
        'Use social proof and case studies to build credibility',
        'Prepare multiple concession scenarios with clear trade-offs',
        'Identify and address unspoken concerns proactively',
        'Build rapport and trust throughout the negotiation process',
    ],
    'objection_handling': {
        'price_objection': 'Shift focus to ROI and long-term value',
        'competitor_objection': 'Highlight unique differentiators and success metrics',
        'timing_objection': 'Offer flexible implementation and milestone-based payments',
        'authority_objection': 'Provide references and involve decision-makers',
        'budget_objection': 'Explore creative financing and payment options',
    },
    'concession_strategy': {
        'planned_concessions': [
            {'item': 'Implementation timeline', 'value': '2 weeks acceleration', 'impact': 'Low'},
            {'item': 'Training sessions', 'value': 'Additional 2 sessions', 'impact': 'Low'},
            {'item': 'Custom integrations', 'value': '1 additional integration', 'impact': 'Medium'},
        ],
        'walk_away_points': [
            '20% discount threshold',
            '6-month payment terms',
            'Reduced feature set',
        ],
        'value_adds': [
            'Extended support period',
            'Additional user licenses',
            'Priority feature requests',
        ],
    },
    'closing_techniques': [
        {
            'technique': 'Assumptive Close',
            'description': 'Assume the sale and discuss implementation details',
            'when_to_use': 'When buyer shows strong interest but hesitates',
            'success_rate': 78,
        },
        {
            'technique': 'Urgency Close',
            'description': 'Create time-sensitive incentives',
            'when_to_use': 'When decision is delayed',
            'success_rate': 65,
        },
        {
            'technique': 'Consultative Close',
            'description': 'Focus on solving business problems',
            'when_to_use': 'Complex B2B sales',
            'success_rate': 82,
        },
    ],
    'risk_assessment': {
        'overall_risk': 'Medium',
        'key_risks': [
            {'risk': 'Price sensitivity', 'probability': 30, 'mitigation': 'Focus on value metrics'},
            {'risk': 'Internal politics', 'probability': 25, 'mitigation': 'Map decision-making process'},
            {'risk': 'Competitor intervention', 'probability': 20, 'mitigation': 'Accelerate timeline'},
        ],
    },
    'success_probability': {
        'current': 68,
        'with_recommendations': 82,
        'confidence_interval': '75-89%',
    },
    'next_steps': [
        'Schedule next negotiation meeting within 3 days',
        'Prepare ROI calculator and case studies',
        'Identify and prepare for potential objections',
        'Develop concession waterfall strategy',
        'Prepare executive summary for decision-makers',
    ],
}


def build_system_prompt(stage: str, persona: str, deal_value) -> str:
    return f"""You are an expert negotiation coach and sales strategist. Provide real-time negotiation guidance, objection handling strategies, and deal optimization recommendations.

Key capabilities:
- Real-time negotiation strategy adaptation
- Objection handling and response generation
- BATNA (Best Alternative to a Negotiated Agreement) analysis
- Concession planning and trade-off recommendations
- Closing technique optimization
- Post-negotiation debrief and learning

Negotiation stage: {stage}
Buyer persona: {persona}
Deal value: ${deal_value}"""


def build_user_prompt(deal: Dict[str, Any], stage: str, persona: str, objections) -> str:
    return f"""Negotiation Coaching Request:

Deal Context:
- Company: {deal.get('company') or 'Unknown'}
- Value: ${deal.get('value') or 0}
- Stage: {deal.get('stage') or 'Unknown'}
- Current Status: {deal.get('status') or 'Active'}
- Close Date: {deal.get('expected_close_date') or 'Not set'}

Negotiation Parameters:
- Stage: {stage}
- Buyer Persona: {persona}
- Current Objections: {objections or 'None specified'}

Provide comprehensive negotiation coaching including:
1. Real-time strategy recommendations
2. Objection handling responses
3. Concession planning and trade-offs
4. Closing techniques and timing
5. Risk assessment and mitigation
6. Post-negotiation action items
7. Success probability analysis
8. Alternative negotiation approaches

Focus on win-win outcomes and long-term relationship building."""


def coach_negotiation(deal: Dict[str, Any], negotiation_stage: str = None,
                      buyer_persona: str = None, deal_value=None,
                      current_objections=None) -> Dict[str, Any]:
    stage = negotiation_stage or DEFAULT_STAGE
    persona = buyer_persona or DEFAULT_PERSONA
    value = deal_value or deal.get('value') or 0

    reply = complete_prompt(
        build_user_prompt(deal, stage, persona, current_objections),
        system=build_system_prompt(stage, persona, value),
        model=MODEL,
        temperature=TEMPERATURE,
        max_tokens=MAX_TOKENS,
    )
    logger.info("Negotiation coaching for deal %s: stage=%s persona=%s", deal.get('id'), stage, persona)

    result = {
        'deal_id': deal.get('id'),
        'negotiation_stage': stage,
        'buyer_persona': persona,
        'deal_value': value,
        'coaching_summary': reply['content'] or 'Comprehensive negotiation coaching generated',
    }
    result.update(copy.deepcopy(NEGOTIATION_PLAYBOOK))
    result['tokens_used'] = reply['tokens']
    result['generated_at'] = datetime.now(timezone.utc).isoformat()
    return result
