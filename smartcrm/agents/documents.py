"""
Document summarizer — summary, key points, sentiment and confidence for an
uploaded document's extracted text.
"""
import json
import logging
from typing import Any, Dict

from smartcrm.services.openai_client import complete_prompt

logger = logging.getLogger('agents.documents')

DEFAULT_MODEL = 'gpt-4o-mini'
TEMPERATURE = 0.3
MAX_TOKENS = 1000
MAX_INPUT_CHARS = 10000
FALLBACK_SUMMARY_CHARS = 500

SENTIMENTS = ('positive', 'neutral', 'negative')
DEFAULT_CONFIDENCE = 75
FALLBACK_CONFIDENCE = 50


def _context_line(context: Dict[str, Any]) -> str:
    if not context:
        return ''
    line = f"This document is related to {context.get('contactName') or 'a contact'}"
    if context.get('companyName'):
        line += f" from {context['companyName']}"
    return line + '.'


def build_system_prompt(context: Dict[str, Any] = None) -> str:
    return f"""You are a professional document analyst. Analyze the provided document and return a structured summary. {_context_line(context)}

Your response must be valid JSON with exactly this structure:
{{
  "summary": "A concise 2-3 sentence summary of the document's main content and purpose",
  "keyPoints": ["Key point 1", "Key point 2", "Key point 3", "Key point 4", "Key point 5"],
  "sentiment": "positive" | "neutral" | "negative",
  "confidence": 0-100
}}

Guidelines:
- Summary should capture the essence of the document
- Provide 3-5 actionable key points
- Sentiment should reflect the overall tone
- Confidence should reflect how well you understood the content (higher for clear documents)"""


def normalize_summary(content: str, model: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(content)
        if not isinstance(parsed, dict):
            raise ValueError('not an object')
    except ValueError:
        return {
            'summary': content[:FALLBACK_SUMMARY_CHARS],
            'keyPoints': [],
            'sentiment': 'neutral',
            'confidence': FALLBACK_CONFIDENCE,
            'model': model,
        }

    confidence = parsed.get('confidence')
    if isinstance(confidence, (int, float)) and not isinstance(confidence, bool):
        confidence = min(100, max(0, confidence))
    else:
        confidence = DEFAULT_CONFIDENCE

    return {
        'summary': parsed.get('summary') or 'Summary not available',
        'keyPoints': parsed.get('keyPoints') if isinstance(parsed.get('keyPoints'), list) else [],
        'sentiment': parsed.get('sentiment') if parsed.get('sentiment') in SENTIMENTS else 'neutral',
        'confidence': confidence,
        'model': model,
    }


def summarize_document(text: str, file_name: str = None, context: Dict[str, Any] = None,
                       model: str = None) -> Dict[str, Any]:
    """Summarize `text` (first 10,000 characters) with JSON response mode."""
    model = model or DEFAULT_MODEL
    user_prompt = f'Please analyze this document titled "{file_name or "Untitled"}":\n\n{text[:MAX_INPUT_CHARS]}'

    reply = complete_prompt(
        user_prompt,
        system=build_system_prompt(context),
        model=model,
        temperature=TEMPERATURE,
        max_tokens=MAX_TOKENS,
        response_format={'type': 'json_object'},
    )
    if not reply['content']:
        raise ValueError('No content in OpenAI response')

    logger.info("Summarized document %r with %s (%d chars in)", file_name, model, min(len(text), MAX_INPUT_CHARS))
    return normalize_summary(reply['content'], model)
