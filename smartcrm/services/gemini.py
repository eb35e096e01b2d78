"""
Gemini generateContent over plain HTTPS.
"""
import logging

import requests

from smartcrm.config import GEMINI_API_KEY, GEMINI_API_URL, GEMINI_MODEL
from smartcrm.services.openai_client import LLMConfigError

logger = logging.getLogger('services.gemini')


class GeminiError(Exception):
    """Non-2xx or malformed response from the Gemini API."""


def is_configured() -> bool:
    return bool(GEMINI_API_KEY)


def generate_content(prompt: str, temperature: float = 0.2, top_k: int = 32,
                     top_p: float = 0.8, max_output_tokens: int = 512,
                     model: str = None) -> str:
    """Return the text of the first candidate for a single-turn prompt."""
    if not GEMINI_API_KEY:
        raise LLMConfigError('Gemini API key not configured')

    model = model or GEMINI_MODEL
    resp = requests.post(
        f"{GEMINI_API_URL}/{model}:generateContent",
        params={'key': GEMINI_API_KEY},
        json={
            'contents': [{'parts': [{'text': prompt}]}],
            'generationConfig': {
                'temperature': temperature,
                'topK': top_k,
                'topP': top_p,
                'maxOutputTokens': max_output_tokens,
            },
        },
        timeout=30,
    )

    if not resp.ok:
        try:
            message = resp.json().get('error', {}).get('message')
        except ValueError:
            message = None
        raise GeminiError(f"Gemini API error: {message or resp.reason}")

    data = resp.json()
    try:
        text = data['candidates'][0]['content']['parts'][0]['text']
    except (KeyError, IndexError, TypeError):
        text = None
    if not text:
        raise GeminiError('Invalid response from Gemini')
    return text
