"""
OpenAI Chat Completions helpers — shared by every prompt-building agent.

No retry logic: an upstream error propagates to the route, which turns it into
a 500. Replies that should be JSON go through parse_json_reply(), which
tolerates prose around the object.
"""
import json
import logging
import re
from typing import Any, Dict, List

from smartcrm.config import OPENAI_MODEL
from smartcrm.extensions import openai_client as client

logger = logging.getLogger('services.openai')

_JSON_OBJECT_RE = re.compile(r'\{.*\}', re.DOTALL)


class LLMConfigError(Exception):
    """Raised when a provider is called without its API key configured."""


def chat_completion(messages: List[Dict[str, Any]], model: str = None,
                    temperature: float = 0.7, max_tokens: int = 1000, **kwargs):
    """Single Chat Completions call. Raises LLMConfigError when no key is set."""
    if client is None:
        raise LLMConfigError('OpenAI API key not configured')
    model = model or OPENAI_MODEL
    logger.debug("chat completion model=%s temperature=%s max_tokens=%s", model, temperature, max_tokens)
    return client.chat.completions.create(
        model=model,
        messages=messages,
        temperature=temperature,
        max_tokens=max_tokens,
        **kwargs,
    )


def complete_prompt(prompt: str, system: str = None, **kwargs) -> Dict[str, Any]:
    """
    Run a user prompt (optionally with a system prompt) and return the reply.

    Returns {'content': str, 'tokens': int}.
    """
    messages = []
    if system:
        messages.append({'role': 'system', 'content': system})
    messages.append({'role': 'user', 'content': prompt})

    response = chat_completion(messages, **kwargs)
    content = response.choices[0].message.content or ''
    return {'content': content, 'tokens': _total_tokens(response)}


def parse_json_reply(text: str) -> Dict[str, Any]:
    """
    Parse an LLM reply as a JSON object.

    Models often wrap the object in prose or code fences, so when the whole
    text does not parse we retry on the outermost {...} span. Raises ValueError
    when neither attempt yields an object.
    """
    if not text:
        raise ValueError('Empty reply')
    try:
        parsed = json.loads(text)
    except ValueError:
        match = _JSON_OBJECT_RE.search(text)
        if not match:
            raise ValueError('No JSON object found in reply')
        parsed = json.loads(match.group(0))
    if not isinstance(parsed, dict):
        raise ValueError(f'Expected a JSON object, got {type(parsed).__name__}')
    return parsed


def _total_tokens(response) -> int:
    usage = getattr(response, 'usage', None)
    tokens = getattr(usage, 'total_tokens', 0)
    return tokens if isinstance(tokens, int) else 0
