"""
Contact research via Gemini — fills in a contact card from a name or a
LinkedIn URL.

Research never fails the request: any upstream or parse error returns a
fallback card built from what the caller already gave us, tagged
provider='fallback' with the error message attached.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from smartcrm.services import gemini
from smartcrm.services.openai_client import LLMConfigError, parse_json_reply

logger = logging.getLogger('agents.research')

DETAILED_MAX_TOKENS = 1024
BASIC_MAX_TOKENS = 512
DEFAULT_CONFIDENCE = 60
URL_FALLBACK_CONFIDENCE = 40
NAME_FALLBACK_CONFIDENCE = 30


def build_linkedin_prompt(linkedin_url: str) -> str:
    return f"""Research a professional from this LinkedIn URL: {linkedin_url}.

Return a JSON object with the following structure:
{{
  "firstName": "first name",
  "lastName": "last name",
  "name": "full name",
  "email": "likely email based on name and company",
  "title": "job title",
  "company": "company name",
  "industry": "industry",
  "location": {{"city": "city", "state": "state", "country": "country"}},
  "socialProfiles": {{
    "linkedin": "{linkedin_url}",
    "twitter": "likely Twitter URL if available",
    "website": "likely company website"
  }},
  "bio": "professional summary",
  "confidence": "number between 50 and 90 indicating confidence level"
}}"""


def build_name_prompt(first_name: str, last_name: str, company: str = None) -> str:
    full_name = f'{first_name or ""} {last_name or ""}'.strip()
    works_at = f' who works at {company}' if company else ''
    return f"""Research information about a professional named {full_name}{works_at}.

Return a JSON object with the following structure:
{{
  "firstName": "{first_name or ''}",
  "lastName": "{last_name or ''}",
  "name": "{full_name}",
  "email": "likely email",
  "phone": "likely phone if available",
  "title": "likely job title",
  "company": "{company or 'company name if known'}",
  "industry": "likely industry",
  "location": {{"city": "likely city", "state": "likely state", "country": "likely country"}},
  "socialProfiles": {{
    "linkedin": "likely LinkedIn URL",
    "twitter": "likely Twitter URL if available",
    "website": "likely company website"
  }},
  "bio": "brief professional bio",
  "confidence": "number between 40 and 85 indicating confidence level"
}}"""


def fallback_from_url(linkedin_url: str) -> Dict[str, Any]:
    """Guess first/last name from a /in/first-last slug."""
    slug = linkedin_url.split('/in/')[1].strip('/') if '/in/' in linkedin_url else ''
    parts = [p for p in slug.split('-') if p] or ['unknown']
    first = parts[0].capitalize()
    last = parts[1].capitalize() if len(parts) > 1 else ''
    return {
        'firstName': first,
        'lastName': last,
        'name': f'{first} {last}'.strip(),
        'socialProfiles': {'linkedin': linkedin_url},
        'confidence': URL_FALLBACK_CONFIDENCE,
        'notes': 'API research failed, showing basic information derived from URL',
    }


def fallback_from_name(first_name: str, last_name: str, company: str = None) -> Dict[str, Any]:
    return {
        'firstName': first_name,
        'lastName': last_name,
        'name': f'{first_name or ""} {last_name or ""}'.strip(),
        'company': company or '',
        'confidence': NAME_FALLBACK_CONFIDENCE,
        'notes': 'API research failed, showing basic information',
    }


def research_contact(first_name: str = None, last_name: str = None, company: str = None,
                     linkedin_url: str = None, research_type: str = 'basic') -> Dict[str, Any]:
    """
    Research a contact with Gemini.

    LLMConfigError (no API key) propagates; any other failure yields the
    fallback card.
    """
    if linkedin_url:
        prompt = build_linkedin_prompt(linkedin_url)
    else:
        prompt = build_name_prompt(first_name, last_name, company)
    max_tokens = DETAILED_MAX_TOKENS if research_type == 'detailed' else BASIC_MAX_TOKENS
    timestamp = datetime.now(timezone.utc).isoformat()

    if not gemini.is_configured():
        raise LLMConfigError('Gemini API key not configured')

    try:
        text = gemini.generate_content(prompt, max_output_tokens=max_tokens)
        parsed = parse_json_reply(text)
    except Exception as e:
        logger.warning("Gemini research failed, returning fallback: %s", e)
        if linkedin_url:
            card = fallback_from_url(linkedin_url)
        else:
            card = fallback_from_name(first_name, last_name, company)
        card.update({
            'researchType': research_type,
            'timestamp': timestamp,
            'provider': 'fallback',
            'error': str(e),
        })
        return card

    parsed['confidence'] = parsed.get('confidence') or DEFAULT_CONFIDENCE
    parsed.update({'researchType': research_type, 'timestamp': timestamp, 'provider': 'gemini'})
    return parsed
