"""
Video agent — script + storyboard generation for a contact and product.

The generated script is stored as a `videos` row in PENDING state with a
render URL for the external video service; rendering itself happens
elsewhere.
"""
import logging
from typing import Any, Dict
from urllib.parse import urlencode

from smartcrm.config import VIDEO_RENDER_URL
from smartcrm.models.video import VideoJobStatus
from smartcrm.services.db import insert_video
from smartcrm.services.openai_client import complete_prompt, parse_json_reply

logger = logging.getLogger('agents.video')

MODEL = 'gpt-4o'
TEMPERATURE = 0.7
MAX_TOKENS = 1500
DEFAULT_GOAL = 'demo'
FALLBACK_DURATION = 60

SYSTEM_PROMPT = """You are an expert video content creator specializing in B2B sales videos. Create compelling video scripts and storyboards for product demos, follow-ups, and educational content. Focus on:
- Clear narrative structure
- Visual storytelling
- Strong calls-to-action
- Professional presentation
- Keep scripts concise (30-60 seconds)"""


def build_video_prompt(contact: Dict[str, Any], product_url: str, goal: str) -> str:
    return f"""Create a video script and storyboard for this contact:

Contact: {contact.get('name')} ({contact.get('title')} at {contact.get('company')})
Product URL: {product_url}
Video Goal: {goal}

Return JSON with:
- "script": The full video script text
- "storyboard": Array of scene descriptions with timing
- "estimatedDuration": Total video length in seconds
- "keyMessages": Array of 3-5 key points to convey
- "visualStyle": Recommended visual approach"""


def parse_video_reply(content: str) -> Dict[str, Any]:
    """Normalize the model's JSON; unparseable replies keep the raw text as the script."""
    try:
        parsed = parse_json_reply(content)
    except ValueError:
        logger.info("Video reply was not JSON, storing raw script")
        return {
            'script': content,
            'storyboard': [],
            'estimatedDuration': FALLBACK_DURATION,
            'keyMessages': [],
            'visualStyle': None,
        }

    duration = parsed.get('estimatedDuration')
    return {
        'script': parsed.get('script') or content,
        'storyboard': parsed.get('storyboard') if isinstance(parsed.get('storyboard'), list) else [],
        'estimatedDuration': int(duration) if isinstance(duration, (int, float)) else FALLBACK_DURATION,
        'keyMessages': parsed.get('keyMessages') if isinstance(parsed.get('keyMessages'), list) else [],
        'visualStyle': parsed.get('visualStyle'),
    }


def render_url(script: str, visual_style) -> str:
    return f"{VIDEO_RENDER_URL}?{urlencode({'script': script, 'style': visual_style or ''})}"


def generate_video(contact: Dict[str, Any], product_url: str, goal: str = None) -> Dict[str, Any]:
    goal = goal or DEFAULT_GOAL
    reply = complete_prompt(
        build_video_prompt(contact, product_url, goal),
        system=SYSTEM_PROMPT,
        model=MODEL,
        temperature=TEMPERATURE,
        max_tokens=MAX_TOKENS,
    )
    content = parse_video_reply(reply['content'])
    video_url = render_url(content['script'], content['visualStyle'])

    row = insert_video(
        contact_id=contact['id'],
        product_url=product_url,
        goal=goal,
        script=content['script'],
        storyboard=content['storyboard'],
        video_url=video_url,
        estimated_duration=content['estimatedDuration'],
        key_messages=content['keyMessages'],
        visual_style=content['visualStyle'],
        status=VideoJobStatus.PENDING.value,
    )
    logger.info("Video %s queued for contact %s", row['id'], contact['id'])

    return {
        'contactId': contact['id'],
        'videoId': row['id'],
        'status': row['status'],
        'storyboard': content['storyboard'],
        'script': content['script'],
        'videoUrl': video_url,
        'estimatedDuration': content['estimatedDuration'],
        'keyMessages': content['keyMessages'],
        'visualStyle': content['visualStyle'],
        'debug': {'tokens': reply['tokens']},
    }
