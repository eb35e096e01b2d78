"""
Centralized configuration — all env vars, constants, agent routing map.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── Redis (RQ queue for detached agent jobs) ─────────────────────────────────
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

# ── PostgreSQL (Supabase connection string) ──────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')

# ── OpenAI ────────────────────────────────────────────────────────────────────
OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-4o')

# ── Gemini ────────────────────────────────────────────────────────────────────
GEMINI_API_KEY = os.getenv('GEMINI_API_KEY')
GEMINI_API_URL = os.getenv('GEMINI_API_URL', 'https://generativelanguage.googleapis.com/v1beta/models')
GEMINI_MODEL = os.getenv('GEMINI_MODEL', 'gemini-2.5-flash')

# ── CORS ─────────────────────────────────────────────────────────────────────
CORS_HEADERS = {
    'Access-Control-Allow-Origin': os.getenv('CORS_ALLOW_ORIGIN', '*'),
    'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
    'Access-Control-Allow-Methods': 'GET, POST, OPTIONS',
}

# ── Inbound email: recipient address → outbound agent key ───────────────────
EMAIL_TO_AGENT_MAP = {
    'deansales@agentmail.to':   'sales_qualification',
    'deansupport@agentmail.to': 'support_response',
    'deangilmore@agentmail.to': 'general_agent',
}

# ── Automation owner assignment ──────────────────────────────────────────────
CONTACT_OWNER_IDS = [
    owner.strip()
    for owner in os.getenv('CONTACT_OWNER_IDS', 'user_123').split(',')
    if owner.strip()
]

# ── Zapier polling ───────────────────────────────────────────────────────────
ZAPIER_DEFAULT_LIMIT = 50
ZAPIER_MAX_LIMIT = 100

# ── Video job lifecycle ──────────────────────────────────────────────────────
VIDEO_RENDER_URL = os.getenv('VIDEO_RENDER_URL', 'https://api.example.com/video/generate')
