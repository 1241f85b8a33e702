"""
Configuration settings for the tableside ordering service
"""
import logging
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# Gemini configuration
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
GEMINI_API_BASE = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")

# ElevenLabs configuration
ELEVENLABS_API_KEY = os.getenv("ELEVENLABS_API_KEY", "")
ELEVENLABS_AGENT_ID = os.getenv("ELEVENLABS_AGENT_ID", "")
ELEVENLABS_WEBHOOK_SECRET = os.getenv("ELEVENLABS_WEBHOOK_SECRET", "")
ELEVENLABS_API_BASE = os.getenv("ELEVENLABS_API_BASE", "https://api.elevenlabs.io/v1")
# Max age in seconds of a signed webhook timestamp
ELEVENLABS_WEBHOOK_TOLERANCE = int(os.getenv("ELEVENLABS_WEBHOOK_TOLERANCE", "300"))

# Store configuration ("memory" or "supabase")
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory").lower()
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
SUPABASE_HEADERS = {
    "Authorization": f"Bearer {SUPABASE_ANON_KEY}",
    "apikey": SUPABASE_ANON_KEY,
    "Content-Type": "application/json"
}

# Ordering rules
TAX_RATE = float(os.getenv("TAX_RATE", "0.08"))
MENU_CACHE_TTL = float(os.getenv("MENU_CACHE_TTL", "300"))
ORDER_WRITE_RETRIES = int(os.getenv("ORDER_WRITE_RETRIES", "3"))
CHECKOUT_URL = os.getenv("CHECKOUT_URL", "/checkout")
RESTAURANT_NAME = os.getenv("RESTAURANT_NAME", "Restaurant AI Demo")

# Voice calls do not always carry the app's identifiers
VOICE_DEFAULT_RESTAURANT_ID = os.getenv("VOICE_DEFAULT_RESTAURANT_ID", "demo_restaurant")
VOICE_DEFAULT_TABLE_ID = os.getenv("VOICE_DEFAULT_TABLE_ID", "table_1")
VOICE_DEFAULT_LANGUAGE = os.getenv("VOICE_DEFAULT_LANGUAGE", "es")

# Staff notification channel for human assistance requests
STAFF_WEBHOOK_URL = os.getenv("STAFF_WEBHOOK_URL", "")

# Server configuration
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def validate_settings() -> list:
    """Return the list of configuration problems, logging each one"""
    problems = []

    if not GEMINI_API_KEY:
        problems.append("GEMINI_API_KEY is not set; the chat endpoint will fail")

    if not ELEVENLABS_API_KEY or not ELEVENLABS_AGENT_ID:
        problems.append("ELEVENLABS_API_KEY or ELEVENLABS_AGENT_ID is not set; voice is disabled")

    if STORE_BACKEND not in ("memory", "supabase"):
        problems.append(f"Unknown STORE_BACKEND '{STORE_BACKEND}', expected 'memory' or 'supabase'")
    elif STORE_BACKEND == "supabase" and (not SUPABASE_URL or not SUPABASE_ANON_KEY):
        problems.append("STORE_BACKEND is 'supabase' but SUPABASE_URL or SUPABASE_ANON_KEY is missing")

    if not 0 <= TAX_RATE < 1:
        problems.append(f"TAX_RATE must be a fraction between 0 and 1, got {TAX_RATE}")

    for problem in problems:
        logger.warning(f"Configuration: {problem}")

    return problems
