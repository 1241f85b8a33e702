"""
ElevenLabs voice agent adapter.

The voice agent calls our server tools over a webhook. Tool names arrive in
the vendor's snake_case form and the session is keyed by the vendor's
conversation id unless the agent passes an explicit ``sessionId``.
"""
import hashlib
import hmac
import logging
import time
from typing import Any, Dict, Optional

import aiohttp

from tableside.config.settings import (
    ELEVENLABS_AGENT_ID,
    ELEVENLABS_API_BASE,
    ELEVENLABS_API_KEY,
    ELEVENLABS_WEBHOOK_TOLERANCE,
    VOICE_DEFAULT_LANGUAGE,
    VOICE_DEFAULT_RESTAURANT_ID,
    VOICE_DEFAULT_TABLE_ID,
)
from tableside.services.session_service import SessionService
from tableside.services.utility_service import UtilityService
from tableside.tools.base import ToolContext
from tableside.tools.declarations import VOICE_TOOL_ALIASES
from tableside.tools.dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)

SIGNED_URL_LIFETIME_MS = 15 * 60 * 1000


class ElevenLabsError(Exception):
    """Raised when the ElevenLabs API is not configured or rejects a request"""


def resolve_session_id(params: Dict[str, Any], conversation_id: Optional[str] = None) -> str:
    """Explicit sessionId, then the vendor conversation id, then a fresh voice id"""
    return params.get("sessionId") or conversation_id or UtilityService.generate_voice_session_id()


def canonical_tool_name(tool_name: str) -> str:
    return VOICE_TOOL_ALIASES.get(tool_name, tool_name)


def verify_signature(signature: str, timestamp: str, body: bytes, secret: str,
                     tolerance: int = ELEVENLABS_WEBHOOK_TOLERANCE, now: Optional[float] = None) -> bool:
    """Check an ``x-elevenlabs-signature: v0=<hex>`` header against ``<timestamp>.<body>``.

    Timestamps are unix seconds and must be within ``tolerance`` of ``now``,
    so a captured request cannot be replayed later.
    """
    if not signature or not timestamp or not secret:
        return False

    try:
        sent_at = int(timestamp)
    except ValueError:
        return False
    if now is None:
        now = time.time()
    if abs(now - sent_at) > tolerance:
        logger.warning(f"Rejected webhook with stale timestamp {timestamp}")
        return False

    payload = timestamp.encode() + b"." + body
    expected = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    provided = signature.split("v0=", 1)[1] if "v0=" in signature else ""
    return hmac.compare_digest(expected, provided)


class VoiceService:
    def __init__(self, session_service: SessionService, dispatcher: ToolDispatcher,
                 api_key: str = ELEVENLABS_API_KEY, agent_id: str = ELEVENLABS_AGENT_ID,
                 api_base: str = ELEVENLABS_API_BASE):
        self.session_service = session_service
        self.dispatcher = dispatcher
        self.api_key = api_key
        self.agent_id = agent_id
        self.api_base = api_base.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.agent_id)

    async def handle_tool(self, tool_name: str, params: Optional[Dict[str, Any]],
                          conversation_id: Optional[str] = None) -> Dict[str, Any]:
        """Run one voice tool call against the session's order"""
        params = params or {}
        name = canonical_tool_name(tool_name)
        session_id = resolve_session_id(params, conversation_id)
        restaurant_id = params.get("restaurantId") or VOICE_DEFAULT_RESTAURANT_ID
        table_id = params.get("tableId") or VOICE_DEFAULT_TABLE_ID
        language = params.get("language") or VOICE_DEFAULT_LANGUAGE

        logger.info(f"Voice tool {tool_name} -> {name} for session {session_id}")

        session = await self.session_service.get_or_create_session(
            session_id, restaurant_id, table_id, language
        )
        context = ToolContext(
            session_id=session_id,
            restaurant_id=restaurant_id,
            table_id=table_id,
            session=session,
            language=session.language,
        )
        result = await self.dispatcher.dispatch(name, params, context, include_voice=True)
        logger.info(f"Voice tool {name} result: success={result.get('success')}")
        return result

    async def signed_url(self) -> Dict[str, Any]:
        """Signed websocket URL for a browser client to join the voice agent"""
        if not self.is_configured:
            raise ElevenLabsError("ElevenLabs not configured. Set ELEVENLABS_API_KEY and ELEVENLABS_AGENT_ID.")

        url = f"{self.api_base}/convai/conversation/get_signed_url"
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(url, params={"agent_id": self.agent_id},
                                       headers={"xi-api-key": self.api_key}) as response:
                    if response.status != 200:
                        error = await response.text()
                        logger.error(f"ElevenLabs signed URL request failed ({response.status}): {error}")
                        raise ElevenLabsError(f"Failed to generate signed URL: {error}")
                    data = await response.json()
        except aiohttp.ClientError as e:
            raise ElevenLabsError(f"Error contacting ElevenLabs: {str(e)}") from e

        return {
            "signedUrl": data.get("signed_url"),
            "expiresAt": UtilityService.epoch_millis() + SIGNED_URL_LIFETIME_MS,
        }
