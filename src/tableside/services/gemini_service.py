"""
Gemini client for function-calling chat turns.

Each call is stateless: the caller passes the whole conversation as
``contents`` every time, so no model-side chat object has to survive
between requests.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import aiohttp

from tableside.config.settings import GEMINI_API_BASE, GEMINI_API_KEY, GEMINI_MODEL
from tableside.tools.declarations import TOOL_DECLARATIONS

logger = logging.getLogger(__name__)

GENERATION_CONFIG = {
    "temperature": 0.7,
    "topP": 0.9,
    "maxOutputTokens": 1024,
}


class GeminiError(Exception):
    """Raised when the Gemini API call fails or returns something unusable"""


@dataclass
class GeminiReply:
    text: str = ""
    function_calls: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)


def user_text(text: str) -> Dict[str, Any]:
    return {"role": "user", "parts": [{"text": text}]}


def model_text(text: str) -> Dict[str, Any]:
    return {"role": "model", "parts": [{"text": text}]}


def model_function_calls(calls: List[Tuple[str, Dict[str, Any]]]) -> Dict[str, Any]:
    return {
        "role": "model",
        "parts": [{"functionCall": {"name": name, "args": args}} for name, args in calls],
    }


def function_responses(results: List[Tuple[str, Dict[str, Any]]]) -> Dict[str, Any]:
    """All tool results of one turn, sent back together"""
    return {
        "role": "user",
        "parts": [{"functionResponse": {"name": name, "response": result}} for name, result in results],
    }


def parse_reply(data: Dict[str, Any]) -> GeminiReply:
    candidates = data.get("candidates") or []
    if not candidates:
        feedback = data.get("promptFeedback")
        raise GeminiError(f"No candidates in Gemini response: {feedback or data}")

    parts = (candidates[0].get("content") or {}).get("parts") or []
    texts = []
    calls = []
    for part in parts:
        if "text" in part:
            texts.append(part["text"])
        elif "functionCall" in part:
            call = part["functionCall"]
            calls.append((call.get("name", ""), call.get("args") or {}))

    return GeminiReply(text="".join(texts).strip(), function_calls=calls)


class GeminiClient:
    def __init__(self, api_key: str = GEMINI_API_KEY, model: str = GEMINI_MODEL,
                 api_base: str = GEMINI_API_BASE, timeout: float = 60.0,
                 tools: Optional[List[Dict[str, Any]]] = None):
        self.api_key = api_key
        self.model = model
        self.url = f"{api_base.rstrip('/')}/models/{model}:generateContent"
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.tools = tools if tools is not None else TOOL_DECLARATIONS

    async def generate(self, system_prompt: str, contents: List[Dict[str, Any]]) -> GeminiReply:
        """Send the conversation and return the model's text and function calls"""
        if not self.api_key:
            raise GeminiError("Gemini API key is not configured")

        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": contents,
            "tools": [{"functionDeclarations": self.tools}],
            "generationConfig": GENERATION_CONFIG,
        }

        logger.debug(f"Sending {len(contents)} turns to {self.model}")
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.url, params={"key": self.api_key}, json=payload) as response:
                    body = await response.text()
                    if response.status != 200:
                        logger.error(f"Gemini API returned {response.status}: {body[:500]}")
                        raise GeminiError(f"Gemini API returned status {response.status}")
                    data = json.loads(body)
        except aiohttp.ClientError as e:
            raise GeminiError(f"Error calling Gemini: {str(e)}") from e
        except json.JSONDecodeError as e:
            raise GeminiError(f"Error parsing Gemini response: {str(e)}") from e

        reply = parse_reply(data)
        logger.info(f"Gemini replied with {len(reply.text)} chars and {len(reply.function_calls)} function calls")
        return reply
