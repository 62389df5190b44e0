"""
Chat completion proxy
Forwards OpenAI-style chat turns to the Gemini generateContent API
"""
from typing import Any, Dict, List, Optional
from urllib.parse import quote
import logging

from .base import BaseHTTPService
from ..models import (
    ChatMessage, ChatRequest, ChatResponse,
    ConfigurationError, ExternalAPIError, AdapterError,
)
from ..monitoring import MetricsCollector

logger = logging.getLogger(__name__)

MODEL_ALIASES = {
    'gemini-1.5-flash-latest': 'gemini-1.5-flash',
    'gemini-1.5-pro-latest': 'gemini-1.5-pro',
    'flash': 'gemini-1.5-flash',
    'pro': 'gemini-1.5-pro',
    'latest': 'gemini-1.5-flash',
}

FALLBACK_MODELS = ('gemini-1.5-flash', 'gemini-1.5-flash-8b', 'gemini-1.5-pro')

API_VERSIONS = ('v1beta', 'v1')

# Statuses that mean "try another API version or model"
RETRYABLE_STATUSES = (403, 404)

MOCK_MODEL = 'mock'


class ChatFailedError(Exception):
    """Every candidate failed; carries what the last upstream said"""
    def __init__(self, status_code: int, payload: Any):
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"Chat upstream failed with status {status_code}")


def candidate_models(requested: Optional[str], default: str) -> List[str]:
    """Requested model (alias-normalized) followed by the fallbacks, without repeats"""
    raw = (requested or default).lower()
    first = MODEL_ALIASES.get(raw, raw)
    return list(dict.fromkeys([first, *FALLBACK_MODELS]))


def to_gemini_contents(messages: List[ChatMessage]) -> List[Dict[str, Any]]:
    """
    Map chat turns onto Gemini contents.

    Gemini knows only "user" and "model" roles. The system message is
    folded into the first user turn, or becomes one when the conversation
    does not start with the user.
    """
    system = next((m for m in messages if m.role == 'system'), None)
    contents = [
        {
            'role': 'model' if m.role == 'assistant' else 'user',
            'parts': [{'text': m.content}],
        }
        for m in messages if m.role != 'system'
    ]

    if system and system.content:
        if contents and contents[0]['role'] == 'user':
            first_text = contents[0]['parts'][0]['text']
            contents[0] = {
                'role': 'user',
                'parts': [{'text': f"{system.content}\n\n{first_text}"}],
            }
        else:
            contents.insert(0, {'role': 'user', 'parts': [{'text': system.content}]})

    return contents


def extract_text(data: Any) -> str:
    candidates = data.get('candidates') if isinstance(data, dict) else None
    if not isinstance(candidates, list) or not candidates:
        return ''
    parts = ((candidates[0] or {}).get('content') or {}).get('parts')
    if not isinstance(parts, list) or not parts:
        return ''
    return (parts[0] or {}).get('text') or ''


class GeminiChatService(BaseHTTPService):
    """Stateless pass-through with model and API-version fallback"""

    @property
    def service_name(self) -> str:
        return "gemini"

    @property
    def api_base_url(self) -> str:
        return "https://generativelanguage.googleapis.com"

    async def complete(self, request: ChatRequest) -> ChatResponse:
        """
        Return the first successful completion.

        Raises ConfigurationError when no API key is set and ChatFailedError
        when every attempt failed and mock replies are disabled.
        """
        api_key = self.security_config.gemini_api_key
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY")

        body = {
            'contents': to_gemini_contents(request.messages),
            'generationConfig': {'temperature': 0.7},
        }

        last_error: Optional[AdapterError] = None
        for model in candidate_models(request.model, self.settings.chat_default_model):
            try:
                text = await self._generate(model, body, api_key)
            except AdapterError as e:
                last_error = e
                if _status(e) in RETRYABLE_STATUSES:
                    logger.info(f"Model {model} unavailable, trying the next candidate")
                    continue
                break
            MetricsCollector.record_chat(model=model, success=True)
            return ChatResponse(content=text, model=model)

        MetricsCollector.record_chat(model=request.model or self.settings.chat_default_model, success=False)

        if self.settings.chatbot_mock_on_failure:
            return mock_reply(request.messages)

        status_code = _status(last_error) or 500
        payload = getattr(last_error, 'payload', None) or {'error': last_error.message if last_error else 'Unknown error'}
        logger.error(f"Gemini chat error: {payload}")
        raise ChatFailedError(status_code, payload)

    async def _generate(self, model: str, body: Dict[str, Any], api_key: str) -> str:
        """Try each API version in turn; only 403/404 moves on to the next"""
        last_error: Optional[AdapterError] = None
        for version in API_VERSIONS:
            url = f"{self.api_base_url}/{version}/models/{quote(model, safe='')}:generateContent"
            try:
                response = await self._make_request(
                    "POST",
                    url,
                    timeout=self.settings.chat_timeout,
                    json=body,
                    headers={'Content-Type': 'application/json', 'x-goog-api-key': api_key}
                )
            except ExternalAPIError as e:
                last_error = e
                if e.status_code in RETRYABLE_STATUSES:
                    continue
                raise
            try:
                return extract_text(response.json())
            except ValueError:
                return ''
        raise last_error


def _status(error: Optional[Exception]) -> Optional[int]:
    return getattr(error, 'status_code', None)


def mock_reply(messages: List[ChatMessage]) -> ChatResponse:
    last_user = next((m for m in reversed(messages) if m.role == 'user'), None)
    prompt = last_user.content if last_user and last_user.content else 'your topic'
    return ChatResponse(
        content=f'Mock reply: I cannot reach the LLM service right now, but here are thoughts about "{prompt}".',
        model=MOCK_MODEL
    )
