import logging
from typing import Optional, Protocol

import google.generativeai as genai
import httpx
from anthropic import AsyncAnthropic

from kltransit.config import Settings
from kltransit.exceptions import CollaboratorCallError

logger = logging.getLogger("kltransit.llm")

PLACEHOLDER_KEYS = {"", "your-api-key-here", "your-anthropic-api-key-here", "your-gemini-api-key-here"}

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-20250514"
PROVIDERS = ("gemini", "anthropic")


class LLMCollaborator(Protocol):
    """Text in, text out. Implementations raise CollaboratorCallError on failure."""

    name: str

    async def complete(self, prompt: str) -> str:
        ...


def _is_configured(api_key: Optional[str]) -> bool:
    return bool(api_key) and api_key.strip() not in PLACEHOLDER_KEYS


class GeminiCollaborator:
    name = "gemini"

    def __init__(self, api_key: str, model_name: str = DEFAULT_GEMINI_MODEL, timeout: Optional[float] = None):
        self.api_key = api_key
        self.model_name = model_name
        self.timeout = timeout
        self._model = None

    def _get_model(self):
        if self._model is None:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(model_name=self.model_name)
        return self._model

    async def complete(self, prompt: str) -> str:
        if not _is_configured(self.api_key):
            raise CollaboratorCallError("GEMINI_API_KEY is not configured")
        try:
            response = await self._get_model().generate_content_async(
                prompt,
                request_options={"timeout": self.timeout} if self.timeout else None,
            )
            text = response.text
        except Exception as e:
            logger.error(f"Gemini API error: {e}")
            raise CollaboratorCallError(f"Gemini call failed: {e}") from e
        return text or ""


class ClaudeCollaborator:
    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model_name: str = DEFAULT_CLAUDE_MODEL,
        http_client: Optional[httpx.AsyncClient] = None,
        max_tokens: int = 2048,
    ):
        self.api_key = api_key
        self.model_name = model_name
        self.http_client = http_client
        self.max_tokens = max_tokens
        self._client: Optional[AsyncAnthropic] = None

    def _get_client(self) -> AsyncAnthropic:
        if self._client is None:
            self._client = AsyncAnthropic(api_key=self.api_key, http_client=self.http_client)
        return self._client

    async def complete(self, prompt: str) -> str:
        if not _is_configured(self.api_key):
            raise CollaboratorCallError("ANTHROPIC_API_KEY is not configured")
        try:
            response = await self._get_client().messages.create(
                model=self.model_name,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            logger.error(f"Claude API error: {e}")
            raise CollaboratorCallError(f"Claude call failed: {e}") from e

        text = ""
        for block in response.content:
            if hasattr(block, "text"):
                text += block.text
        return text


def create_collaborator(settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> LLMCollaborator:
    """Pick the LLM backend named by LLM_PROVIDER."""
    provider = settings.llm_provider
    if provider not in PROVIDERS:
        logger.warning(f"Unknown LLM_PROVIDER '{provider}', using gemini. Expected one of: {', '.join(PROVIDERS)}")
    if provider == "anthropic":
        collaborator = ClaudeCollaborator(
            api_key=settings.anthropic_api_key,
            model_name=settings.llm_model or DEFAULT_CLAUDE_MODEL,
            http_client=http_client,
        )
        configured = _is_configured(settings.anthropic_api_key)
    else:
        collaborator = GeminiCollaborator(
            api_key=settings.gemini_api_key,
            model_name=settings.llm_model or DEFAULT_GEMINI_MODEL,
            timeout=settings.llm_timeout_seconds,
        )
        configured = _is_configured(settings.gemini_api_key)

    if not configured:
        logger.warning(
            f"LLM provider '{collaborator.name}' has no API key; "
            "/ai/estimate will return fallback responses and /ai/train-fare-model will fail."
        )
    logger.info(f"LLM collaborator: {collaborator.name} ({collaborator.model_name})")
    return collaborator
