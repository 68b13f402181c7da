import json
import logging
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from core.audit import AuditLog
from core.errors import AuthError, NetworkError, ParseError, UpstreamError, error_for_status
from core.prompts import build_system_prompt, build_user_message
from core.seasons import get_current_season_info
from schemas.models import ConversationContext, SeasonInfo

logger = logging.getLogger(__name__)

class CompletionClient:
    """
    One hosted chat-completion call per user action.

    Talks to Groq through the OpenAI SDK (Groq exposes an OpenAI-compatible
    endpoint). The SDK's own retries are disabled: a failed call surfaces
    immediately as a typed CompletionError and the caller decides what to do.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        top_p: float = 0.9,
        timeout: float = 60.0
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.top_p = top_p
        self._client = None
        if api_key:
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=0
            )

    @classmethod
    def from_settings(cls, settings) -> "CompletionClient":
        return cls(
            api_key=settings.GROQ_API_KEY,
            model=settings.GROQ_MODEL,
            base_url=settings.GROQ_BASE_URL,
            max_tokens=settings.MAX_TOKENS,
            temperature=settings.TEMPERATURE,
            top_p=settings.TOP_P,
            timeout=settings.REQUEST_TIMEOUT_SECONDS
        )

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def complete(
        self,
        user_message: str,
        context: ConversationContext,
        season: Optional[SeasonInfo] = None
    ) -> str:
        """Returns the raw completion text for a farmer's question."""
        messages = self._build_messages(user_message, context, season)
        return await self._create(messages)

    async def complete_json(
        self,
        user_message: str,
        context: ConversationContext,
        season: Optional[SeasonInfo] = None
    ) -> Dict[str, Any]:
        """
        Same call in JSON mode. Raises ParseError when the model answers with
        something that is not a JSON object.
        """
        messages = self._build_messages(user_message, context, season)
        raw = await self._create(messages, response_format={"type": "json_object"})
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseError(f"Completion is not valid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise ParseError("Completion JSON is not an object")
        return payload

    def _build_messages(
        self,
        user_message: str,
        context: ConversationContext,
        season: Optional[SeasonInfo]
    ) -> List[Dict[str, str]]:
        season = season or get_current_season_info()
        return [
            {"role": "system", "content": build_system_prompt(context, season)},
            {"role": "user", "content": build_user_message(user_message)}
        ]

    async def _create(self, messages: List[Dict[str, str]], **extra) -> str:
        if self._client is None:
            raise AuthError("Groq API key not configured. Set GROQ_API_KEY in the environment or .env file.")

        AuditLog.log_event(None, "COMPLETION_START", {"model": self.model, **extra})

        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                top_p=self.top_p,
                **extra
            )
        except openai.APIStatusError as e:
            logger.error(f"Groq API error: {e.status_code} - {e.message}")
            AuditLog.log_event(None, "COMPLETION_ERROR", {"status": e.status_code})
            raise error_for_status(e.status_code, f"Groq API error: {e.status_code} - {e.message}") from e
        except openai.APIConnectionError as e:
            # APITimeoutError is a subclass
            logger.error(f"Groq API network error: {e}")
            AuditLog.log_event(None, "COMPLETION_ERROR", {"error": "network"})
            raise NetworkError(f"Groq API network error: {e}") from e
        except openai.OpenAIError as e:
            logger.error(f"Groq API error: {e}")
            AuditLog.log_event(None, "COMPLETION_ERROR", {"error": str(e)})
            raise UpstreamError(f"Groq API error: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            AuditLog.log_event(None, "COMPLETION_ERROR", {"error": "empty"})
            raise UpstreamError("Empty response from Groq AI")

        AuditLog.log_event(None, "COMPLETION_SUCCESS", {"chars": len(content)})
        return content
