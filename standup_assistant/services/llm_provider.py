"""
LLM Provider - OpenAI and OpenAI-compatible backends (Groq, Together, Ollama's /v1)
"""
from typing import Dict, Any, Optional

from openai import AsyncOpenAI, OpenAIError

from ..config import Settings, settings as default_settings
from ..utils.logging import get_logger

logger = get_logger(__name__)


class LLMError(Exception):
    """Raised when the completion backend fails."""
    pass


class LLMProvider:
    """Unified interface for OpenAI-compatible completion backends"""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[AsyncOpenAI] = None):
        self.settings = settings or default_settings
        self._client = client
        self.provider = self._detect_provider()
        logger.info(f"Initialized LLM provider: {self.provider}")

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self.settings.openai_api_key)

    def _detect_provider(self) -> str:
        """Detect which LLM provider to use based on configuration"""
        api_key = self.settings.openai_api_key or ""
        if not self.is_configured:
            return "none"
        if api_key.startswith("gsk_"):
            return "groq"
        if self.settings.openai_api_base and "11434" in self.settings.openai_api_base:
            return "ollama"
        return "openai"

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.settings.openai_api_key,
                base_url=self.settings.openai_api_base
            )
        return self._client

    async def generate_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Generate completion using the configured provider

        Returns:
            {
                "content": str,
                "tokens_used": int,
                "model": str,
                "provider": str
            }
        """
        if not self.is_configured:
            raise LLMError("LLM backend is not configured")

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self._get_client().chat.completions.create(
                model=self.settings.openai_model,
                messages=messages,
                max_tokens=max_tokens or self.settings.max_tokens,
                temperature=self.settings.openai_temperature if temperature is None else temperature
            )
        except OpenAIError as e:
            logger.error(f"LLM API error: {e}")
            raise LLMError(f"LLM API failed: {str(e)}") from e

        content = response.choices[0].message.content if response.choices else ""
        usage = getattr(response, "usage", None)
        return {
            "content": (content or "").strip(),
            "tokens_used": usage.total_tokens if usage else 0,
            "model": response.model,
            "provider": self.provider
        }
