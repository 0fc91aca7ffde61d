# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-22
# Updated: 2026-01-22
# Description: OpenAIChat
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Dict, Any, List, Optional, Iterator

from openai import OpenAI

import settings
from utility.errors import QAConfigurationError, QAProviderError
from utility.logging_utils import get_class_logger

Message = Dict[str, str]  # {"role": "system"|"user"|"assistant", "content": "..."}


@dataclass
class OpenAIChat:
    """
        OpenAI chat wrapper exposing the CompletionProvider interface.

        Expected Config fields:
          cfg.openai_api_key: str
          cfg.openai_chat_model: str  (e.g. "gpt-4o-mini", "gpt-4o", etc.)
          cfg.openai_base_url: str (optional)
    """

    cfg: Any
    temperature: float = settings.COMPLETION_TEMPERATURE
    max_tokens: int = settings.COMPLETION_MAX_TOKENS
    client: Any = None
    logger: Any = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

        if self.client is None and not getattr(self.cfg, "openai_api_key", None):
            raise QAConfigurationError("Config is missing openai_api_key for chat completions")

        self.model = getattr(self.cfg, "openai_chat_model", None)
        if not self.model:
            raise QAConfigurationError("Config missing openai_chat_model for chat completions")

        if self.client is None:
            self.client = OpenAI(
                api_key=self.cfg.openai_api_key,
                base_url=getattr(self.cfg, "openai_base_url", None) or None,
            )

        self.logger.info("OpenAIChat initialised (model=%s)", self.model)

    def _params(self, messages: List[Message], stream: bool, **overrides: Any) -> Dict[str, Any]:
        if not messages:
            raise ValueError("messages must be non-empty.")
        params: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": overrides.pop("temperature", self.temperature),
            "max_tokens": overrides.pop("max_tokens", self.max_tokens),
        }
        if stream:
            params["stream"] = True
        params.update(overrides)
        return params

    # Standard chat call
    def chat(self, messages: List[Message], **overrides: Any) -> Any:
        params = self._params(messages, stream=False, **overrides)
        self.logger.debug(
            "Chat request: model=%s temp=%s max_tokens=%s",
            self.model, params["temperature"], params["max_tokens"],
        )
        try:
            resp = self.client.chat.completions.create(**params)
        except Exception as e:
            self.logger.error("Chat completion failed: %s", e)
            raise QAProviderError(f"Completion request failed: {e}", operation="complete") from e

        self.logger.debug("Token usage: %r", getattr(resp, "usage", None))
        return resp

    # Streaming chat call
    def chat_stream(self, messages: List[Message], **overrides: Any) -> Iterator[str]:
        params = self._params(messages, stream=True, **overrides)
        try:
            stream = self.client.chat.completions.create(**params)
        except Exception as e:
            self.logger.error("Streaming chat completion failed to start: %s", e)
            raise QAProviderError(f"Completion stream failed: {e}", operation="complete_stream") from e

        try:
            for event in stream:
                if not event.choices:
                    continue
                delta = event.choices[0].delta
                if delta is not None and getattr(delta, "content", None):
                    yield delta.content
        except GeneratorExit:
            self.logger.info("Completion stream closed by consumer")
            raise
        except Exception as e:
            self.logger.error("Completion stream failed mid-response: %s", e)
            raise QAProviderError(f"Completion stream failed: {e}", operation="complete_stream") from e
        finally:
            close = getattr(stream, "close", None)
            if callable(close):
                close()

    # CompletionProvider interface
    def complete(self, prompt: str) -> str:
        resp = self.chat([{"role": "user", "content": prompt}])
        try:
            content = resp.choices[0].message.content or ""
        except (AttributeError, IndexError) as e:
            self.logger.error("Unexpected chat response format: %s", e, exc_info=True)
            raise QAProviderError(f"Unexpected chat response format: {e}", operation="complete") from e

        self.logger.info("Chat answer generated (model=%s, chars=%d)", getattr(resp, "model", None), len(content))
        return content

    def complete_stream(self, prompt: str) -> Iterator[str]:
        return self.chat_stream([{"role": "user", "content": prompt}])

    def healthcheck(self) -> bool:
        try:
            _ = self.chat(
                [{"role": "user", "content": "Reply with a single word: OK"}],
                max_tokens=5,
                temperature=0.0,
            )
            return True
        except QAProviderError as e:
            self.logger.warning("Chat healthcheck failed: %s", e)
            return False
