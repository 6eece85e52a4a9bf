"""
Completion Service - Thin wrapper over the OpenAI chat-completions API.

The language model is treated as an opaque text-completion service: callers
pass a system directive and a transcript and get text back, or a
CompletionServiceError they are expected to recover from.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from openai import OpenAI

from src.core.game_types import Role

logger = logging.getLogger(__name__)


OPENING_DIRECTIVE = (
    "The chat has just started and nobody has said anything yet. "
    "Open with a short, casual greeting."
)

TURING_TEST_SYSTEM_PROMPT = (
    "You are participating in a Turing Test game. You are an AI trying to convince "
    "a human that you are also human. Be natural, conversational, and human-like. "
    "Don't reveal that you're an AI. Respond as a normal person would."
)


class CompletionServiceError(Exception):
    """Raised when the completion service is unavailable or returns nothing usable."""
    pass


class CompletionService:
    """Generates chat replies through an OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = 'gpt-3.5-turbo',
        base_url: Optional[str] = None,
        timeout_seconds: float = 8.0,
        temperature: float = 0.9,
        max_tokens: int = 150,
        client: Any = None
    ):
        """
        Initialize the completion service.

        Args:
            api_key: API key; without one the service reports itself unconfigured
            model: Chat model name
            base_url: Optional alternative endpoint
            timeout_seconds: Upper bound for one request
            temperature: Sampling temperature
            max_tokens: Reply length cap
            client: Prebuilt client (tests)
        """
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client

        if self._client is None and api_key:
            self._client = OpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout_seconds,
                max_retries=0,
            )

        logger.info(f"CompletionService initialized (configured={self.is_configured()}, model={model})")

    def is_configured(self) -> bool:
        """Check if the service can make requests."""
        return self._client is not None

    def build_messages(self, system_prompt: str, transcript: Iterable, opening: bool = False) -> List[Dict[str, str]]:
        """
        Map a session transcript onto chat-completion messages.

        Detective turns become user turns; responder turns become assistant turns.
        """
        messages = [{"role": "system", "content": system_prompt}]
        if opening:
            messages.append({"role": "system", "content": OPENING_DIRECTIVE})

        for entry in transcript:
            role = 'assistant' if entry.speaker_role == Role.RESPONDER else 'user'
            messages.append({"role": role, "content": entry.text})

        return messages

    def complete(self, system_prompt: str, transcript: Iterable = (), opening: bool = False) -> str:
        """
        Generate the next responder turn.

        Args:
            system_prompt: Persona directive
            transcript: Session transcript entries, oldest first
            opening: Ask for an opening greeting instead of a reply

        Returns:
            Generated text

        Raises:
            CompletionServiceError: If unconfigured, on API error/timeout, or on empty output
        """
        return self._request(self.build_messages(system_prompt, transcript, opening))

    def chat(self, message: str, history: Iterable[Dict[str, Any]] = ()) -> str:
        """
        Single-player chat: reply to a message given a client-side history.

        History items look like {'sender': 'user'|'bot', 'text': str}.
        """
        messages = [{"role": "system", "content": TURING_TEST_SYSTEM_PROMPT}]
        for item in history:
            if not isinstance(item, dict):
                continue
            if item.get('sender') == 'user':
                messages.append({"role": "user", "content": str(item.get('text', ''))})
            elif item.get('sender') == 'bot':
                messages.append({"role": "assistant", "content": str(item.get('text', ''))})
        messages.append({"role": "user", "content": message})
        return self._request(messages, temperature=0.8)

    def _request(self, messages: List[Dict[str, str]], temperature: Optional[float] = None) -> str:
        if not self.is_configured():
            raise CompletionServiceError("Completion service is not configured")

        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature if temperature is None else temperature,
                max_tokens=self.max_tokens,
                timeout=self.timeout_seconds,
            )
            content = (response.choices[0].message.content or "").strip()
        except Exception as e:
            logger.warning(f"Completion request failed: {type(e).__name__}: {e}")
            raise CompletionServiceError(str(e)) from e

        if not content:
            raise CompletionServiceError("Completion service returned empty content")

        return content


def create_completion_service(
    openai_api_key: Optional[str] = None,
    openai_model: str = 'gpt-3.5-turbo',
    openai_base_url: Optional[str] = None,
    completion_timeout_seconds: float = 8.0,
    completion_temperature: float = 0.9,
    completion_max_tokens: int = 150
) -> CompletionService:
    """Build a CompletionService from configuration values."""
    return CompletionService(
        api_key=openai_api_key,
        model=openai_model,
        base_url=openai_base_url,
        timeout_seconds=completion_timeout_seconds,
        temperature=completion_temperature,
        max_tokens=completion_max_tokens,
    )
