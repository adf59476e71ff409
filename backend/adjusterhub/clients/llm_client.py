"""Wrapper around the Anthropic Claude API for the adjuster assistant."""

import logging
from typing import Dict, List

import anthropic

from adjusterhub.utils.retry import with_retry

logger = logging.getLogger(__name__)


class LLMClient:
    """Chat completions for the assistant.

    Responsibilities:
    - Send a system prompt plus conversation history
    - Track token usage
    - Retry on transient failures
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 1024,
        retry_max_attempts: int = 3,
    ):
        self.client = anthropic.Anthropic(api_key=api_key or "unset")
        self.model = model
        self.max_tokens = max_tokens
        self.configured = bool(api_key)
        self.total_input_tokens: int = 0
        self.total_output_tokens: int = 0
        self._retry_max_attempts = retry_max_attempts

    def chat(self, system_prompt: str, messages: List[Dict[str, str]]) -> str:
        """Return the assistant's reply text.

        ``messages`` alternate ``{"role": "user"|"assistant", "content": ...}``
        and must end with a user turn.
        """

        @with_retry(
            max_attempts=self._retry_max_attempts,
            initial_delay=2.0,
            retry_on=(
                anthropic.APITimeoutError,
                anthropic.APIConnectionError,
                anthropic.RateLimitError,
                anthropic.InternalServerError,
            ),
            reraise_on=(
                anthropic.BadRequestError,
                anthropic.AuthenticationError,
            ),
        )
        def _create():
            return self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system_prompt,
                messages=messages,
            )

        message = _create()
        self.total_input_tokens += message.usage.input_tokens
        self.total_output_tokens += message.usage.output_tokens
        text = "".join(block.text for block in message.content if getattr(block, "type", "") == "text")
        logger.debug("assistant reply: %d chars, %d output tokens", len(text), message.usage.output_tokens)
        return text
