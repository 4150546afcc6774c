"""
Chat-completion client used by every model-backed stage.

Each call carries its own request timeout and runs with retries disabled,
so a slow call is aborted by the HTTP layer instead of being left running
in the background. Transport failures surface as ``LLMError`` /
``LLMTimeoutError`` for the caller to fall back on.
"""
from typing import Dict, List, Optional

from openai import APITimeoutError, OpenAI, OpenAIError

from carsearch.core.config import SearchConfig, get_config
from carsearch.core.errors import LLMError, LLMTimeoutError
from carsearch.utils.logger import get_logger

logger = get_logger("llm.client")

Message = Dict[str, str]


class OpenAIChatClient:
    """Thin wrapper around ``openai.OpenAI`` chat completions."""

    def __init__(self, config: Optional[SearchConfig] = None, client: Optional[OpenAI] = None):
        self.config = config or get_config()
        self._client = client

    @property
    def client(self) -> OpenAI:
        # Built lazily: a missing API key becomes an LLMError on first use,
        # which every stage already treats as "use the fallback".
        if self._client is None:
            try:
                self._client = OpenAI()
            except OpenAIError as exc:
                raise LLMError(f"OpenAI client unavailable: {exc}") from exc
        return self._client

    def complete(
        self,
        messages: List[Message],
        *,
        temperature: float,
        max_tokens: int,
        timeout: float,
        json_output: bool = False,
    ) -> str:
        """
        Run one chat completion and return the message text.

        Args:
            messages: Chat messages [{"role": ..., "content": ...}]
            temperature: Sampling temperature
            max_tokens: Maximum completion tokens
            timeout: Hard request timeout in seconds
            json_output: Request a JSON object response

        Returns:
            The assistant message content (stripped)

        Raises:
            LLMTimeoutError: The request exceeded ``timeout``
            LLMError: Any other client or API failure, or an empty answer
        """
        kwargs = {
            "model": self.config.llm_model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_output:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self.client.with_options(timeout=timeout, max_retries=0).chat.completions.create(**kwargs)
        except APITimeoutError as exc:
            raise LLMTimeoutError(f"Model call exceeded {timeout}s") from exc
        except OpenAIError as exc:
            raise LLMError(f"Model call failed: {exc}") from exc

        if not response.choices:
            raise LLMError("Model returned no choices")
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise LLMError("Model returned an empty message")

        logger.debug(f"Model answered with {len(content)} chars")
        return content.strip()
