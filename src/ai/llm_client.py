"""OpenAI chat-completion client used by the analysis and planning services."""

from __future__ import annotations

from typing import Optional

from loguru import logger
from openai import AsyncOpenAI, OpenAIError

from src.config import LLMConfig

TEMPERATURE = 0.7


class LLMProviderError(Exception):
    """The completion provider rejected or failed the request."""


class LLMClient:
    def __init__(self, config: LLMConfig, client: Optional[AsyncOpenAI] = None):
        self.config = config
        self._client = client or AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.endpoint or None,
            timeout=config.timeout,
        )

    async def complete(self, system_prompt: str, prompt: str, max_tokens: int) -> str:
        """
        Run one chat completion and return the generated text.

        Args:
            system_prompt: Instruction sent as the system message
            prompt: User message
            max_tokens: Upper bound on generated tokens

        Returns:
            The response text, or an empty string when the model returned none
        """
        try:
            response = await self._client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                temperature=TEMPERATURE,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            logger.error(f"LLM API call failed: {e}")
            raise LLMProviderError(str(e)) from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
