"""
Client for the hosted LLM completion gateway (OpenAI-compatible API).
"""
import json
from typing import Any, Dict, Optional

import openai

from .config import get_settings
from .logging_config import get_logger

logger = get_logger("ai_gateway")

RATE_LIMITED_MESSAGE = "Rate limited. Please try again in a moment."
CREDITS_EXHAUSTED_MESSAGE = "AI credits exhausted. Please add funds to continue."


class AIGatewayError(Exception):
    """The gateway call failed or returned something unusable"""

    def __init__(self, message: str = "AI gateway error", status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class RateLimitedError(AIGatewayError):
    def __init__(self):
        super().__init__(RATE_LIMITED_MESSAGE, 429)


class CreditsExhaustedError(AIGatewayError):
    def __init__(self):
        super().__init__(CREDITS_EXHAUSTED_MESSAGE, 402)


class AIGateway:
    """Thin wrapper issuing single forced-tool chat completions"""

    def __init__(self, api_key: str, base_url: str, model: str, timeout: float = 60.0, client=None):
        self.model = model
        # No retries: a failed call goes straight to the caller's fallback
        self.client = client or openai.OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )

    @classmethod
    def from_settings(cls) -> Optional["AIGateway"]:
        """Build a gateway, or None when no API key is configured."""
        settings = get_settings()
        if not settings.ai_gateway_api_key:
            return None
        return cls(
            api_key=settings.ai_gateway_api_key,
            base_url=settings.ai_gateway_url,
            model=settings.ai_model,
            timeout=settings.ai_timeout_seconds,
        )

    def call_tool(self, system_prompt: str, user_prompt: str, tool: Dict[str, Any]) -> Dict[str, Any]:
        """
        Send one completion that must answer through `tool` and return
        the decoded arguments of the first tool call.

        Raises RateLimitedError on 429, CreditsExhaustedError on 402 and
        AIGatewayError for anything else that goes wrong.
        """
        name = tool["function"]["name"]
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                tools=[tool],
                tool_choice={"type": "function", "function": {"name": name}},
            )
        except openai.APIStatusError as e:
            if e.status_code == 429:
                raise RateLimitedError() from e
            if e.status_code == 402:
                raise CreditsExhaustedError() from e
            logger.warning("ai_gateway_status_error", status_code=e.status_code, tool=name)
            raise AIGatewayError(status_code=e.status_code) from e
        except openai.APIError as e:
            raise AIGatewayError(f"AI gateway error: {e}") from e

        try:
            tool_call = response.choices[0].message.tool_calls[0]
        except (AttributeError, IndexError, TypeError):
            raise AIGatewayError("AI response contained no tool call")

        try:
            arguments = json.loads(tool_call.function.arguments)
        except (TypeError, ValueError) as e:
            raise AIGatewayError("AI tool call arguments were not valid JSON") from e

        if not isinstance(arguments, dict):
            raise AIGatewayError("AI tool call arguments were not an object")
        return arguments
