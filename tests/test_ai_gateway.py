"""
Tests for the LLM gateway client.
"""
import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from clipstudio.ai_gateway import (
    AIGateway,
    AIGatewayError,
    CreditsExhaustedError,
    RateLimitedError,
)
from clipstudio.pipeline.proposer import IDENTIFY_CLIPS_TOOL

GATEWAY_URL = "https://gateway.example.com/v1/chat/completions"


def _completion(arguments):
    """Shape of a chat completion whose first choice made one tool call."""
    tool_call = SimpleNamespace(function=SimpleNamespace(name="identify_clips", arguments=arguments))
    message = SimpleNamespace(tool_calls=[tool_call], content=None)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _status_error(cls, status_code):
    response = httpx.Response(status_code, request=httpx.Request("POST", GATEWAY_URL))
    return cls(f"HTTP {status_code}", response=response, body=None)


def _gateway(create):
    client = MagicMock()
    client.chat.completions.create.side_effect = create
    return AIGateway(api_key="key", base_url="https://gateway.example.com/v1", model="test-model", client=client), client


class TestCallTool:

    def test_returns_tool_arguments(self):
        payload = {"clips": [{"startTime": 0, "endTime": 20, "title": "A", "viralityScore": 90, "hook": "Wait"}]}
        gateway, client = _gateway(lambda **kwargs: _completion(json.dumps(payload)))

        assert gateway.call_tool("system", "user", IDENTIFY_CLIPS_TOOL) == payload

    def test_forces_the_tool(self):
        gateway, client = _gateway(lambda **kwargs: _completion('{"clips": []}'))
        gateway.call_tool("system prompt", "user prompt", IDENTIFY_CLIPS_TOOL)

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["tools"] == [IDENTIFY_CLIPS_TOOL]
        assert kwargs["tool_choice"] == {"type": "function", "function": {"name": "identify_clips"}}
        assert kwargs["messages"] == [
            {"role": "system", "content": "system prompt"},
            {"role": "user", "content": "user prompt"},
        ]

    def test_rate_limited(self):
        gateway, _ = _gateway(_status_error(openai.RateLimitError, 429))
        with pytest.raises(RateLimitedError) as exc_info:
            gateway.call_tool("s", "u", IDENTIFY_CLIPS_TOOL)
        assert exc_info.value.status_code == 429
        assert str(exc_info.value) == "Rate limited. Please try again in a moment."

    def test_credits_exhausted(self):
        gateway, _ = _gateway(_status_error(openai.APIStatusError, 402))
        with pytest.raises(CreditsExhaustedError) as exc_info:
            gateway.call_tool("s", "u", IDENTIFY_CLIPS_TOOL)
        assert exc_info.value.status_code == 402
        assert str(exc_info.value) == "AI credits exhausted. Please add funds to continue."

    def test_other_status(self):
        gateway, _ = _gateway(_status_error(openai.InternalServerError, 500))
        with pytest.raises(AIGatewayError) as exc_info:
            gateway.call_tool("s", "u", IDENTIFY_CLIPS_TOOL)
        assert exc_info.value.status_code == 500
        assert str(exc_info.value) == "AI gateway error"

    def test_connection_error(self):
        error = openai.APIConnectionError(request=httpx.Request("POST", GATEWAY_URL))
        gateway, _ = _gateway(error)
        with pytest.raises(AIGatewayError) as exc_info:
            gateway.call_tool("s", "u", IDENTIFY_CLIPS_TOOL)
        assert exc_info.value.status_code is None

    def test_no_tool_call(self):
        message = SimpleNamespace(tool_calls=None, content="Here are some clips")
        response = SimpleNamespace(choices=[SimpleNamespace(message=message)])
        gateway, _ = _gateway(lambda **kwargs: response)
        with pytest.raises(AIGatewayError, match="no tool call"):
            gateway.call_tool("s", "u", IDENTIFY_CLIPS_TOOL)

    def test_empty_choices(self):
        gateway, _ = _gateway(lambda **kwargs: SimpleNamespace(choices=[]))
        with pytest.raises(AIGatewayError, match="no tool call"):
            gateway.call_tool("s", "u", IDENTIFY_CLIPS_TOOL)

    def test_invalid_json(self):
        gateway, _ = _gateway(lambda **kwargs: _completion("{clips: oops"))
        with pytest.raises(AIGatewayError, match="not valid JSON"):
            gateway.call_tool("s", "u", IDENTIFY_CLIPS_TOOL)

    def test_non_object_arguments(self):
        gateway, _ = _gateway(lambda **kwargs: _completion("[1, 2, 3]"))
        with pytest.raises(AIGatewayError, match="not an object"):
            gateway.call_tool("s", "u", IDENTIFY_CLIPS_TOOL)


class TestFromSettings:

    def test_no_key_means_no_gateway(self, monkeypatch):
        from clipstudio.config import get_settings

        monkeypatch.setattr(get_settings(), "ai_gateway_api_key", None)
        assert AIGateway.from_settings() is None

    def test_key_builds_client_without_retries(self, monkeypatch):
        from clipstudio.config import get_settings

        settings = get_settings()
        monkeypatch.setattr(settings, "ai_gateway_api_key", "sk-test")
        gateway = AIGateway.from_settings()

        assert gateway is not None
        assert gateway.model == settings.ai_model
        assert gateway.client.max_retries == 0
