import httpx
import openai
import pytest

from mathsplainer.config import Settings
from mathsplainer.providers.base import ChatProvider

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"

SUCCESS_PAYLOAD = {
    "id": "gen-1",
    "model": "m",
    "choices": [{"index": 0, "message": {"role": "assistant", "content": "Step 1: ..."}}],
    "usage": {"total_tokens": 42},
}


class FakeProvider(ChatProvider):
    provider_name = "fake"

    def __init__(self, payload=None, error=None) -> None:
        self.payload = SUCCESS_PAYLOAD if payload is None else payload
        self.error = error
        self.calls = []

    async def complete(self, request, api_key):
        self.calls.append((request, api_key))
        if self.error is not None:
            raise self.error
        return self.payload


def make_status_error(status: int, body) -> openai.APIStatusError:
    request = httpx.Request("POST", OPENROUTER_URL)
    response = httpx.Response(status, json=body, request=request)
    inner = body.get("error", body) if isinstance(body, dict) else body
    return openai.APIStatusError(f"Error code: {status}", response=response, body=inner)


def make_connection_error() -> openai.APIConnectionError:
    return openai.APIConnectionError(request=httpx.Request("POST", OPENROUTER_URL))


@pytest.fixture
def settings():
    return Settings(api_key="sk-default", model="test/model")


@pytest.fixture
def keyless_settings():
    return Settings(api_key=None, model="test/model")
