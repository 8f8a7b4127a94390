import json

import httpx
import openai
import pytest

from conftest import SUCCESS_PAYLOAD, make_status_error

from mathsplainer.config import Settings
from mathsplainer.errors import MalformedProviderResponse, ProviderError
from mathsplainer.explainer import MathExplainer
from mathsplainer.providers.base import ChatMessage, ProviderChatRequest
from mathsplainer.providers.openrouter import OpenRouterProvider


class FakeCompletion:
    def __init__(self, payload) -> None:
        self.payload = payload
        self.dump_kwargs = None

    def model_dump(self, **kwargs):
        self.dump_kwargs = kwargs
        return self.payload


class FakeCompletions:
    def __init__(self, payload=None, error=None) -> None:
        self.payload = payload
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return FakeCompletion(self.payload)


class FakeChat:
    def __init__(self, completions) -> None:
        self.completions = completions


class FakeAsyncOpenAI:
    def __init__(self, completions) -> None:
        self.chat = FakeChat(completions)
        self.closed = False

    async def close(self):
        self.closed = True


def _request():
    return ProviderChatRequest(
        model="test/model",
        messages=[ChatMessage(role="system", content="sys"), ChatMessage(role="user", content="1+1")],
        temperature=0.3,
        max_tokens=4000,
    )


@pytest.mark.asyncio
async def test_complete_sends_one_request_and_returns_body():
    completions = FakeCompletions(payload=SUCCESS_PAYLOAD)
    clients = []

    def factory(api_key):
        clients.append((api_key, FakeAsyncOpenAI(completions)))
        return clients[-1][1]

    provider = OpenRouterProvider(Settings(), client_factory=factory)
    body = await provider.complete(_request(), "sk-test")

    assert body == SUCCESS_PAYLOAD
    assert len(completions.calls) == 1
    assert completions.calls[0] == {
        "model": "test/model",
        "messages": [{"role": "system", "content": "sys"}, {"role": "user", "content": "1+1"}],
        "temperature": 0.3,
        "max_tokens": 4000,
    }
    assert clients[0][0] == "sk-test"
    assert clients[0][1].closed


@pytest.mark.asyncio
async def test_complete_raises_provider_errors_and_closes_client():
    completions = FakeCompletions(error=make_status_error(429, {"error": {"message": "rate limited"}}))
    client = FakeAsyncOpenAI(completions)
    provider = OpenRouterProvider(Settings(), client_factory=lambda api_key: client)

    with pytest.raises(openai.APIStatusError) as info:
        await provider.complete(_request(), "sk-test")

    assert info.value.status_code == 429
    assert len(completions.calls) == 1
    assert client.closed


class RecordingTransport(httpx.MockTransport):
    """Serves one canned response and keeps every request it saw."""

    def __init__(self, response: httpx.Response) -> None:
        self.requests = []

        def handler(request):
            self.requests.append(request)
            return response

        super().__init__(handler)


@pytest.mark.asyncio
async def test_outgoing_request_carries_key_and_attribution_headers():
    transport = RecordingTransport(httpx.Response(200, json=SUCCESS_PAYLOAD))
    settings = Settings(site_url="https://mathsplainer.example.com", app_title="MathSplainer")
    provider = OpenRouterProvider(settings, transport=transport)

    body = await provider.complete(_request(), "sk-test")

    assert body["model"] == "m"
    assert body["usage"] == {"total_tokens": 42}
    assert len(transport.requests) == 1
    sent = transport.requests[0]
    assert str(sent.url) == "https://openrouter.ai/api/v1/chat/completions"
    assert sent.headers["Authorization"] == "Bearer sk-test"
    assert sent.headers["HTTP-Referer"] == "https://mathsplainer.example.com"
    assert sent.headers["X-Title"] == "MathSplainer"
    assert json.loads(sent.content)["max_tokens"] == 4000


@pytest.mark.asyncio
async def test_rate_limit_is_not_retried():
    transport = RecordingTransport(httpx.Response(429, json={"error": {"message": "rate limited"}}))
    settings = Settings(api_key="sk-default")
    explainer = MathExplainer(settings, provider=OpenRouterProvider(settings, transport=transport))

    outcome = await explainer.explain_problem({"problem": "1+1"})

    assert isinstance(outcome, ProviderError)
    assert outcome.status_code == 429
    assert outcome.message == "rate limited"
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_non_json_success_reply_is_malformed():
    html = httpx.Response(200, text="<html>oops</html>", headers={"content-type": "text/html"})
    transport = RecordingTransport(html)
    settings = Settings(api_key="sk-default")
    explainer = MathExplainer(settings, provider=OpenRouterProvider(settings, transport=transport))

    outcome = await explainer.explain_problem({"problem": "1+1"})

    assert isinstance(outcome, MalformedProviderResponse)
    assert outcome.status_code == 500
    assert outcome.to_report()["statusMessage"] == "Provider returned no explanation"
    assert len(transport.requests) == 1
