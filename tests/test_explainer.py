import pytest

from conftest import FakeProvider, make_connection_error, make_status_error

from mathsplainer.errors import MalformedProviderResponse, MissingCredential, MissingInput, ProviderError
from mathsplainer.explainer import MathExplainer
from mathsplainer.prompts import IMAGE_INSTRUCTION
from mathsplainer.translator import ExplanationResult


@pytest.mark.asyncio
async def test_text_problem_end_to_end(settings):
    provider = FakeProvider()
    explainer = MathExplainer(settings, provider=provider)

    outcome = await explainer.explain_problem({"problem": "Solve 2x + 3 = 7"})

    assert outcome == ExplanationResult(explanation="Step 1: ...", model="m", usage={"total_tokens": 42})
    request, api_key = provider.calls[0]
    assert api_key == "sk-default"
    assert request.model == "test/model"
    assert request.messages[1].content == "Solve 2x + 3 = 7"


@pytest.mark.asyncio
async def test_image_problem_end_to_end(settings):
    provider = FakeProvider()
    explainer = MathExplainer(settings, provider=provider)

    outcome = await explainer.explain_image(
        {"imageBase64": "data:image/png;base64,AAAA", "apiKey": "sk-user", "additionalContext": "part (a)"}
    )

    assert isinstance(outcome, ExplanationResult)
    request, api_key = provider.calls[0]
    assert api_key == "sk-user"
    text_part, image_part = request.messages[1].content
    assert text_part["text"] == f"{IMAGE_INSTRUCTION} Additional context: part (a)"
    assert image_part["image_url"]["url"] == "data:image/png;base64,AAAA"


@pytest.mark.asyncio
async def test_both_kinds_report_model_the_same_way(settings):
    provider = FakeProvider(payload={"choices": [{"message": {"content": "done"}}]})
    explainer = MathExplainer(settings, provider=provider)

    text = await explainer.explain_problem({"problem": "1+1"})
    image = await explainer.explain_image({"imageBase64": "AAAA"})

    assert text.model == image.model == "test/model"


@pytest.mark.asyncio
async def test_missing_input_never_reaches_provider(settings):
    provider = FakeProvider()
    explainer = MathExplainer(settings, provider=provider)

    assert isinstance(await explainer.explain_problem({"problem": ""}), MissingInput)
    assert isinstance(await explainer.explain_image({"imageBase64": ""}), MissingInput)
    assert provider.calls == []


@pytest.mark.asyncio
async def test_missing_credential_never_reaches_provider(keyless_settings):
    provider = FakeProvider()
    explainer = MathExplainer(keyless_settings, provider=provider)

    text = await explainer.explain_problem({"problem": "1+1"})
    image = await explainer.explain_image({"imageBase64": "AAAA"})

    assert isinstance(text, MissingCredential)
    assert isinstance(image, MissingCredential)
    assert text.status_code == 401
    assert provider.calls == []


@pytest.mark.asyncio
async def test_provider_status_error_becomes_value(settings):
    provider = FakeProvider(error=make_status_error(429, {"error": {"message": "rate limited"}}))
    explainer = MathExplainer(settings, provider=provider)

    outcome = await explainer.explain_problem({"problem": "1+1"})

    assert isinstance(outcome, ProviderError)
    assert outcome.status_code == 429
    assert outcome.message == "rate limited"
    assert len(provider.calls) == 1


@pytest.mark.asyncio
async def test_network_failure_becomes_500(settings):
    explainer = MathExplainer(settings, provider=FakeProvider(error=make_connection_error()))

    outcome = await explainer.explain_image({"imageBase64": "AAAA"})

    assert isinstance(outcome, ProviderError)
    assert outcome.status_code == 500


@pytest.mark.asyncio
async def test_malformed_success_payload(settings):
    explainer = MathExplainer(settings, provider=FakeProvider(payload={"choices": []}))

    outcome = await explainer.explain_problem({"problem": "1+1"})

    assert isinstance(outcome, MalformedProviderResponse)
    assert outcome.status_code == 500
