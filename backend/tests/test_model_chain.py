import asyncio

import httpx
import pytest

from app.llm.model_chain import EMPTY_REPLY_TEXT, generate_with_fallback, try_models
from app.llm.providers import (
    GeminiProvider,
    ModelsExhaustedError,
    ProviderError,
    is_credential_error,
    is_soft_model_error,
)
from conftest import MODELS, FakeProvider

NOT_FOUND = ProviderError("models/model-a is not found for API version v1beta", status_code=404)
BAD_KEY = ProviderError("API key not valid. Please pass a valid API key. (API_KEY_INVALID)", status_code=400)


def test_error_classification():
    assert is_soft_model_error(NOT_FOUND)
    assert is_soft_model_error(ProviderError("model unsupported for generateContent", status_code=400))
    assert not is_soft_model_error(ProviderError("quota exceeded", status_code=429))
    assert is_credential_error(BAD_KEY)
    assert not is_soft_model_error(BAD_KEY)
    # Anahtar hatası 404 kılığında gelse bile yumuşak sayılmaz
    assert not is_soft_model_error(ProviderError("missing api key", status_code=404))


def test_try_models_skips_unavailable_models():
    provider = FakeProvider(by_model={"model-a": NOT_FOUND, "model-b": " Merhaba "})
    assert asyncio.run(try_models(provider, MODELS, "soru")) == "Merhaba"
    assert [m for m, _ in provider.calls] == ["model-a", "model-b"]


def test_third_candidate_answers_after_two_unavailable():
    candidates = ("gemini-2.5-flash", "gemini-2.0-flash", "gemini-1.5-flash-8b")
    provider = FakeProvider(
        by_model={
            "gemini-2.5-flash": NOT_FOUND,
            "gemini-2.0-flash": ProviderError("model gemini-2.0-flash not found", status_code=404),
            "gemini-1.5-flash-8b": "Üçüncü model yanıtladı",
        }
    )

    assert asyncio.run(generate_with_fallback(provider, candidates, "soru")) == (
        "Üçüncü model yanıtladı",
        "gemini-1.5-flash-8b",
    )
    assert [m for m, _ in provider.calls] == list(candidates)


def test_try_models_returns_none_when_nothing_answers():
    provider = FakeProvider(by_model={"model-a": NOT_FOUND, "model-b": ""})
    assert asyncio.run(try_models(provider, MODELS, "soru")) is None


def test_try_models_raises_credential_error_immediately():
    provider = FakeProvider(by_model={"model-a": BAD_KEY, "model-b": "yanıt"})
    with pytest.raises(ProviderError):
        asyncio.run(try_models(provider, MODELS, "soru"))
    assert len(provider.calls) == 1


def test_generate_with_fallback_reports_model():
    provider = FakeProvider(by_model={"model-a": NOT_FOUND, "model-b": "Merhaba!"})
    assert asyncio.run(generate_with_fallback(provider, MODELS, "soru")) == ("Merhaba!", "model-b")


def test_generate_with_fallback_empty_text():
    provider = FakeProvider(default="   ")
    assert asyncio.run(generate_with_fallback(provider, MODELS, "soru")) == (EMPTY_REPLY_TEXT, "model-a")


def test_generate_with_fallback_exhausted():
    provider = FakeProvider(default=NOT_FOUND)
    with pytest.raises(ModelsExhaustedError) as exc:
        asyncio.run(generate_with_fallback(provider, MODELS, "soru"))
    assert str(exc.value) == "no_supported_model_for_api_version"


def _gemini(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiProvider(api_key="k-123", base_url="https://genai.test/v1beta/", client=client)


def test_gemini_provider_extracts_text():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["key"] = request.url.params.get("key")
        return httpx.Response(
            200,
            json={"candidates": [{"content": {"parts": [{"text": "Toplam "}, {"text": "150 TL"}]}}]},
        )

    async def run():
        provider = _gemini(handler)
        try:
            return await provider.generate("gemini-2.5-flash", "soru")
        finally:
            await provider.aclose()

    assert asyncio.run(run()) == "Toplam 150 TL"
    assert seen == {"path": "/v1beta/models/gemini-2.5-flash:generateContent", "key": "k-123"}


def test_gemini_provider_maps_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        if "bad-model" in request.url.path:
            return httpx.Response(404, json={"error": {"code": 404, "message": "models/bad-model is not found"}})
        return httpx.Response(
            400,
            json={
                "error": {
                    "code": 400,
                    "message": "API key not valid. Please pass a valid API key.",
                    "details": [{"reason": "API_KEY_INVALID"}],
                }
            },
        )

    async def run(model_id):
        provider = _gemini(handler)
        try:
            await provider.generate(model_id, "soru")
        except ProviderError as e:
            return e
        finally:
            await provider.aclose()

    missing = asyncio.run(run("bad-model"))
    assert missing.status_code == 404
    assert is_soft_model_error(missing)

    rejected = asyncio.run(run("gemini-2.5-flash"))
    assert rejected.status_code == 400
    assert is_credential_error(rejected)
    assert "API_KEY_INVALID" in str(rejected)
