"""Unit tests for the model catalog client."""

import httpx
import pytest

from ai_conversation.catalog.model_catalog import ModelCatalogClient, ModelMetadata, parse_models
from ai_conversation.errors import ApiCallFailed


def make_client(handler):
    return ModelCatalogClient("token-123", transport=httpx.MockTransport(handler))


def test_get_models_sends_headers():
    seen = {}

    def handler(request):
        seen.update(request.headers)
        seen["url"] = str(request.url)
        return httpx.Response(200, json=[{"name": "gpt-4o"}])

    with make_client(handler) as client:
        models = client.get_models()

    assert [m.name for m in models] == ["gpt-4o"]
    assert seen["url"] == "https://api.github.com/models"
    assert seen["authorization"] == "Bearer token-123"
    assert seen["accept"] == "application/json"
    assert seen["user-agent"] == "ai-conversation/1.0"
    assert seen["x-github-api-version"] == "2022-11-28"


@pytest.mark.parametrize("payload", [
    [{"id": "m1"}],
    {"models": [{"id": "m1"}]},
    {"data": [{"id": "m1"}]},
])
def test_parse_known_shapes(payload):
    assert [m.name for m in parse_models(payload)] == ["m1"]


@pytest.mark.parametrize("payload", [{}, {"items": []}, "text", None])
def test_parse_unknown_shape_is_empty(payload):
    assert parse_models(payload) == []


def test_metadata_key_aliases():
    model = ModelMetadata.from_dict({
        "id": "llama",
        "summary": "Open model",
        "publisher": "Meta",
        "endpoint_url": "https://example.com/llama",
        "context_window": 131072,
        "modalities": ["text", " image ", "", 5],
    })

    assert model == ModelMetadata(
        name="llama",
        description="Open model",
        owner="Meta",
        source="https://example.com/llama",
        context_length=131072,
        modalities="text, image",
    )


def test_metadata_defaults():
    model = ModelMetadata.from_dict({"name": "", "context_length": "big", "modality": "text"})

    assert model.name == "<unknown>"
    assert model.context_length is None
    assert model.modalities == "text"


def test_non_success_status():
    with make_client(lambda request: httpx.Response(500)) as client:
        with pytest.raises(ApiCallFailed) as exc_info:
            client.get_models()

    assert exc_info.value.reason == "status"


def test_unauthorized_status():
    with make_client(lambda request: httpx.Response(401)) as client:
        with pytest.raises(ApiCallFailed) as exc_info:
            client.get_models()

    assert exc_info.value.reason == "auth"


def test_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with make_client(handler) as client:
        with pytest.raises(ApiCallFailed) as exc_info:
            client.get_models()

    assert exc_info.value.reason == "transport"


def test_invalid_json():
    with make_client(lambda request: httpx.Response(200, text="<html>")) as client:
        with pytest.raises(ApiCallFailed) as exc_info:
            client.get_models()

    assert exc_info.value.reason == "stream"
