"""Unit tests for stream aggregation and API bindings."""

from unittest.mock import Mock, patch

import httpx
import openai
import pytest
from langchain_core.messages import AIMessageChunk

from ai_conversation.agents.bindings import ChatModelBinding, create_binding
from ai_conversation.agents.streaming import StreamAggregator, classify_failure
from ai_conversation.config.settings import LLMConfig
from ai_conversation.errors import ApiCallFailed

from conftest import RecordingLiveSink, ScriptedBinding


class ListBinding:
    def __init__(self, fragments):
        self.fragments = fragments

    def stream_complete(self, prompt):
        yield from self.fragments


def _request():
    return httpx.Request("POST", "https://models.example.com/chat/completions")


def _response(status):
    return httpx.Response(status, request=_request())


@pytest.mark.parametrize("fragments", [
    ["Hello", ", ", "world", "!"],
    ["single"],
    [],
    ["multi\nline ", "", "text"],
])
def test_aggregate_concatenates_in_order(fragments):
    live = RecordingLiveSink()
    text = StreamAggregator(live).aggregate(ListBinding(fragments), "prompt")

    assert text == "".join(fragments)
    assert live.fragments == fragments


def test_aggregate_forwards_before_next_fragment():
    live = RecordingLiveSink()
    seen = []

    def stream(prompt):
        yield "a"
        seen.append(list(live.fragments))
        yield "b"

    binding = Mock()
    binding.stream_complete.side_effect = stream

    StreamAggregator(live).aggregate(binding, "p")

    assert seen == [["a"]]


def test_aggregate_discards_partial_text_on_failure():
    live = RecordingLiveSink()
    binding = ScriptedBinding("Alice", fail_on_call=1)

    with pytest.raises(ApiCallFailed) as exc_info:
        StreamAggregator(live).aggregate(binding, "prompt")

    assert exc_info.value.reason == "stream"
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert live.fragments == ["Alice "]


def test_aggregate_classifies_auth_failure():
    error = openai.AuthenticationError("bad token", response=_response(401), body=None)
    binding = ScriptedBinding("Alice", fail_on_call=1, error=error)

    with pytest.raises(ApiCallFailed) as exc_info:
        StreamAggregator(RecordingLiveSink()).aggregate(binding, "prompt")

    assert exc_info.value.reason == "auth"


@pytest.mark.parametrize("error, reason", [
    (openai.AuthenticationError("x", response=_response(401), body=None), "auth"),
    (openai.PermissionDeniedError("x", response=_response(403), body=None), "auth"),
    (openai.APITimeoutError(request=_request()), "timeout"),
    (openai.APIConnectionError(request=_request()), "transport"),
    (openai.InternalServerError("x", response=_response(500), body=None), "status"),
    (openai.RateLimitError("x", response=_response(429), body=None), "status"),
    (ValueError("malformed chunk"), "stream"),
])
def test_classify_failure(error, reason):
    assert classify_failure(error) == reason


def test_chat_model_binding_yields_text_chunks():
    llm = Mock()
    llm.stream.return_value = iter([
        AIMessageChunk(content="Hel"),
        AIMessageChunk(content=""),
        AIMessageChunk(content="lo"),
    ])

    binding = ChatModelBinding(llm, model_name="gpt-4o")
    fragments = list(binding.stream_complete("Say hello"))

    assert fragments == ["Hel", "lo"]
    messages = llm.stream.call_args.args[0]
    assert messages[0].content == "Say hello"


def test_chat_model_binding_flattens_content_parts():
    llm = Mock()
    llm.stream.return_value = iter([
        AIMessageChunk(content=[{"type": "text", "text": "part one"}, {"type": "text", "text": " two"}]),
    ])

    assert list(ChatModelBinding(llm).stream_complete("p")) == ["part one two"]


def test_create_binding_configures_chat_client():
    config = LLMConfig(
        endpoint="https://models.example.com",
        api_key="token",
        temperature=0.5,
        max_tokens=256,
        timeout_seconds=30,
    )

    with patch("ai_conversation.agents.bindings.ChatOpenAI") as chat_openai:
        binding = create_binding("gpt-4o", config)

    kwargs = chat_openai.call_args.kwargs
    assert kwargs["model"] == "gpt-4o"
    assert kwargs["base_url"] == "https://models.example.com"
    assert kwargs["api_key"] == "token"
    assert kwargs["timeout"] == 30
    assert kwargs["max_tokens"] == 256
    assert kwargs["max_retries"] == 0
    assert binding.llm is chat_openai.return_value


def test_create_binding_omits_unset_max_tokens():
    with patch("ai_conversation.agents.bindings.ChatOpenAI") as chat_openai:
        create_binding("gpt-4o", LLMConfig(api_key="token"))

    assert "max_tokens" not in chat_openai.call_args.kwargs
