import pytest

from llm_bridge.errors import ResponseFormatError
from llm_bridge.llm.bedrock import BedrockAdapter
from llm_bridge.llm.chat_completions import ChatCompletionsAdapter
from llm_bridge.llm.ollama import OllamaAdapter
from llm_bridge.models import AssistantResponse, AssistantToolRequest, TokenUsage, ToolCall


def _converse(stop_reason: str, *blocks: dict) -> dict:
    return {
        "output": {"message": {"role": "assistant", "content": list(blocks)}},
        "stopReason": stop_reason,
        "usage": {"inputTokens": 12, "outputTokens": 7, "totalTokens": 19},
    }


def _chat(finish_reason: str, content=None, tool_calls=None) -> dict:
    message = {"role": "assistant", "content": content}
    if tool_calls is not None:
        message["tool_calls"] = tool_calls
    return {
        "choices": [{"index": 0, "message": message, "finish_reason": finish_reason}],
        "usage": {"prompt_tokens": 30, "completion_tokens": 5, "total_tokens": 35},
    }


class TestBedrock:
    def test_end_turn_joins_text_blocks(self):
        raw = _converse("end_turn", {"text": "Hello"}, {"text": "World"})

        assert BedrockAdapter().parse_response(raw) == AssistantResponse(content="Hello\nWorld")

    def test_non_text_blocks_are_ignored(self):
        raw = _converse("end_turn", {"text": "Hi"}, {"image": {"format": "png"}})

        assert BedrockAdapter().parse_response(raw).content == "Hi"

    def test_tool_use_yields_tool_request(self):
        raw = _converse(
            "tool_use",
            {"text": "Let me calculate."},
            {"toolUse": {"toolUseId": "t1", "name": "calculator", "input": {"a": 2, "b": 2}}},
        )

        result = BedrockAdapter().parse_response(raw)

        assert result == AssistantToolRequest(
            content="Let me calculate.",
            tool_calls=[ToolCall(name="calculator", input={"a": 2, "b": 2}, call_id="t1")],
        )

    def test_anthropic_style_tool_use_block(self):
        raw = {
            "content": [{"type": "tool_use", "id": "t1", "name": "calculator", "input": {"a": 2, "b": 2}}],
            "stop_reason": "tool_use",
        }

        result = BedrockAdapter().parse_response(raw)

        assert isinstance(result, AssistantToolRequest)
        assert result.content == ""
        assert result.tool_calls == [ToolCall("calculator", {"a": 2, "b": 2}, "t1")]

    def test_unknown_stop_reason_is_fatal(self):
        with pytest.raises(ResponseFormatError, match="guardrail_intervened"):
            BedrockAdapter().parse_response(_converse("guardrail_intervened", {"text": "x"}))

    def test_missing_stop_reason_is_fatal(self):
        with pytest.raises(ResponseFormatError):
            BedrockAdapter().parse_response({"output": {"message": {"content": []}}})

    def test_usage_is_read_verbatim(self):
        assert BedrockAdapter().extract_usage(_converse("end_turn")) == TokenUsage(12, 7)
        assert BedrockAdapter().extract_usage({"stopReason": "end_turn"}) is None


class TestChatCompletions:
    def test_stop_returns_message_content(self):
        result = ChatCompletionsAdapter().parse_response(_chat("stop", "hello"))

        assert result == AssistantResponse(content="hello")

    def test_length_is_an_ordinary_completion(self):
        assert isinstance(ChatCompletionsAdapter().parse_response(_chat("length", "cut")), AssistantResponse)

    def test_content_parts_are_joined(self):
        raw = _chat("stop", [{"type": "text", "text": "a"}, {"type": "image_url"}, {"type": "text", "text": "b"}])

        assert ChatCompletionsAdapter().parse_response(raw).content == "a\nb"

    def test_tool_calls_keep_raw_arguments(self):
        raw = _chat(
            "tool_calls",
            None,
            [{"id": "call_1", "type": "function", "function": {"name": "calculator", "arguments": '{"a": 2}'}}],
        )

        result = ChatCompletionsAdapter().parse_response(raw)

        assert result == AssistantToolRequest(content="", tool_calls=[ToolCall("calculator", '{"a": 2}', "call_1")])

    def test_unknown_finish_reason_is_fatal(self):
        with pytest.raises(ResponseFormatError):
            ChatCompletionsAdapter().parse_response(_chat("content_filter", ""))

    def test_usage(self):
        assert ChatCompletionsAdapter().extract_usage(_chat("stop", "x")) == TokenUsage(30, 5)
        assert ChatCompletionsAdapter().extract_usage({"choices": []}) is None


class TestOllama:
    def test_plain_message(self):
        raw = {"message": {"role": "assistant", "content": "hi"}, "done": True, "done_reason": "stop"}

        assert OllamaAdapter().parse_response(raw) == AssistantResponse(content="hi")

    def test_tool_calls_take_precedence_and_get_ids(self):
        raw = {
            "message": {
                "role": "assistant",
                "content": "",
                "tool_calls": [{"function": {"name": "calculator", "arguments": {"a": 2, "b": 2}}}],
            },
            "done_reason": "stop",
        }

        result = OllamaAdapter().parse_response(raw)

        assert isinstance(result, AssistantToolRequest)
        assert result.tool_calls[0].name == "calculator"
        assert result.tool_calls[0].input == {"a": 2, "b": 2}
        assert result.tool_calls[0].call_id.startswith("call_")

    def test_unknown_done_reason_is_fatal(self):
        with pytest.raises(ResponseFormatError):
            OllamaAdapter().parse_response({"message": {"content": "x"}, "done_reason": "unload"})

    def test_usage_from_eval_counts(self):
        assert OllamaAdapter().extract_usage({"prompt_eval_count": 9, "eval_count": 4}) == TokenUsage(9, 4)
        assert OllamaAdapter().extract_usage({"message": {}}) is None


def test_non_dict_response_is_fatal():
    with pytest.raises(ResponseFormatError):
        BedrockAdapter().parse_response(["not", "a", "response"])


@pytest.mark.parametrize(
    ("adapter", "raw"),
    [
        (ChatCompletionsAdapter(), {"choices": {"0": {"finish_reason": "stop"}}}),
        (ChatCompletionsAdapter(), {"choices": ["stop"]}),
        (ChatCompletionsAdapter(), {"choices": [{"finish_reason": "stop", "message": "hello"}]}),
        (
            ChatCompletionsAdapter(),
            {"choices": [{"finish_reason": "tool_calls", "message": {"tool_calls": [{"function": "calc"}]}}]},
        ),
        (ChatCompletionsAdapter(), {"choices": [{"finish_reason": ["stop"]}]}),
        (BedrockAdapter(), _converse("tool_use", {"toolUse": None})),
        (BedrockAdapter(), {"output": {"message": {"content": "Hello"}}, "stopReason": "end_turn"}),
        (BedrockAdapter(), {"output": "Hello", "stopReason": "end_turn"}),
        (OllamaAdapter(), {"message": "hi", "done_reason": "stop"}),
        (OllamaAdapter(), {"message": {"content": "", "tool_calls": {"function": {}}}}),
    ],
)
def test_malformed_shapes_raise_response_format_error(adapter, raw):
    with pytest.raises(ResponseFormatError):
        adapter.parse_response(raw)


@pytest.mark.parametrize(
    ("adapter", "raw"),
    [
        (ChatCompletionsAdapter(), {"usage": [30, 5]}),
        (ChatCompletionsAdapter(), {"usage": {"prompt_tokens": "many", "completion_tokens": 1}}),
        (BedrockAdapter(), {"usage": {"inputTokens": {"cached": 4}, "outputTokens": 1}}),
        (OllamaAdapter(), {"prompt_eval_count": "n/a"}),
    ],
)
def test_malformed_usage_raises_response_format_error(adapter, raw):
    with pytest.raises(ResponseFormatError):
        adapter.extract_usage(raw)
