from llm_bridge.llm.bedrock import BedrockAdapter
from llm_bridge.llm.chat_completions import ChatCompletionsAdapter
from llm_bridge.llm.ollama import OllamaAdapter
from llm_bridge.models import InferenceConfig, Message, ToolCall

INFERENCE = InferenceConfig(max_tokens=512, temperature=0.3, top_p=0.8)
TOOL_CONFIG = {
    "tools": [
        {
            "name": "calculator",
            "description": "Add two numbers.",
            "parameters": {"type": "object", "properties": {"a": {"type": "number"}}},
        }
    ],
    "tool_choice": "auto",
}

CONVERSATION = [
    Message("system", "Be brief."),
    Message("user", "What is 2+2?"),
    Message("assistant", "", tool_calls=[ToolCall("calculator", {"a": 2, "b": 2}, "t1")]),
    Message("tool", {"sum": 4}, tool_call_id="t1"),
]


class TestBedrockRequest:
    def test_system_is_sent_out_of_band(self):
        request = BedrockAdapter().format_request(CONVERSATION, "amazon.nova-micro-v1:0", INFERENCE, None)

        assert request["modelId"] == "amazon.nova-micro-v1:0"
        assert request["system"] == [{"text": "Be brief."}]
        assert all(m["role"] in ("user", "assistant") for m in request["messages"])
        assert request["inferenceConfig"] == {"maxTokens": 512, "temperature": 0.3, "topP": 0.8}
        assert "toolConfig" not in request

    def test_tool_turns_use_blocks(self):
        request = BedrockAdapter().format_request(CONVERSATION, "m", INFERENCE, None)

        assert request["messages"] == [
            {"role": "user", "content": [{"text": "What is 2+2?"}]},
            {
                "role": "assistant",
                "content": [{"toolUse": {"toolUseId": "t1", "name": "calculator", "input": {"a": 2, "b": 2}}}],
            },
            {"role": "user", "content": [{"toolResult": {"toolUseId": "t1", "content": [{"json": {"sum": 4}}]}}]},
        ]

    def test_consecutive_tool_results_share_one_turn(self):
        messages = [
            Message("tool", "first", tool_call_id="t1"),
            Message("tool", {"error": "Tool x not found"}, tool_call_id="t2"),
        ]

        formatted = BedrockAdapter().format_messages(messages)

        assert len(formatted) == 1
        blocks = formatted[0]["content"]
        assert blocks[0]["toolResult"]["content"] == [{"text": "first"}]
        assert blocks[1]["toolResult"]["status"] == "error"

    def test_tool_config(self):
        request = BedrockAdapter().format_request([Message("user", "hi")], "m", INFERENCE, TOOL_CONFIG)

        assert request["toolConfig"] == {
            "tools": [
                {
                    "toolSpec": {
                        "name": "calculator",
                        "description": "Add two numbers.",
                        "inputSchema": {"json": TOOL_CONFIG["tools"][0]["parameters"]},
                    }
                }
            ],
            "toolChoice": {"auto": {}},
        }


class TestChatCompletionsRequest:
    def test_messages_and_parameters(self):
        request = ChatCompletionsAdapter().format_request(CONVERSATION, "openai/gpt-4o-mini", INFERENCE, TOOL_CONFIG)

        assert request["model"] == "openai/gpt-4o-mini"
        assert request["messages"][0] == {"role": "system", "content": "Be brief."}
        assert request["messages"][2]["tool_calls"] == [
            {"id": "t1", "type": "function", "function": {"name": "calculator", "arguments": '{"a": 2, "b": 2}'}}
        ]
        assert request["messages"][3] == {"role": "tool", "tool_call_id": "t1", "content": '{"sum": 4}'}
        assert (request["max_tokens"], request["temperature"], request["top_p"]) == (512, 0.3, 0.8)
        assert request["tools"] == [{"type": "function", "function": TOOL_CONFIG["tools"][0]}]
        assert request["tool_choice"] == "auto"

    def test_no_tools_means_no_tool_fields(self):
        request = ChatCompletionsAdapter("mistral").format_request([Message("user", "hi")], "m", INFERENCE, None)

        assert "tools" not in request
        assert "tool_choice" not in request


class TestOllamaRequest:
    def test_content_is_stringified_and_options_set(self):
        request = OllamaAdapter().format_request(CONVERSATION, "llama3.1", INFERENCE, TOOL_CONFIG)

        assert request["stream"] is False
        assert request["options"] == {"num_predict": 512, "temperature": 0.3, "top_p": 0.8}
        assert request["messages"][3] == {"role": "tool", "content": '{"sum": 4}'}
        assert request["messages"][2]["tool_calls"] == [
            {"function": {"name": "calculator", "arguments": {"a": 2, "b": 2}}}
        ]
        assert "tool_choice" not in request
        assert request["tools"][0]["function"]["name"] == "calculator"
