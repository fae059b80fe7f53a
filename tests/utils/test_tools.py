import json
import logging

from pydantic import BaseModel, Field

from chatsuite.framework.message import AssistantToolCall, ToolResponseMessage
from chatsuite.utils.tools import Tools, invoke_no_args, invoke_with_args


class SetTemperatureParams(BaseModel):
    room: str = Field(description="Room name")
    degrees: float = Field(description="Target temperature")


def set_temperature(params: SetTemperatureParams) -> str:
    return f"{params.room} set to {params.degrees}"


def get_temperature() -> str:
    """Current living room temperature"""
    return "70"


def broken() -> str:
    raise RuntimeError("sensor offline")


def _tool_call(name, arguments, call_id="call_1"):
    return AssistantToolCall.from_vendor({"id": call_id, "type": "function",
                                          "function": {"name": name, "arguments": arguments}})


def test_invoke_no_args_returns_result():
    assert invoke_no_args(get_temperature, "get_temperature") == "70"


def test_invoke_no_args_failure_becomes_result(caplog):
    with caplog.at_level(logging.ERROR):
        result = invoke_no_args(broken, "get_temperature")
    assert result.startswith("Error during 'get_temperature'")
    assert "sensor offline" in result
    assert "get_temperature" in caplog.text


def test_invoke_with_args():
    result = invoke_with_args(set_temperature, {"room": "kitchen", "degrees": 21.5}, "set_temperature", SetTemperatureParams)
    assert result == "kitchen set to 21.5"


def test_invoke_with_invalid_args():
    result = invoke_with_args(set_temperature, {"room": "kitchen"}, "set_temperature", SetTemperatureParams)
    assert result.startswith("Error during 'set_temperature' ToolCallArgsFailedSerialization")


def test_invoke_with_missing_args():
    result = invoke_with_args(set_temperature, None, "set_temperature", SetTemperatureParams)
    assert result == "Error during 'set_temperature' ToolCallArgsFailedSerialization: no arguments were provided"


def test_invoke_with_failing_function():
    def explode(params):
        raise ValueError("thermostat unreachable")

    result = invoke_with_args(explode, {"room": "hall", "degrees": 19}, "set_temperature", SetTemperatureParams)
    assert result == "Error during 'set_temperature' ToolCallFunctionFailed: thermostat unreachable"


def test_structured_results_are_json_encoded():
    assert invoke_no_args(lambda: {"temp": 70}, "weather") == json.dumps({"temp": 70})


def test_registry_schemas_and_dispatch():
    tools = Tools()
    tools.register(get_temperature)
    tools.register(set_temperature, description="Set a room temperature", params_model=SetTemperatureParams)

    schemas = tools.tools()
    assert [s["function"]["name"] for s in schemas] == ["get_temperature", "set_temperature"]
    assert schemas[0]["function"]["description"] == "Current living room temperature"
    assert "parameters" not in schemas[0]["function"]
    assert schemas[1]["function"]["parameters"]["required"] == ["room", "degrees"]

    results, messages = tools.execute_tool([
        _tool_call("get_temperature", "", "c1"),
        _tool_call("set_temperature", '{"room": "den", "degrees": 20}', "c2"),
    ])
    assert results == ["70", "den set to 20.0"]
    assert all(isinstance(m, ToolResponseMessage) for m in messages)
    assert [(m.tool_call_id, m.tool_name, m.tool_result) for m in messages] == [
        ("c1", "get_temperature", "70"),
        ("c2", "set_temperature", "den set to 20.0"),
    ]


def test_registry_unknown_tool_and_custom_encoder():
    tools = Tools()
    tools.register(lambda: 3.5, name="reading", description="Sensor reading", result_encoder=lambda v: f"{v:.1f} C")

    assert tools.invoke(_tool_call("reading", "")) == "3.5 C"
    assert tools.invoke(_tool_call("nope", "{}")).startswith("Error during 'nope'")
    assert tools.execute_tool(None) == ([], [])
