#!/usr/bin/env python3
"""
Thermostat assistant driven by tool calls.

The model is asked to raise the temperature by 5 degrees. It is expected to
call get_current_temperature first, then set_current_temperature, and finally
answer in plain text. The final turn is streamed.

Usage:
    OPENAI_API_KEY=... python examples/tool_calls_example.py [model]
"""

import asyncio
import logging
import sys
from enum import Enum

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from chatsuite import ChatMessage, ChatOptions, ChatRequest, Client, Tools
from chatsuite.utils.printer import print_chat_stream

MODEL = "gpt-4o-mini"
MAX_TURNS = 5


class Thermostat:
    def __init__(self):
        self.temp = "70"


THERMOSTAT = Thermostat()


class TemperatureUnit(str, Enum):
    CELSIUS = "Celsius"
    FAHRENHEIT = "Fahrenheit"


class SetTemperatureParams(BaseModel):
    temperature: str = Field(
        description="The temperature value to set to. A plain number between -100 and 100, without units."
    )
    unit: TemperatureUnit = Field(description="The unit of the temperature value.")


def get_current_temperature() -> str:
    """Returns the current temperature of the thermostat, in Fahrenheit."""
    return THERMOSTAT.temp


def set_current_temperature(params: SetTemperatureParams) -> str:
    if params.unit != TemperatureUnit.FAHRENHEIT:
        raise ValueError("the thermostat only accepts Fahrenheit")
    THERMOSTAT.temp = params.temperature
    return THERMOSTAT.temp


async def main(model: str):
    tools = Tools()
    tools.register(get_current_temperature)
    tools.register(
        set_current_temperature,
        description="Sets the temperature of the thermostat.",
        params_model=SetTemperatureParams,
    )

    chat_req = ChatRequest(
        messages=[
            ChatMessage.system("You control a home thermostat. Use the tools; never guess the temperature."),
            ChatMessage.user("It's a bit cold, please raise the temperature by 5 degrees."),
        ],
        tools=tools.tools(),
    )

    async with Client(chat_options=ChatOptions(temperature=0.0)) as client:
        for _ in range(MAX_TURNS):
            chat_res = await client.exec_chat(model, chat_req)
            tool_calls = chat_res.tool_calls()
            if not tool_calls:
                break

            for tool_call in tool_calls:
                print(f"📞 {tool_call.function.fn_name}({tool_call.function.fn_arguments})")
            results, tool_messages = tools.execute_tool(tool_calls)
            for result in results:
                print(f"  ✅ {result}")

            chat_req.append_message(ChatMessage.from_tool_calls(tool_calls))
            chat_req.append_messages(tool_messages)

        print("\n🤖 Assistant: ", end="", flush=True)
        stream_res = await client.exec_chat_stream(model, chat_req, ChatOptions(capture_usage=True))
        await print_chat_stream(stream_res)

    print(f"Thermostat is now at {THERMOSTAT.temp}")


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else MODEL))
