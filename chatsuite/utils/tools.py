"""Tool registry, dispatch, and error-tolerant invocation of native functions."""

import inspect
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from chatsuite.errors import (
    ToolCallArgsFailedSerialization,
    ToolCallFunctionFailed,
    ToolInvocationError,
)
from chatsuite.framework.message import AssistantToolCall, ChatMessage, ToolResponseMessage
from chatsuite.utils.tool_schema import schema_for_fn_no_param, schema_for_fn_single_param

logger = logging.getLogger(__name__)


def _default_encoder(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False, default=str)


def _error_result(fn_name: str, err: Exception) -> str:
    return f"Error during '{fn_name}' {err}"


def invoke_no_args(func: Callable[[], Any], fn_name: str, result_encoder: Callable[[Any], str] = _default_encoder) -> str:
    """
    Call ``func()`` and return its result as a string.

    A failure of the function is returned as an ``Error during '<fn_name>' ...``
    string so it can be sent back to the model as the tool result.
    """
    try:
        result = result_encoder(func())
    except Exception as e:
        err = ToolCallFunctionFailed(str(e))
        logger.error(f"{fn_name!r} errored with {err}")
        return _error_result(fn_name, err)

    logger.info(f"{fn_name!r} returned {result!r}")
    return result


def invoke_with_args(
    func: Callable[[BaseModel], Any],
    args: Optional[Any],
    fn_name: str,
    params_model: Type[BaseModel],
    result_encoder: Callable[[Any], str] = _default_encoder,
) -> str:
    """
    Validate ``args`` into ``params_model``, call ``func`` with it, and return the result as a string.

    Args:
        func: Native function taking a single ``params_model`` instance.
        args: Decoded JSON arguments of the tool call, None when absent.
        fn_name: Tool name, used in log lines and error results.
        params_model: Pydantic model describing the function's parameter.

    Missing arguments, arguments that fail validation, and failures of the
    function all produce an ``Error during '<fn_name>' ...`` string; nothing is raised.
    """
    try:
        if args is None:
            raise ToolCallArgsFailedSerialization()
        try:
            params = params_model.model_validate(args)
        except ValidationError as e:
            raise ToolCallArgsFailedSerialization(str(e)) from e

        try:
            result = result_encoder(func(params))
        except Exception as e:
            raise ToolCallFunctionFailed(str(e)) from e
    except ToolInvocationError as e:
        logger.error(f"{fn_name!r} errored with {e}")
        return _error_result(fn_name, e)

    logger.info(f"{fn_name!r} returned {result!r}")
    return result


@dataclass
class ToolDef:
    name: str
    description: str
    func: Callable
    params_model: Optional[Type[BaseModel]] = None
    result_encoder: Callable[[Any], str] = _default_encoder

    def schema(self) -> Dict[str, Any]:
        if self.params_model is None:
            return schema_for_fn_no_param(self.name, self.description)
        return schema_for_fn_single_param(self.params_model, self.name, self.description)

    def invoke(self, args: Optional[Any]) -> str:
        if self.params_model is None:
            return invoke_no_args(self.func, self.name, self.result_encoder)
        return invoke_with_args(self.func, args, self.name, self.params_model, self.result_encoder)


class Tools:
    """
    Explicitly registered tools, dispatched by name.

    Usage:
        tools = Tools()
        tools.register(get_weather, params_model=GetWeatherParams)
        chat_req = ChatRequest(messages=[...], tools=tools.tools())
        ...
        results, tool_messages = tools.execute_tool(chat_res.tool_calls())
    """

    def __init__(self):
        self._tools: Dict[str, ToolDef] = {}

    def register(
        self,
        func: Callable,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        params_model: Optional[Type[BaseModel]] = None,
        result_encoder: Optional[Callable[[Any], str]] = None,
    ) -> ToolDef:
        """Register ``func``. Name and description default to the function's name and docstring."""
        tool = ToolDef(
            name=name or func.__name__,
            description=description or inspect.getdoc(func) or "",
            func=func,
            params_model=params_model,
            result_encoder=result_encoder or _default_encoder,
        )
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool
        return tool

    def get(self, name: str) -> Optional[ToolDef]:
        return self._tools.get(name)

    def tools(self) -> List[Dict[str, Any]]:
        """Schemas of every registered tool, in registration order."""
        return [tool.schema() for tool in self._tools.values()]

    def invoke(self, tool_call: AssistantToolCall) -> str:
        fn_name = tool_call.function.fn_name
        tool = self._tools.get(fn_name)
        if tool is None:
            logger.error(f"No tool registered under {fn_name!r}")
            return _error_result(fn_name, ToolCallFunctionFailed(f"unknown tool '{fn_name}'"))
        return tool.invoke(tool_call.function.fn_arguments)

    def execute_tool(self, tool_calls: Optional[List[AssistantToolCall]]) -> Tuple[List[str], List[ToolResponseMessage]]:
        """Invoke each tool call in order; return the results and matching tool response messages."""
        results = []
        messages = []
        for tool_call in tool_calls or []:
            result = self.invoke(tool_call)
            results.append(result)
            messages.append(ChatMessage.tool_response(tool_call.tool_call_id, tool_call.function.fn_name, result))
        return results, messages
