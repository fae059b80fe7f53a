"""
JSON schema generation for tool functions.

A tool takes either no argument or a single argument described by a pydantic
model::

    class TemperatureUnit(str, Enum):
        CELSIUS = "Celsius"
        FAHRENHEIT = "Fahrenheit"

    class GetWeatherParams(BaseModel):
        location: str = Field(description="The city and state, e.g. San Francisco, CA")
        unit: TemperatureUnit = Field(description="The temperature unit to use.")

pydantic places enum fields behind ``$ref``/``$defs`` (wrapped in ``allOf``
when the field has a description). Some vendors reject schema references, so
every reference is inlined and the field ends up as::

    "unit": {"description": "...", "enum": ["Celsius", "Fahrenheit"], "type": "string"}
"""

import copy
import logging
from typing import Any, Dict, Type

from pydantic import BaseModel

logger = logging.getLogger(__name__)


def schema_for_fn_no_param(fn_name: str, fn_desc: str) -> Dict[str, Any]:
    # Groq rejects "parameters": null, so the key is left out entirely
    return {
        "type": "function",
        "function": {
            "name": fn_name,
            "description": fn_desc,
        },
    }


def schema_for_fn_single_param(params_model: Type[BaseModel], fn_name: str, fn_desc: str) -> Dict[str, Any]:
    """
    Schema for ``fn_name(params: params_model)``.

    Each field of the model should carry a ``Field(description=...)`` that is
    meaningful to the LLM; it is included in the schema as ``description``.
    """
    param_schema = params_model.model_json_schema()
    logger.debug(f"Generated JSON schema for {params_model.__name__}: {param_schema}")

    param_schema = _inline_refs(param_schema, param_schema.get("$defs", {}))

    tool_schema = schema_for_fn_no_param(fn_name, fn_desc)
    tool_schema["function"]["parameters"] = {
        "type": "object",
        "properties": param_schema.get("properties", {}),
        "required": param_schema.get("required", []),
    }
    return tool_schema


def _resolve_ref(ref: str, defs: Dict[str, Any]) -> Dict[str, Any]:
    prefix = "#/$defs/"
    if not ref.startswith(prefix) or ref[len(prefix):] not in defs:
        raise ValueError(f"Cannot resolve schema reference {ref}")
    return defs[ref[len(prefix):]]


def _inline_refs(node: Any, defs: Dict[str, Any], in_properties: bool = False) -> Any:
    """Return a copy of ``node`` with references inlined and titles dropped.

    Inside a ``properties`` mapping the keys are field names, so a field
    called ``title`` is kept.
    """
    if isinstance(node, list):
        return [_inline_refs(item, defs) for item in node]
    if not isinstance(node, dict):
        return node

    if in_properties:
        return {name: _inline_refs(value, defs) for name, value in node.items()}

    node = dict(node)
    if "$ref" in node:
        target = copy.deepcopy(_resolve_ref(node.pop("$ref"), defs))
        node = {**target, **node}
    all_of = node.get("allOf")
    if isinstance(all_of, list) and len(all_of) == 1:
        node.pop("allOf")
        single = all_of[0]
        if "$ref" in single:
            single = copy.deepcopy(_resolve_ref(single["$ref"], defs))
        node = {**single, **node}

    result = {}
    for key, value in node.items():
        if key in ("$defs", "title"):
            continue
        result[key] = _inline_refs(value, defs, in_properties=(key == "properties"))
    return result
