from .streaming_tool_calls import StreamingToolCallAccumulator
from .tool_schema import schema_for_fn_no_param, schema_for_fn_single_param
from .tools import ToolDef, Tools, invoke_no_args, invoke_with_args
