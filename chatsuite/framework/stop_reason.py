"""
Standardized stop reasons across providers.

Each vendor reports why a completion ended with its own vocabulary
(``finish_reason``, ``stop_reason``, ``finishReason``). The mappers below
translate those into one StopReason so providers can branch on them.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


class StopReason(Enum):
    COMPLETE = "complete"                    # Natural completion
    TOOL_CALL = "tool_call"                  # Tool call required
    LENGTH_LIMIT = "length_limit"            # Hit max_tokens limit
    STOP_SEQUENCE = "stop_sequence"          # Hit custom stop sequence
    SAFETY_REFUSAL = "safety_refusal"
    CONTENT_FILTER = "content_filter"
    TOOL_CALL_ERROR = "tool_call_error"
    UNKNOWN = "unknown"


@dataclass
class StopInfo:
    reason: StopReason
    original_reason: str
    metadata: Dict[str, Any] = field(default_factory=dict)


class ProviderStopMapper:
    """Maps one vendor's stop vocabulary onto StopReason."""

    REASONS: Dict[str, StopReason] = {}

    def __init__(self, provider_name: str):
        self.provider_name = provider_name

    def map_stop_reason(self, original_reason: str, metadata: Optional[Dict[str, Any]] = None) -> StopInfo:
        metadata = dict(metadata or {})
        metadata["provider"] = self.provider_name

        reason = self.REASONS.get(original_reason)
        if reason is None:
            logger.warning(f"Unknown {self.provider_name} stop reason: {original_reason}")
            reason = StopReason.UNKNOWN
        return StopInfo(reason=reason, original_reason=original_reason, metadata=metadata)


class OpenAIStopMapper(ProviderStopMapper):
    REASONS = {
        "stop": StopReason.COMPLETE,
        "tool_calls": StopReason.TOOL_CALL,
        "length": StopReason.LENGTH_LIMIT,
        "content_filter": StopReason.SAFETY_REFUSAL,
    }

    def __init__(self):
        super().__init__("openai")


class AnthropicStopMapper(ProviderStopMapper):
    REASONS = {
        "end_turn": StopReason.COMPLETE,
        "tool_use": StopReason.TOOL_CALL,
        "max_tokens": StopReason.LENGTH_LIMIT,
        "stop_sequence": StopReason.STOP_SEQUENCE,
        "refusal": StopReason.SAFETY_REFUSAL,
    }

    def __init__(self):
        super().__init__("anthropic")


class GeminiStopMapper(ProviderStopMapper):
    REASONS = {
        "STOP": StopReason.COMPLETE,
        "MAX_TOKENS": StopReason.LENGTH_LIMIT,
        "SAFETY": StopReason.SAFETY_REFUSAL,
        "BLOCKLIST": StopReason.SAFETY_REFUSAL,
        "PROHIBITED_CONTENT": StopReason.SAFETY_REFUSAL,
        "SPII": StopReason.SAFETY_REFUSAL,
        "RECITATION": StopReason.CONTENT_FILTER,
        "MALFORMED_FUNCTION_CALL": StopReason.TOOL_CALL_ERROR,
        "OTHER": StopReason.UNKNOWN,
        "FINISH_REASON_UNSPECIFIED": StopReason.UNKNOWN,
    }

    def __init__(self):
        super().__init__("gemini")


class StopReasonManager:
    """Central registry of the per-provider mappers"""

    def __init__(self):
        self._mappers: Dict[str, ProviderStopMapper] = {}
        self.register_mapper("openai", OpenAIStopMapper())
        self.register_mapper("anthropic", AnthropicStopMapper())
        self.register_mapper("gemini", GeminiStopMapper())

    def register_mapper(self, provider_name: str, mapper: ProviderStopMapper):
        self._mappers[provider_name] = mapper
        logger.debug(f"Registered stop mapper for provider: {provider_name}")

    def map_stop_reason(self, provider_name: str, original_reason: str,
                        metadata: Optional[Dict[str, Any]] = None) -> StopInfo:
        mapper = self._mappers.get(provider_name)
        if mapper is None:
            logger.warning(f"No mapper found for provider: {provider_name}")
            return StopInfo(
                reason=StopReason.UNKNOWN,
                original_reason=original_reason,
                metadata={**(metadata or {}), "provider": provider_name},
            )
        return mapper.map_stop_reason(original_reason, metadata)


# Global instance, read-only after import
stop_reason_manager = StopReasonManager()
