"""The shared contract for vendor providers, and the factory that loads them."""

import functools
import importlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Type, Union

from chatsuite.config import AdapterConfig
from chatsuite.errors import ApiKeyEnvNotFound, LLMError, UnsupportedProvider
from chatsuite.framework.chat_options import ChatOptionsSet
from chatsuite.framework.chat_request import ChatRequest
from chatsuite.framework.chat_response import ChatResponse
from chatsuite.framework.chat_stream import ChatStreamResponse
from chatsuite.web_client import WebClient, WebRequestData, WebResponse

logger = logging.getLogger(__name__)

__all__ = [
    "AdapterKind",
    "LLMError",
    "ModelInfo",
    "Provider",
    "ProviderFactory",
    "ServiceType",
    "WebRequestData",
    "WebResponse",
]


class AdapterKind(str, Enum):
    OPENAI = "openai"
    OLLAMA = "ollama"
    GROQ = "groq"
    DEEPSEEK = "deepseek"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"

    @classmethod
    def from_model(cls, model: str) -> "AdapterKind":
        """Infer the vendor from a bare model name. Unknown names go to a local Ollama."""
        if model.startswith("gpt") or model.startswith("o1") or model.startswith("o3"):
            return cls.OPENAI
        if model.startswith("claude"):
            return cls.ANTHROPIC
        if model.startswith("gemini"):
            return cls.GEMINI
        if model.startswith("deepseek"):
            return cls.DEEPSEEK

        from chatsuite.providers.groq_provider import MODELS as GROQ_MODELS

        if model in GROQ_MODELS:
            return cls.GROQ
        return cls.OLLAMA


class ServiceType(Enum):
    CHAT = "chat"
    CHAT_STREAM = "chat_stream"


@dataclass(frozen=True)
class ModelInfo:
    adapter_kind: AdapterKind
    model_name: str

    def __str__(self):
        return f"{self.adapter_kind.value}:{self.model_name}"


class Provider(ABC):
    """
    One vendor integration.

    Subclasses set ``DEFAULT_CONFIG`` (built once, at import) and ``MODELS``
    and implement the request/response translation. Providers never touch the
    network themselves: they describe the request and parse what comes back.
    """

    DEFAULT_CONFIG: AdapterConfig = AdapterConfig()
    MODELS: List[str] = []

    def __init__(self, config: Optional[AdapterConfig] = None):
        self.config = config if config is not None else self.default_adapter_config()

    @classmethod
    def default_adapter_config(cls) -> AdapterConfig:
        return cls.DEFAULT_CONFIG

    async def all_model_names(self) -> List[str]:
        return list(self.MODELS)

    def get_api_key(self, model_info: ModelInfo) -> Optional[str]:
        """Resolve the credential; raise ApiKeyEnvNotFound if the vendor needs one and none is set."""
        api_key = self.config.resolve_api_key()
        if api_key is None and self.config.auth_env_name:
            raise ApiKeyEnvNotFound(model_info, self.config.auth_env_name)
        return api_key

    @abstractmethod
    def get_service_url(self, model_info: ModelInfo, service_type: ServiceType) -> str:
        ...

    @abstractmethod
    def to_web_request_data(
        self,
        model_info: ModelInfo,
        service_type: ServiceType,
        chat_req: ChatRequest,
        options_set: ChatOptionsSet,
    ) -> WebRequestData:
        ...

    @abstractmethod
    def to_chat_response(self, model_info: ModelInfo, web_response: WebResponse) -> ChatResponse:
        ...

    @abstractmethod
    def to_chat_stream(
        self,
        model_info: ModelInfo,
        web_client: WebClient,
        web_request: WebRequestData,
        options_set: ChatOptionsSet,
    ) -> ChatStreamResponse:
        ...


class ProviderFactory:
    """Factory to dynamically load provider instances based on naming conventions."""

    PROVIDERS_DIR = Path(__file__).parent / "providers"

    @classmethod
    def get_provider_class(cls, provider_key: Union[str, AdapterKind]) -> Type[Provider]:
        """Import the provider module and return its class, based on the naming convention."""
        if isinstance(provider_key, AdapterKind):
            provider_key = provider_key.value
        supported = cls.get_supported_providers()
        if provider_key not in supported:
            raise UnsupportedProvider(provider_key, supported)

        # Convert provider_key to the expected module and class names
        provider_class_name = f"{provider_key.capitalize()}Provider"
        provider_module_name = f"{provider_key}_provider"
        module_path = f"chatsuite.providers.{provider_module_name}"

        module = importlib.import_module(module_path)
        logger.debug(f"Loaded provider {provider_class_name} from {module_path}")
        return getattr(module, provider_class_name)

    @classmethod
    def create_provider(cls, provider_key: Union[str, AdapterKind], config: Optional[AdapterConfig] = None) -> Provider:
        """Dynamically load and create an instance of a provider based on the naming convention."""
        return cls.get_provider_class(provider_key)(config)

    @classmethod
    @functools.lru_cache(maxsize=None)
    def get_supported_providers(cls) -> frozenset:
        """List all supported provider names based on files present in the providers directory."""
        provider_files = Path(cls.PROVIDERS_DIR).glob("*_provider.py")
        return frozenset(file.stem[: -len("_provider")] for file in provider_files)
