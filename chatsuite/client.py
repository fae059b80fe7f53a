import logging
from typing import Dict, List, Mapping, Optional, Union

from .errors import HttpStatusError, UnsupportedProvider
from .framework.chat_options import ChatOptions, ChatOptionsSet
from .framework.chat_request import ChatRequest
from .framework.chat_response import ChatResponse
from .framework.chat_stream import ChatStreamResponse
from .provider import AdapterKind, ModelInfo, Provider, ProviderFactory, ServiceType
from .web_client import WebClient

logger = logging.getLogger(__name__)


class Client:
    def __init__(
        self,
        provider_configs: Optional[Mapping[str, Mapping]] = None,
        chat_options: Optional[ChatOptions] = None,
        web_client: Optional[WebClient] = None,
    ):
        """
        Initialize the client with provider configurations.
        Providers are created lazily by the ProviderFactory, once per vendor kind.

        Args:
            provider_configs: Overrides of each vendor's default AdapterConfig,
                keyed by provider string. For example:
                {
                    "openai": {"api_key": "your_openai_api_key"},
                    "ollama": {"base_url": "http://gpu-box:11434/v1/"},
                    "gemini": {"env_file": ".env"}
                }
            chat_options: Defaults for every call; per-call options win field by field.
            web_client: Transport to use; one is created when omitted.
        """
        self.provider_configs = dict(provider_configs or {})
        for provider_key in self.provider_configs:
            self._validate_provider_key(provider_key)
        self.chat_options = chat_options
        self.web_client = web_client or WebClient()
        self.providers: Dict[AdapterKind, Provider] = {}

    def _validate_provider_key(self, provider_key: str) -> AdapterKind:
        """Validate if the provider key corresponds to a supported provider."""
        supported = ProviderFactory.get_supported_providers()
        if provider_key not in supported:
            raise UnsupportedProvider(provider_key, supported)
        return AdapterKind(provider_key)

    def get_provider(self, adapter_kind: AdapterKind) -> Provider:
        """Return the cached provider for this vendor, creating it on first use."""
        provider = self.providers.get(adapter_kind)
        if provider is None:
            provider_class = ProviderFactory.get_provider_class(adapter_kind)
            config = provider_class.default_adapter_config().with_overrides(
                self.provider_configs.get(adapter_kind.value)
            )
            provider = provider_class(config)
            self.providers[adapter_kind] = provider
        return provider

    def resolve_model_info(self, model: str) -> ModelInfo:
        """
        Accepts either "provider:model" or a bare model name whose vendor is
        inferred from its prefix (gpt -> openai, claude -> anthropic, ...).
        """
        if ":" in model:
            provider_key, model_name = model.split(":", 1)
            return ModelInfo(adapter_kind=self._validate_provider_key(provider_key), model_name=model_name)
        return ModelInfo(adapter_kind=AdapterKind.from_model(model), model_name=model)

    async def all_model_names(self, adapter_kind: Union[AdapterKind, str]) -> List[str]:
        return await self.get_provider(AdapterKind(adapter_kind)).all_model_names()

    def _options_set(self, options: Optional[ChatOptions]) -> ChatOptionsSet:
        return ChatOptionsSet(chat_options=options, client_options=self.chat_options)

    async def exec_chat(self, model: str, chat_req: ChatRequest, options: Optional[ChatOptions] = None) -> ChatResponse:
        model_info = self.resolve_model_info(model)
        provider = self.get_provider(model_info.adapter_kind)
        options_set = self._options_set(options)

        web_request = provider.to_web_request_data(model_info, ServiceType.CHAT, chat_req, options_set)
        web_response = await self.web_client.do_post(web_request.url, web_request.headers, web_request.payload)
        if not web_response.is_success:
            logger.error(f"{model_info} responded with HTTP {web_response.status_code}")
            raise HttpStatusError(model_info, web_response.status_code, web_response.body)

        return provider.to_chat_response(model_info, web_response)

    async def exec_chat_stream(
        self, model: str, chat_req: ChatRequest, options: Optional[ChatOptions] = None
    ) -> ChatStreamResponse:
        """
        Start a streaming chat. The request is sent when the first event is
        requested; HTTP and vendor errors are raised while iterating.
        """
        model_info = self.resolve_model_info(model)
        provider = self.get_provider(model_info.adapter_kind)
        options_set = self._options_set(options)

        web_request = provider.to_web_request_data(model_info, ServiceType.CHAT_STREAM, chat_req, options_set)
        return provider.to_chat_stream(model_info, self.web_client, web_request, options_set)

    async def aclose(self):
        await self.web_client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
