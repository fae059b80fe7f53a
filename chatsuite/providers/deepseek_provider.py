from chatsuite.config import AdapterConfig
from chatsuite.providers.openai_provider import OpenaiProvider

MODELS = [
    "deepseek-chat",
    "deepseek-reasoner",
]


class DeepseekProvider(OpenaiProvider):
    """
    DeepSeek serves the OpenAI chat completions format at its own base URL.
    The credential comes from DEEPSEEK_API_KEY, not OPENAI_API_KEY.
    """

    DEFAULT_CONFIG = AdapterConfig(auth_env_name="DEEPSEEK_API_KEY")
    BASE_URL = "https://api.deepseek.com/"
    MODELS = MODELS
