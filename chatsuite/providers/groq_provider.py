# Groq provider
# Links:
# OpenAI compatibility - https://console.groq.com/docs/openai

from chatsuite.config import AdapterConfig
from chatsuite.providers.openai_provider import OpenaiProvider

MODELS = [
    "llama-3.1-70b-versatile",
    "llama-3.1-8b-instant",
    "mixtral-8x7b-32768",
    "gemma2-9b-it",
    "llama3-groq-8b-8192-tool-use-preview",
    "llama3-groq-70b-8192-tool-use-preview",
    "llama3-70b-8192",
    "llama3-8b-8192",
]


class GroqProvider(OpenaiProvider):
    DEFAULT_CONFIG = AdapterConfig(auth_env_name="GROQ_API_KEY")
    BASE_URL = "https://api.groq.com/openai/v1/"
    MODELS = MODELS
