# Ollama provider
# Talks to a local Ollama server through its OpenAI-compatible endpoint.
# Links:
# OpenAI compatibility - https://github.com/ollama/ollama/blob/main/docs/openai.md

from typing import List

from chatsuite.config import AdapterConfig
from chatsuite.providers.openai_provider import OpenaiProvider


class OllamaProvider(OpenaiProvider):
    # A local server needs no credential
    DEFAULT_CONFIG = AdapterConfig()
    BASE_URL = "http://localhost:11434/v1/"
    MODELS: List[str] = []

    # Ollama only honors a single system message
    single_system_message = True
