import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from dotenv import dotenv_values


@dataclass(frozen=True)
class AdapterConfig:
    """
    Per-vendor configuration.

    Each provider class carries a default instance built once at import time.
    ``Client(provider_configs=...)`` derives overridden copies from it; no
    instance is ever mutated.

    Args:
        auth_env_name: Environment variable holding the credential, or None
            for vendors that need no credential (e.g. a local Ollama).
        api_key: Explicit credential; wins over the environment.
        base_url: Overrides the vendor's default endpoint root.
        env_file: Optional ``.env`` file consulted after the process environment.
    """

    auth_env_name: Optional[str] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    env_file: Optional[str] = None

    def with_overrides(self, overrides: Optional[Mapping] = None) -> "AdapterConfig":
        if not overrides:
            return self
        unknown = set(overrides) - {"auth_env_name", "api_key", "base_url", "env_file"}
        if unknown:
            raise ValueError(f"Unknown provider config keys: {sorted(unknown)}")
        return replace(self, **dict(overrides))

    def resolve_api_key(self, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
        """Explicit key first, then the environment, then the optional .env file."""
        if self.api_key:
            return self.api_key
        if not self.auth_env_name:
            return None

        environ = os.environ if environ is None else environ
        value = environ.get(self.auth_env_name)
        if value:
            return value

        if self.env_file:
            value = dotenv_values(self.env_file).get(self.auth_env_name)
            if value:
                return value
        return None
