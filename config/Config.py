# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-08
# Description: Config
# -----------------------------------------------------------------------------

import os
from dataclasses import dataclass
from dotenv import load_dotenv, find_dotenv

# Load .env once globally
load_dotenv(find_dotenv(usecwd=True), override=False)

VECTOR_BACKENDS = ("postgres", "memory")


@dataclass(frozen=True)
class Config:
    # OpenAI (chat + embeddings)
    openai_api_key: str
    openai_base_url: str = ""
    openai_chat_model: str = "gpt-4o-mini"
    openai_embed_model: str = "text-embedding-3-small"

    # Vector index
    vector_backend: str = "postgres"
    database_url: str = ""

    # ---- Single source of truth: field_name -> ENV VAR NAME ----
    ENV_VARS = {
        # OpenAI
        "openai_api_key": "OPENAI_API_KEY",
        "openai_base_url": "OPENAI_BASE_URL",      # optional, e.g. https://api.openai.com/v1
        "openai_chat_model": "OPENAI_CHAT_MODEL",
        "openai_embed_model": "OPENAI_EMBED_MODEL",

        # Vector index
        "vector_backend": "QA_VECTOR_BACKEND",
        "database_url": "DATABASE_URL",
    }

    # Fields that may legitimately be blank
    OPTIONAL_FIELDS = ("openai_base_url", "database_url")

    OPENAI_ENV_VARS = (
        "OPENAI_API_KEY",
        "OPENAI_CHAT_MODEL",
        "OPENAI_EMBED_MODEL",
    )

    DATABASE_ENV_VARS = ("DATABASE_URL",)

    @staticmethod
    def from_env() -> "Config":
        """Build Config object from environment variables, keeping dataclass defaults for unset ones."""
        kwargs = {}
        for field_name, env_name in Config.ENV_VARS.items():
            value = (os.getenv(env_name) or "").strip()
            if value:
                kwargs[field_name] = value
        kwargs.setdefault("openai_api_key", "")
        return Config(**kwargs)

    def __post_init__(self):
        """
        Fail fast if any required config is missing.

        DATABASE_URL only becomes required when the postgres backend is selected.
        """
        if self.vector_backend not in VECTOR_BACKENDS:
            raise ValueError(
                f"{self.ENV_VARS['vector_backend']} must be one of {VECTOR_BACKENDS}, got {self.vector_backend!r}"
            )

        missing_fields = [
            k for k, v in self.__dict__.items()
            if not v and k not in self.OPTIONAL_FIELDS
        ]
        if self.vector_backend == "postgres" and not self.database_url:
            missing_fields.append("database_url")

        if missing_fields:
            missing_env_vars = [self.ENV_VARS[f] for f in missing_fields]
            raise ValueError(f"Missing required environment variables: {missing_env_vars}")

    def summary(self) -> dict:
        """Return a safe, non-sensitive summary for logging."""
        return {
            "openai_base_url": self.openai_base_url or "https://api.openai.com/v1",
            "openai_chat_model": self.openai_chat_model,
            "openai_embed_model": self.openai_embed_model,
            "vector_backend": self.vector_backend,
            "database_host": self.database_url.rsplit("@", 1)[-1] if self.database_url else None,
        }
