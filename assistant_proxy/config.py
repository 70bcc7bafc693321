from __future__ import annotations

import os
from typing import List

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


class Settings(BaseSettings):
    """
    Process configuration, read from environment variables.
    Field names are accepted as keyword arguments too.
    """

    model_config = SettingsConfigDict(env_file=None, extra="ignore", populate_by_name=True)

    # ---- Upstream (OpenAI Responses API) ----
    openai_base_url: str = Field(default="https://api.openai.com/v1", validation_alias="OPENAI_BASE_URL")
    openai_timeout_seconds: float = Field(default=110.0, validation_alias="OPENAI_TIMEOUT_SECONDS")
    default_model: str = Field(default="gpt-5.2", validation_alias="DEFAULT_MODEL")
    default_prompt: str = Field(default="Ти — AI-асистент.", validation_alias="DEFAULT_PROMPT")
    max_message_chars: int = Field(default=10_000, validation_alias="MAX_MESSAGE_CHARS")
    reasoning_models: str = Field(default="o1,o3,o4,gpt-5", validation_alias="REASONING_MODEL_PREFIXES")
    reasoning_effort: str = Field(default="none", validation_alias="REASONING_EFFORT")
    web_search_tool: str = Field(default="web_search_preview", validation_alias="WEB_SEARCH_TOOL")

    # ---- Document layout ----
    config_collection: str = Field(default="config", validation_alias="CONFIG_COLLECTION")
    config_document: str = Field(default="openai", validation_alias="CONFIG_DOCUMENT")
    api_key_field: str = Field(default="apiKey", validation_alias="API_KEY_FIELD")
    assistants_collection: str = Field(default="assistants", validation_alias="ASSISTANTS_COLLECTION")

    # ---- Backends ----
    identity_backend: str = Field(default="firebase", validation_alias="IDENTITY_BACKEND")  # firebase | supabase | static
    document_store_backend: str = Field(default="firestore", validation_alias="DOCUMENT_STORE_BACKEND")  # firestore | supabase | redis | memory
    static_auth_tokens: str = Field(default="", validation_alias="STATIC_AUTH_TOKENS")  # "token:uid,token2:uid2"
    document_store_seed_file: str = Field(default="", validation_alias="DOCUMENT_STORE_SEED_FILE")

    redis_url: str = Field(default="", validation_alias="REDIS_URL")
    redis_key_prefix: str = Field(default="assistant_proxy:", validation_alias="REDIS_KEY_PREFIX")

    supabase_url: str = Field(default="", validation_alias="SUPABASE_URL")
    supabase_key: str = Field(default="", validation_alias=AliasChoices("SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_KEY"))
    supabase_anon_key: str = Field(default="", validation_alias="SUPABASE_ANON_KEY")
    supabase_timeout_seconds: float = Field(default=10.0, validation_alias="SUPABASE_TIMEOUT_SECONDS")

    firebase_credentials_file: str = Field(default="", validation_alias="FIREBASE_CREDENTIALS_FILE")
    firebase_project_id: str = Field(default="", validation_alias="FIREBASE_PROJECT_ID")

    # ---- Serving ----
    request_timeout_seconds: float = Field(default=120.0, validation_alias="REQUEST_TIMEOUT_SECONDS")
    max_concurrency: int = Field(default=20, validation_alias="MAX_CONCURRENCY")
    cors_origins: str = Field(default="*", validation_alias="CORS_ALLOW_ORIGINS")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=8080, validation_alias="PORT")

    @field_validator("openai_base_url", "supabase_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @field_validator("identity_backend", "document_store_backend")
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("log_level")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def reasoning_model_prefixes(self) -> List[str]:
        return _split(self.reasoning_models)

    @property
    def cors_allow_origins(self) -> List[str]:
        return _split(self.cors_origins)


def load_settings() -> Settings:
    load_dotenv(os.getenv("ASSISTANT_PROXY_ENV_FILE", ".env"), override=False)
    return Settings()
