from __future__ import annotations

import json
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: str) -> int:
    return int(os.getenv(name, default))


def _optional_int(raw: str | None) -> int | None:
    if raw is None or not raw.strip():
        return None
    value = int(raw)
    return value if value > 0 else None


@dataclass(frozen=True)
class Settings:
    log_level_raw: str = os.getenv("DOCSEARCH_LOG_LEVEL", "INFO")
    database_uri_raw: str | None = os.getenv("DOCSEARCH_DATABASE_URI")
    audit_db_uri_raw: str | None = os.getenv("DOCSEARCH_AUDIT_DB_URI")
    api_keys_raw: str = os.getenv("DOCSEARCH_API_KEYS", "")
    api_key_map_raw: str = os.getenv("DOCSEARCH_API_KEY_MAP", "")
    allow_anonymous_raw: str = os.getenv("DOCSEARCH_ALLOW_ANONYMOUS", "false")
    default_user_id: str = os.getenv("DOCSEARCH_DEFAULT_USER_ID", "local-user")
    max_upload_bytes: int = _env_int("DOCSEARCH_MAX_UPLOAD_BYTES", str(50 * 1024 * 1024))
    max_sources: int = _env_int("DOCSEARCH_MAX_SOURCES", "5")
    source_confidence: float = float(os.getenv("DOCSEARCH_SOURCE_CONFIDENCE", "0.8"))
    excerpt_chars: int = _env_int("DOCSEARCH_EXCERPT_CHARS", "200")
    context_max_chars_raw: str | None = os.getenv("DOCSEARCH_CONTEXT_MAX_CHARS")
    recent_limit: int = _env_int("DOCSEARCH_RECENT_LIMIT", "5")
    metrics_enabled: bool = os.getenv("DOCSEARCH_METRICS_ENABLED", "true").lower() in {"1", "true", "yes"}
    llm_provider_raw: str = os.getenv("DOCSEARCH_LLM_PROVIDER", "ollama")
    llm_max_tokens: int = _env_int("DOCSEARCH_LLM_MAX_TOKENS", "1000")
    llm_temperature: float = float(os.getenv("DOCSEARCH_LLM_TEMPERATURE", "0.2"))
    llm_timeout: float = float(os.getenv("DOCSEARCH_LLM_TIMEOUT", "60"))
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    openai_chat_model: str | None = os.getenv("OPENAI_CHAT_MODEL")
    gemini_api_key: str | None = os.getenv("GEMINI_API_KEY")
    gemini_chat_model: str | None = os.getenv("GEMINI_CHAT_MODEL")
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "llama3.1")

    @property
    def log_level(self) -> str:
        return os.getenv("DOCSEARCH_LOG_LEVEL", self.log_level_raw)

    @property
    def database_uri(self) -> str | None:
        return os.getenv("DOCSEARCH_DATABASE_URI", self.database_uri_raw or "") or None

    @property
    def audit_db_uri(self) -> str | None:
        return os.getenv("DOCSEARCH_AUDIT_DB_URI", self.audit_db_uri_raw or "") or None

    @property
    def context_max_chars(self) -> int | None:
        return _optional_int(os.getenv("DOCSEARCH_CONTEXT_MAX_CHARS", self.context_max_chars_raw))

    @property
    def llm_provider(self) -> str:
        return os.getenv("DOCSEARCH_LLM_PROVIDER", self.llm_provider_raw)

    @property
    def allow_anonymous(self) -> bool:
        raw = os.getenv("DOCSEARCH_ALLOW_ANONYMOUS", self.allow_anonymous_raw)
        return raw.strip().lower() in {"1", "true", "yes"}

    @property
    def api_keys(self) -> set[str]:
        raw = os.getenv("DOCSEARCH_API_KEYS", self.api_keys_raw)
        return {value.strip() for value in raw.split(",") if value.strip()}

    @property
    def api_key_map(self) -> dict[str, str]:
        """Map API keys to user IDs from a JSON object.

        Values may be a user ID string or an object with a ``user_id`` key.
        """
        raw = os.getenv("DOCSEARCH_API_KEY_MAP", self.api_key_map_raw).strip()
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        if not isinstance(data, dict):
            return {}
        result: dict[str, str] = {}
        for key, value in data.items():
            if not isinstance(key, str):
                continue
            if isinstance(value, str) and value.strip():
                result[key] = value.strip()
            elif isinstance(value, dict) and isinstance(value.get("user_id"), str):
                result[key] = value["user_id"].strip()
        return result


settings = Settings()
