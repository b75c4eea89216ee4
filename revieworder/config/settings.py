from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True)

    llm_provider: str = "ollama"  # | "openai_compat" | "openai"

    ollama_model: str = "qwen3:8b"
    ollama_base_url: str = "http://localhost:11434"

    openai_compat_base_url: str = "http://localhost:8000/v1"
    openai_compat_api_key: str = "NONEEDKEY"
    openai_compat_model: str = "local-model"

    openai_model: str = "gpt-4o"
    openai_api_key: str | None = None

    temperature: float = 0.0
    max_tokens: int = 4096
    request_timeout_sec: float | None = None  # per conversation, None = no limit

    log_level: str = "INFO"
    log_directory: Path | None = None  # conversation transcripts; off when unset

    reorder_max_rounds: int = 5
    preview_max_chars: int = 200

    prompt_packs_dir: Path = PACKAGE_DIR / "domain" / "prompts" / "packs"
    default_pack: str = "default"
    presets_dir: Path = PACKAGE_DIR / "pipelines" / "presets"
    default_strategy: str = "tags"


settings = Settings()
