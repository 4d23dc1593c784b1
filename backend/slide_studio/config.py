from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_STORAGE_ROOT = PROJECT_ROOT / "storage"
DEFAULT_DB_PATH = DEFAULT_STORAGE_ROOT / "app.db"


class Settings(BaseSettings):
    app_name: str = "Slide Studio API"
    api_prefix: str = "/api"

    storage_root: Path = DEFAULT_STORAGE_ROOT
    database_url: str = f"sqlite:///{DEFAULT_DB_PATH.as_posix()}"
    frontend_origin: str = "http://localhost:3000"

    default_llm_provider: str = "mock"
    llm_timeout_seconds: float = 30.0
    openai_api_key: str | None = None
    openai_model: str = "gpt-5-mini"
    openai_base_url: str | None = None
    perplexity_api_key: str | None = None
    perplexity_model: str = "sonar-pro"
    perplexity_base_url: str = "https://api.perplexity.ai"
    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_max_tokens: int = 4096
    exa_api_key: str | None = None
    exa_search_url: str = "https://api.exa.ai/search"
    web_search_results: int = 4

    default_theme_id: str = "clean"
    quiz_generator: str = "template"

    log_level: str = "INFO"
    suppress_httpx_info_logs: bool = True
    log_preview_chars: int = 180

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()

for folder in [
    settings.storage_root,
    settings.storage_root / "uploads",
    settings.storage_root / "exports",
]:
    folder.mkdir(parents=True, exist_ok=True)
