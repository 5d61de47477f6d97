from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "idp"
    db_username: str = "idp"
    db_password: str = "secret"
    db_pool_max_size: int = 10
    db_pool_timeout_seconds: float = 30.0

    max_job_attempts: int = 3
    job_poll_interval_seconds: int = 5

    files_root: str = "/app/files"

    extraction_engine: str = "pdfplumber"
    extraction_timeout_seconds: int = 300
    tesseract_lang: str = "eng"
    tesseract_render_scale: float = 2.0

    inference_provider: str = "openai"
    inference_api_key: str = ""
    inference_base_url: str = ""
    inference_model_name: str = ""
    inference_temperature: float = 0.0
    classification_timeout_seconds: int = 300
    summarization_timeout_seconds: int = 300
    classification_max_tokens: int = 100
    summarization_max_tokens: int = 500

    cors_allow_origins: list[str] = ["*"]
