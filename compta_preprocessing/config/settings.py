from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    documents_root: Path = Path("data/documents")
    processed_folder_name: str = "A_ANALYSER"
    raw_group_marker: str = "COMPTA"
    output_filename_prefix: str = "COMPTA"
    tenant_key_length: int = 9
    tenant_lock_enabled: bool = True

    pdf_engine: str = "pdfplumber"

    classifier_provider: str = "openai"
    classifier_mode: str = "document"
    classification_timeout_seconds: int = 60
    classification_max_attempts: int = 2
    min_page_confidence: float = 0.0

    classifier_openai_api_key: str = ""
    classifier_openai_model_name: str = "gpt-4o-mini"
    classifier_openai_timeout_seconds: int = 60
    classifier_openai_temperature: float = 0.2

    classifier_openai_compatible_api_key: str = ""
    classifier_openai_compatible_model_name: str = ""
    classifier_openai_compatible_timeout_seconds: int = 60
    classifier_openai_compatible_base_url: str = ""

    classifier_openrouter_api_key: str = ""
    classifier_openrouter_model_name: str = ""
    classifier_openrouter_timeout_seconds: int = 60

    classifier_groq_api_key: str = ""
    classifier_groq_model_name: str = ""
    classifier_groq_timeout_seconds: int = 60

    classifier_together_api_key: str = ""
    classifier_together_model_name: str = ""
    classifier_together_timeout_seconds: int = 60

    classifier_deepseek_api_key: str = ""
    classifier_deepseek_model_name: str = ""
    classifier_deepseek_timeout_seconds: int = 60

    classifier_ollama_api_key: str = "ollama"
    classifier_ollama_model_name: str = ""
    classifier_ollama_timeout_seconds: int = 60
