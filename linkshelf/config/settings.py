from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "linkshelf"
    db_username: str = "linkshelf"
    db_password: str = "secret"
    db_connect_timeout_seconds: float = 10.0

    pdf_engine: str = "pdfplumber"
    pdf_max_text_length: int = 100_000

    url_verification_timeout_seconds: int = 10
    metadata_timeout_seconds: int = 10
    render_timeout_seconds: int = 30
    render_page_format: str = "A4"

    ingest_workers: int = 4
    status_ttl_seconds: int = 3600

    classification_rules_path: str = ""
    keyword_confidence_threshold: float = 0.7

    ml_enabled: bool = False
    ml_confidence_threshold: float = 0.6
    ml_model_path: str = "./ml-model.json"
    ml_min_document_frequency: int = 2
    ml_max_features: int = 1000
    ml_max_training_documents: int = 1000

    remote_classifier_enabled: bool = False
    remote_classifier_url: str = "http://localhost:3000"
    remote_classifier_timeout_seconds: int = 30
    remote_classifier_tool_name: str = "classify_document"

    notes_enabled: bool = True
    notes_vault_path: str = "./obsidian-vault"
