"""Configuration management using Pydantic Settings"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from xai_credit.infrastructure.clients.narrative import GenAIConfig


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "xai-credit-gateway"
    log_level: str = "INFO"

    # Narrative provider (Gemini-compatible generateContent API)
    genai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("genai_api_key", "gemini_api_key"),
    )
    genai_base_url: str = "https://generativelanguage.googleapis.com"
    genai_explanation_model: str = "gemini-2.5-flash"
    genai_chat_model: str = "gemini-2.5-flash"
    genai_extraction_model: str = "gemini-2.5-flash"

    # HTTP Client
    genai_timeout_seconds: float = 30.0
    genai_max_retries: int = 3
    genai_backoff_base: float = 1.0  # Exponential backoff base in seconds

    # Uploads
    max_upload_bytes: int = 5 * 1024 * 1024

    def genai_config(self) -> GenAIConfig:
        """Snapshot of the provider settings handed to the narrative client"""
        return GenAIConfig(
            api_key=self.genai_api_key,
            base_url=self.genai_base_url,
            explanation_model=self.genai_explanation_model,
            chat_model=self.genai_chat_model,
            extraction_model=self.genai_extraction_model,
            timeout_seconds=self.genai_timeout_seconds,
            max_retries=self.genai_max_retries,
            backoff_base=self.genai_backoff_base,
        )


settings = Settings()
