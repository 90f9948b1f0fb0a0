"""
Configuration settings for the SummarIQ backend.
Loads environment variables and provides application-wide settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # AI provider selection: openai | groq | gemini | ollama
    AI_PROVIDER: str = "openai"

    # OpenAI Configuration
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-3.5-turbo"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"

    # Groq Configuration (OpenAI-compatible endpoint)
    GROQ_API_KEY: str = ""
    GROQ_MODEL: str = "llama-3.3-70b-versatile"
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"

    # Gemini Configuration; several keys may be given comma-separated and
    # are used round-robin
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash-001"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1"

    # Ollama Configuration
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_LLM_MODEL: str = "qwen2.5:3b"

    LLM_TIMEOUT: int = 120  # seconds per provider request

    # Upload Configuration
    UPLOAD_DIR: str = "./uploads"
    MAX_FILE_SIZE_MB: int = 25
    SUPPORTED_FILE_TYPES: List[str] = [".pdf", ".ppt", ".pptx", ".doc", ".docx"]

    # Retrieval Configuration
    CHAT_CHUNK_SIZE: int = 1000  # characters
    CHAT_TOP_K: int = 3

    # Notes generation splits long documents into windows of this size
    NOTES_CHUNK_SIZE: int = 10000  # characters
    NOTES_CHUNK_DELAY_SECONDS: float = 1.0

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    ALLOWED_ORIGINS: str = "http://localhost:3000"
    ENVIRONMENT: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def max_file_size_bytes(self) -> int:
        return self.MAX_FILE_SIZE_MB * 1024 * 1024

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    def get_gemini_keys(self) -> List[str]:
        """Parse GEMINI_API_KEY into a list of non-empty keys."""
        return [key.strip() for key in self.GEMINI_API_KEY.split(",") if key.strip()]

    def provider_key_configured(self) -> bool:
        """Return True if the selected AI provider has credentials (Ollama needs none)."""
        provider = self.AI_PROVIDER.lower()
        if provider == "groq":
            return bool(self.GROQ_API_KEY)
        if provider == "gemini":
            return bool(self.get_gemini_keys())
        if provider == "ollama":
            return True
        return bool(self.OPENAI_API_KEY)


# Global settings instance
settings = Settings()
