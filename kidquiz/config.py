"""Configuration settings using pydantic-settings."""
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Telegram Bot
    BOT_TOKEN: str = Field(default="", description="Telegram Bot API token")

    # Question generator (OpenAI-compatible endpoint)
    LLM_BASE_URL: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai/",
        description="Base URL of the OpenAI-compatible chat completions API"
    )
    LLM_API_KEY: str = Field(default="", description="API key for the generator")
    LLM_MODEL: str = Field(default="gemini-2.5-flash", description="Model name")
    LLM_TEMPERATURE: float = Field(default=0.8, description="Sampling temperature")
    LLM_MAX_TOKENS: int = Field(
        default=16384,
        description="Upper bound on generated tokens (SVG illustrations are long)"
    )
    LLM_TIMEOUT: float = Field(default=120.0, description="Generator timeout in seconds")
    QUESTION_COUNT: int = Field(default=20, description="Questions per quiz")

    # Result store (Supabase REST)
    SUPABASE_URL: str = Field(default="", description="Supabase project URL")
    SUPABASE_ANON_KEY: str = Field(default="", description="Supabase anon key")
    SUPABASE_TABLE: str = Field(default="quiz_results", description="Results table")
    STORE_TIMEOUT: float = Field(default=15.0, description="Store request timeout in seconds")

    # Local state
    DB_PATH: str = Field(
        default="data/kidquiz.db",
        description="Path to SQLite file holding device identifiers"
    )

    TIMEZONE: str = Field(
        default="Asia/Ho_Chi_Minh",
        description="Timezone used to display result dates"
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    LOG_FILE: str = Field(default="", description="Optional path to log file")

    class Config:
        """Pydantic config."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    @property
    def store_configured(self) -> bool:
        """True when both Supabase credentials are present."""
        return bool(self.SUPABASE_URL.strip() and self.SUPABASE_ANON_KEY.strip())


# Global settings instance
settings = Settings()
