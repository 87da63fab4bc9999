from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """Loads all environment variables into a single, accessible object."""
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    OPENAI_API_KEY: Optional[str] = None
    ANTHROPIC_API_KEY: Optional[str] = None
    GOOGLE_API_KEY: Optional[str] = None
    PERPLEXITY_API_KEY: Optional[str] = None

    GOOGLE_SEARCH_API_KEY: Optional[str] = None
    GOOGLE_SEARCH_ENGINE_ID: Optional[str] = None
    BING_SEARCH_API_KEY: Optional[str] = None

    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_FAST_MODEL: str = "gpt-4o-mini"
    OPENAI_MID_MODEL: str = "gpt-4o-mini"
    OPENAI_FULL_MODEL: str = "gpt-4o"

    ANTHROPIC_BASE_URL: str = "https://api.anthropic.com/v1"
    ANTHROPIC_MODEL: str = "claude-3-5-sonnet-latest"
    ANTHROPIC_VERSION: str = "2023-06-01"

    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com"
    GEMINI_FAST_MODEL: str = "gemini-2.5-flash-lite"
    GEMINI_MID_MODEL: str = "gemini-2.5-flash"
    GEMINI_FULL_MODEL: str = "gemini-2.5-pro"
    EMBEDDING_MODEL_NAME: str = "text-embedding-004"

    PERPLEXITY_BASE_URL: str = "https://api.perplexity.ai"
    PERPLEXITY_FAST_MODEL: str = "sonar"
    PERPLEXITY_FULL_MODEL: str = "sonar-pro"

    LOG_LEVEL: str = "INFO"

    def gemini_endpoint(self, model: str) -> str:
        return f"{self.GEMINI_BASE_URL}/v1beta/models/{model}:generateContent"

    @property
    def GEMINI_EMBED_ENDPOINT(self) -> str:
        return f"{self.GEMINI_BASE_URL}/v1beta/models/{self.EMBEDDING_MODEL_NAME}:embedContent"

settings = Settings()
