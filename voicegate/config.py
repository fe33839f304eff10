"""
Application configuration management.

Following Sandi Metz principles:
- Single Responsibility: Configuration loading and validation
- Small class: Grouped settings per concern
- Clear naming: Descriptive property names
"""

from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """
    Application configuration with validation.

    Loads from environment variables with fallback to .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="VoiceGate", description="Application name")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Debug mode")

    # API settings
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=3001, ge=1, le=65535, description="API port")
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        description="CORS allowed origins",
    )
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024, ge=1, description="Max audio upload size"
    )

    # Cache tiers
    response_cache_max_size: int = Field(default=100, ge=1, description="Responses")
    response_cache_ttl_seconds: float = Field(default=300.0, gt=0, description="TTL")
    language_cache_max_size: int = Field(default=50, ge=1, description="Languages")
    language_cache_ttl_seconds: float = Field(default=120.0, gt=0, description="TTL")
    transcript_cache_max_size: int = Field(default=30, ge=1, description="Transcripts")
    transcript_cache_ttl_seconds: float = Field(default=60.0, gt=0, description="TTL")
    cache_eviction_policy: Literal["insertion", "recency"] = Field(
        default="insertion", description="Overflow eviction order"
    )
    cache_cleanup_interval_seconds: float = Field(
        default=60.0, gt=0, description="Expired entry sweep interval"
    )
    audio_fingerprint_bytes: int = Field(
        default=1024, ge=1, description="Head/tail bytes used for audio fingerprint"
    )

    # Speech connection pool
    speech_pool_size: int = Field(default=5, ge=1, description="Pooled handles")
    speech_pool_stale_seconds: float = Field(
        default=300.0, gt=0, description="Idle time before a handle is refreshed"
    )
    pool_maintenance_interval_seconds: float = Field(
        default=60.0, gt=0, description="Pool maintenance interval"
    )

    # Memory watchdog
    memory_threshold_mb: float = Field(default=400.0, gt=0, description="RSS limit")
    memory_check_interval_seconds: float = Field(
        default=60.0, gt=0, description="Memory check interval"
    )

    # Provider settings
    openai_api_key: str = Field(default="", description="OpenAI API key")
    openai_base_url: str = Field(default="", description="Optional API base URL")
    provider_timeout_seconds: float = Field(
        default=20.0, gt=0, description="Provider call timeout"
    )
    transcription_model: str = Field(default="whisper-1", description="STT model")
    tts_model: str = Field(default="tts-1", description="TTS model")
    tts_voice_en_female: str = Field(default="nova", description="English female")
    tts_voice_en_male: str = Field(default="onyx", description="English male")
    tts_voice_ne_female: str = Field(default="shimmer", description="Nepali female")
    tts_voice_ne_male: str = Field(default="echo", description="Nepali male")
    min_audio_bytes: int = Field(default=1000, ge=0, description="Min audio size")
    agent_model: str = Field(default="gpt-4o-mini", description="Agent model")
    agent_max_tokens: int = Field(default=800, ge=1, description="Max tokens")
    agent_temperature: float = Field(
        default=0.4, ge=0.0, le=2.0, description="Temperature"
    )
    agent_history_limit: int = Field(
        default=20, ge=0, description="Messages kept per thread"
    )

    # Session settings
    session_backend: Literal["memory", "redis"] = Field(
        default="memory", description="Session storage backend"
    )
    session_ttl_seconds: int = Field(default=86400, ge=1, description="Session TTL")
    session_max_count: int = Field(default=10000, ge=1, description="Sessions kept")
    session_history_limit: int = Field(default=50, ge=0, description="Turns kept")
    session_lock_ttl_seconds: int = Field(default=5, ge=1, description="Lock TTL")
    session_local_cache_seconds: float = Field(
        default=60.0, gt=0, description="Local session cache TTL"
    )
    session_cleanup_interval_seconds: float = Field(
        default=3600.0, gt=0, description="Session cleanup interval"
    )

    # Redis settings
    redis_host: str = Field(default="localhost", description="Redis host")
    redis_port: int = Field(default=6379, ge=1, le=65535, description="Redis port")
    redis_db: int = Field(default=0, ge=0, le=15, description="Redis database")
    redis_password: str = Field(default="", description="Redis password")
    redis_max_connections: int = Field(default=10, ge=1, description="Max connections")

    # Rate limiting
    rate_limit_enabled: bool = Field(default=True, description="Enable rate limit")
    rate_limit_per_minute: int = Field(default=30, ge=1, description="Requests/min")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case log level names."""
        return v.upper()

    @property
    def allowed_origins_list(self) -> List[str]:
        """Get allowed origins as list."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    @property
    def redis_url(self) -> str:
        """Build Redis URL."""
        if self.redis_password:
            return (
                f"redis://:{self.redis_password}@"
                f"{self.redis_host}:{self.redis_port}/{self.redis_db}"
            )
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def voice_map(self) -> dict[str, dict[str, str]]:
        """Voice names per language tag and gender."""
        return {
            "en-US": {
                "female": self.tts_voice_en_female,
                "male": self.tts_voice_en_male,
            },
            "ne-NP": {
                "female": self.tts_voice_ne_female,
                "male": self.tts_voice_ne_male,
            },
        }

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


# Global configuration instance
config = AppConfig()
