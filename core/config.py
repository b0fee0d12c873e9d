from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    """
    Application configuration.

    - Secrets are NEVER stored in code.
    - All sensitive values are injected via environment variables (.env).
    - Validation happens at startup (fail fast).
    - Regulatory constants (11.9% LDC risk, 1.01 x 1.01 AV uplift) are NOT
      configurable here; they live in services/calculations.py.
    """

    # --------------------------------------------------
    # Database
    # --------------------------------------------------
    DATABASE_URL: str = "sqlite:///./app.db"

    # --------------------------------------------------
    # Incentive rate (the only runtime-tunable rate)
    # --------------------------------------------------
    DEFAULT_INCENTIVE_RATE: float = 0.08
    INCENTIVE_CATEGORY: str = "General"

    # --------------------------------------------------
    # Live logistics feeds (road / port / weather)
    # --------------------------------------------------
    SENSORS_ENABLED: bool = False
    BARIKOI_API_KEY: str | None = None
    TERMINAL49_API_KEY: str | None = None
    OPENWEATHER_API_KEY: str | None = None
    SENSOR_TIMEOUT_SECONDS: float = 10.0

    # Road delay above this many hours costs 2 points of net margin
    ROAD_DELAY_CRITICAL_HOURS: float = 6.0

    # --------------------------------------------------
    # Internal Cache (seconds)
    # --------------------------------------------------
    DASHBOARD_TTL_SECONDS: int = 15

    # --------------------------------------------------
    # AI Provider (document extraction + chat)
    # --------------------------------------------------
    AI_ENABLED: bool = False
    AI_PROVIDER: str = "none"  # "none" | "openai"
    OPENAI_API_KEY: str | None = None

    # Optional: OpenAI-compatible gateway (e.g. https://openrouter.ai/api/v1)
    OPENAI_BASE_URL: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"

    class Config:
        env_file = ".env"
        extra = "ignore"   # Ignore unrelated env vars (Docker / CI friendly)

    def model_post_init(self, __context) -> None:
        """
        Fail fast ONLY when AI is enabled.
        """
        if self.AI_ENABLED and self.AI_PROVIDER == "openai":
            if not self.OPENAI_API_KEY:
                raise ValueError("AI_ENABLED=true and AI_PROVIDER=openai require OPENAI_API_KEY in .env")


settings = Settings()
