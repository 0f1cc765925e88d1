from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)

    # Server bind settings
    HOST: str = "0.0.0.0"
    PORT: int = 4241

    # Transport keep-alive, passed to uvicorn as ws_ping_interval/ws_ping_timeout
    WS_PING_INTERVAL: float = 5.0
    WS_PING_TIMEOUT: float = 1.0

    # CORS
    ALLOWED_ORIGINS: list[str] = ["http://127.0.0.1:3000"]

    # Directory with the browser client, served at "/" when set
    STATIC_DIR: str | None = None

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: str = "logs/castrelay.log"
    LOG_EXCLUDED_PATHS: list[str] = ["/metrics", "/health"]

    ENVIRONMENT: str = "development"

    @property
    def host_grace_period(self) -> float:
        """
        Seconds to wait before judging a conflicting Host claim.

        By then the transport keep-alive has had the chance to detect
        a dead connection.
        """
        return self.WS_PING_INTERVAL + self.WS_PING_TIMEOUT


app_settings = Settings()
