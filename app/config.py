from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./draft.db"

    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    log_level: str = "INFO"

    # Draft defaults, overridable per draft at creation time
    default_max_picks: int = 6
    default_max_bans: int = 1
    default_max_prebans: int = 1
    invite_code_length: int = 6
    invite_code_attempts: int = 5

    # When True a pick/ban must name a character from the draft's character_pool
    # (if the draft was created with one).
    enforce_character_pool: bool = True


settings = Settings()
