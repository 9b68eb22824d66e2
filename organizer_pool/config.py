from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from organizer_pool.models.domain.pool_domain import PoolCategory, PoolConfig

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Redis settings
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 20

    # Organizer pool settings
    GCAL_PRAKERJA_ORGS: str = ""
    GCAL_NON_PRAKERJA_ORGS: str = ""
    GCAL_EXT_ATTENDEE_LIMIT: int = 2000
    GCAL_INTERNAL_DOMAIN: str = "sempurna.com"

    # Google Calendar settings
    GCAL_TIMEZONE: str = "Asia/Jakarta"
    # Pre-issued delegated access tokens, keyed by organizer email (JSON object in env)
    GCAL_ORGANIZER_TOKENS: dict[str, str] = {}

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
    )

    def organizers_for(self, category: PoolCategory) -> tuple[str, ...]:
        """Candidate organizers for a category, in declared order."""
        raw = {
            PoolCategory.PRAKERJA: self.GCAL_PRAKERJA_ORGS,
            PoolCategory.NON_PRAKERJA: self.GCAL_NON_PRAKERJA_ORGS,
        }[category]
        return tuple(org.strip() for org in raw.split(",") if org.strip())

    def pool_config(self) -> PoolConfig:
        """
        Build the immutable organizer pool configuration.
        The pool receives this at construction instead of reading settings.
        """
        return PoolConfig(
            candidates={category: self.organizers_for(category) for category in PoolCategory},
            external_attendees_limit=self.GCAL_EXT_ATTENDEE_LIMIT,
            internal_domain=self.GCAL_INTERNAL_DOMAIN,
        )


settings = Settings()
