"""Application settings for daily-parlay."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for the provider, the stake, and the state file."""

    model_config = SettingsConfigDict(
        env_prefix="DAILY_PARLAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    odds_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("ODDS_API_KEY", "DAILY_PARLAY_ODDS_API_KEY"),
    )
    odds_api_base_url: str = "https://api.the-odds-api.com/v4"
    odds_api_timeout_s: float = 10.0
    odds_api_max_retries: int = Field(default=0, ge=0)
    sport_key: str = "basketball_nba"
    regions: str = "us"
    scores_days_from: int = Field(default=3, ge=1, le=3)
    daily_stake: float = Field(default=0.10, gt=0)
    preferred_bookmakers: str = "draftkings,fanduel,betmgm"
    fetch_window_hours: float = Field(default=4.0, gt=0)
    data_file: str = "data.json"

    def preferred_bookmaker_keys(self) -> tuple[str, ...]:
        """Return preferred bookmaker keys in priority order."""
        return tuple(
            item.strip().lower() for item in self.preferred_bookmakers.split(",") if item.strip()
        )
