"""Configuration management for the marathon training tracker."""

import os
from datetime import date
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .plan import training_start_for


# load environment variables from .env file
load_dotenv()


@dataclass(frozen=True)
class StravaConfig:
    """Strava API configuration settings."""

    client_id: str
    client_secret: str
    refresh_token: str
    redirect_port: int = 8000
    auth_url: str = "https://www.strava.com/oauth/authorize"
    token_url: str = "https://www.strava.com/oauth/token"
    api_base: str = "https://www.strava.com/api/v3"

    @classmethod
    def from_env(cls) -> "StravaConfig":
        """
        Create config from environment variables.

        STRAVA_REFRESH_TOKEN may be left empty until the OAuth flow has
        been run once.
        """
        client_id = os.getenv("STRAVA_CLIENT_ID")
        client_secret = os.getenv("STRAVA_CLIENT_SECRET")
        refresh_token = os.getenv("STRAVA_REFRESH_TOKEN", "")

        if not all([client_id, client_secret]):
            raise ValueError(
                "Missing required Strava environment variables. "
                "Ensure STRAVA_CLIENT_ID and STRAVA_CLIENT_SECRET are set."
            )

        return cls(
            client_id=client_id,
            client_secret=client_secret,
            refresh_token=refresh_token,
            redirect_port=int(os.getenv("STRAVA_REDIRECT_PORT", "8000")),
        )

    @property
    def can_sync(self) -> bool:
        return bool(self.refresh_token)


@dataclass(frozen=True)
class PathConfig:
    """File path configuration."""

    base_dir: Path
    data_dir: Path
    output_dir: Path

    @property
    def completions_file(self) -> Path:
        return self.data_dir / "completions.json"

    @classmethod
    def default(cls) -> "PathConfig":
        """
        Create default path configuration.

        MARATHON_DATA_DIR overrides the data directory.
        """
        base = Path(__file__).parent.parent
        data_dir = os.getenv("MARATHON_DATA_DIR")
        return cls(
            base_dir=base,
            data_dir=Path(data_dir) if data_dir else base / "data",
            output_dir=base / "output",
        )


@dataclass(frozen=True)
class TrainingConfig:
    """When the 16-week plan started."""

    training_start: date

    @classmethod
    def from_env(cls, today: Optional[date] = None) -> "TrainingConfig":
        """
        Read TRAINING_START (YYYY-MM-DD) from the environment.

        The date is snapped back to its Monday. Without it, training is
        taken to have started this week.

        Raises:
            ValueError: If TRAINING_START is not an ISO date.
        """
        raw = os.getenv("TRAINING_START")
        if raw:
            try:
                start = date.fromisoformat(raw.strip())
            except ValueError:
                raise ValueError(f"TRAINING_START must be YYYY-MM-DD, got {raw!r}")
        else:
            start = today or date.today()

        return cls(training_start=training_start_for(start))


@dataclass(frozen=True)
class AppConfig:
    """Application-wide configuration."""

    strava: Optional[StravaConfig]
    paths: PathConfig
    training: TrainingConfig

    @classmethod
    def load(cls) -> "AppConfig":
        """
        Load full application configuration.
        """
        try:
            strava = StravaConfig.from_env()
        except ValueError:
            strava = None

        return cls(
            strava=strava,
            paths=PathConfig.default(),
            training=TrainingConfig.from_env(),
        )
