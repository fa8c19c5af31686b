"""Settings loaded from config/etv.yaml, with environment overrides."""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml
from dotenv import load_dotenv

from .analysis.filters import MIN_DAYS_PER_SEGMENT, MIN_RSQUARED_DAILY

CONFIG_FILENAME = "etv.yaml"


@dataclass(frozen=True)
class Settings:
    """Process-wide defaults for an analysis run."""

    timezone: str = "Europe/London"  # UK homes
    base_temperature_c: float = 15.5  # used when the HDD file does not say
    midnight_tolerance_minutes: int = 30  # N-bulk day-boundary reading window
    min_rsquared_daily: float = MIN_RSQUARED_DAILY
    min_days_per_segment: int = MIN_DAYS_PER_SEGMENT


def get_config_path(config_path: Path | None = None) -> Path | None:
    """Find the config file, or None to use built-in defaults."""
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return config_path
    candidates = [
        Path.cwd() / "config" / CONFIG_FILENAME,
        Path(__file__).parent.parent.parent / "config" / CONFIG_FILENAME,
        Path.home() / ".config" / "etv-efficacy" / CONFIG_FILENAME,
    ]
    for path in candidates:
        if path.exists():
            return path
    return None


def load_settings(config_path: Path | None = None) -> Settings:
    """Load settings from YAML, then apply ETV_* environment overrides."""
    settings = Settings()

    path = get_config_path(config_path)
    if path is not None:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        known = {f.name for f in fields(Settings)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown settings in {path}: {', '.join(sorted(unknown))}")
        settings = replace(settings, **data)

    load_dotenv()
    if os.environ.get("ETV_TIMEZONE"):
        settings = replace(settings, timezone=os.environ["ETV_TIMEZONE"])
    if os.environ.get("ETV_BASE_TEMPERATURE"):
        settings = replace(settings, base_temperature_c=float(os.environ["ETV_BASE_TEMPERATURE"]))

    if not 1 <= settings.midnight_tolerance_minutes <= 59:
        raise ValueError(
            f"midnight_tolerance_minutes must be in [1, 59], got {settings.midnight_tolerance_minutes}"
        )
    return settings
