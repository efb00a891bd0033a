"""
Centralized settings and path configuration for rulequote.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


ENV_PREFIX = 'RULEQUOTE_'


def get_package_root() -> Path:
    """Directory of the rulequote package (holds rules/ and templates/)."""
    return Path(__file__).resolve().parent.parent


def _env(name: str) -> Optional[str]:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None or value.strip() == '':
        return None
    return value.strip()


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes', 'on')


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Input files
    rules_csv: Path
    templates_dir: Path

    # Output files
    output_dir: Path

    # Rules switches (tier table lives in rules_csv)
    discounts_enabled: bool = True
    currency: str = 'USD'
    default_valid_days: int = 30

    log_level: str = 'INFO'

    @classmethod
    def load(cls, package_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the package layout, then apply environment overrides."""
        root = package_root or get_package_root()

        rules_csv = _env('RULES_CSV')
        output_dir = _env('OUTPUT_DIR')
        valid_days = _env('DEFAULT_VALID_DAYS')

        return cls(
            rules_csv=Path(rules_csv) if rules_csv else root / 'rules' / 'tier_rules.csv',
            templates_dir=root / 'templates',
            output_dir=Path(output_dir) if output_dir else Path.cwd() / 'output' / 'documents',
            discounts_enabled=_env_bool('DISCOUNTS_ENABLED', True),
            currency=_env('CURRENCY') or 'USD',
            default_valid_days=int(valid_days) if valid_days else 30,
            log_level=(_env('LOG_LEVEL') or 'INFO').upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
