"""
Rules Store - holds the process-wide RulesConfig.

The config is swapped as a whole value; readers grab the current reference
and keep using it for the rest of their calculation.
"""
import threading
from typing import Callable, Optional

import structlog

from ..engine.models import RulesConfig


logger = structlog.get_logger(__name__)


class RulesStore:
    """Read-mostly holder for the active RulesConfig."""

    def __init__(self, config: RulesConfig, loader: Optional[Callable[[], RulesConfig]] = None):
        self._config = config
        self._loader = loader
        self._write_lock = threading.Lock()

    @classmethod
    def from_loader(cls, loader: Callable[[], RulesConfig]) -> 'RulesStore':
        return cls(loader(), loader=loader)

    def current(self) -> RulesConfig:
        return self._config

    def replace(self, config: RulesConfig) -> RulesConfig:
        """Install a new config. Returns the previous one."""
        if not isinstance(config, RulesConfig):
            raise TypeError(f"Expected RulesConfig, got {type(config).__name__}")
        with self._write_lock:
            previous = self._config
            self._config = config
        logger.info(
            "rules_config_replaced",
            discounts_enabled=config.discounts_enabled,
            currency=config.currency,
        )
        return previous

    def reload(self) -> RulesConfig:
        """
        Re-run the loader and install the result.

        A failing load leaves the active config untouched.
        """
        if self._loader is None:
            raise RuntimeError("RulesStore has no loader to reload from")
        try:
            config = self._loader()
        except Exception as e:
            logger.error("rules_reload_failed", error=str(e))
            raise
        self.replace(config)
        return config
