"""JSON file persistence for the budget configuration document."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from core.migration import load_config_document
from core.models import BudgetConfig

__all__ = ["JsonConfigStore"]

logger = logging.getLogger(__name__)


class JsonConfigStore:
    """Loads and saves one ``BudgetConfig`` document.

    Read and write failures are logged and reported as ``None``/``False``;
    the caller's in-memory config stays authoritative and the next save
    retries. A document that parses but fails validation is raised.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> BudgetConfig | None:
        if not self.path.exists():
            logger.info("No saved budget config at %s", self.path)
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Failed to load budget config from %s: %s", self.path, exc)
            return None
        if not isinstance(payload, dict):
            logger.warning("Ignoring budget config at %s: expected a JSON object", self.path)
            return None
        return load_config_document(payload)

    def save(self, config: BudgetConfig) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(config.to_document(), indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            logger.warning("Failed to save budget config to %s: %s", self.path, exc)
            return False
        return True

    def clear(self) -> bool:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to clear budget config at %s: %s", self.path, exc)
            return False
        return True
