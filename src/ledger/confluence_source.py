"""Confluence flags published by an external signal process."""

import json
import logging
from pathlib import Path

from src.ledger.base import ConfluenceSource

logger = logging.getLogger(__name__)


class FileConfluenceSource(ConfluenceSource):
    """Reads confluence flags from a JSON file.

    The file maps symbols to booleans, e.g. ``{"AAPL": true, "NVDA": false}``.
    It is re-read on every lookup so updates from the signal process are
    picked up without a restart. A missing or unreadable file means no
    symbol has confluence support.
    """

    def __init__(self, path: Path | str):
        self._path = Path(path)

    def _load(self) -> dict[str, bool]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to read confluence flags from {self._path}: {e}")
            return {}
        return {str(k).upper(): bool(v) for k, v in data.items()}

    def has_confluence_support(self, symbol: str) -> bool:
        return self._load().get(symbol.upper(), False)
