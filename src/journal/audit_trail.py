"""Audit trail for model query attempts and the decision index."""
import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path

import aiofiles

from src.journal.models import AttemptLog, DecisionIndex, DecisionIndexEntry
from src.llm.decision_schema import ParsedDecision

logger = logging.getLogger(__name__)


def _model_slug(model: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]", "_", model)


class AuditTrail:
    """Writes every model attempt and every parsed decision to disk.

    Layout under ``logs_dir``:
        ai_decision_{YYYYmmdd_HHMMSS_ffffff}_{model}.json  one file per attempt
        decisions_{YYYYmmdd}.jsonl                         one line per attempt, per UTC day
        raw/raw_{model}_{YYYYmmdd_HHMMSS_ffffff}.txt       raw response dumps
        index.json                                         decision manifest
    """

    INDEX_FILE = "index.json"

    def __init__(self, logs_dir: Path | str) -> None:
        """Initialize the audit trail.

        Args:
            logs_dir: Directory for all audit files.
        """
        self._logs_dir = Path(logs_dir)
        self._raw_dir = self._logs_dir / "raw"
        self._logs_dir.mkdir(parents=True, exist_ok=True)

    @property
    def logs_dir(self) -> Path:
        return self._logs_dir

    def _attempt_path(self, attempt: AttemptLog) -> Path:
        stamp = attempt.timestamp.strftime("%Y%m%d_%H%M%S_%f")
        base = f"ai_decision_{stamp}_{_model_slug(attempt.model)}"
        path = self._logs_dir / f"{base}.json"
        counter = 1
        while path.exists():
            path = self._logs_dir / f"{base}_{counter}.json"
            counter += 1
        return path

    async def record_attempt(self, attempt: AttemptLog) -> Path:
        """Persist one attempt to its own file and to the daily log.

        Args:
            attempt: The attempt to record.

        Returns:
            Path of the per-attempt JSON file.
        """
        data = attempt.to_dict()

        path = self._attempt_path(attempt)
        async with aiofiles.open(path, "w") as f:
            await f.write(json.dumps(data, indent=2, default=str))

        daily_path = self._logs_dir / f"decisions_{attempt.timestamp.strftime('%Y%m%d')}.jsonl"
        async with aiofiles.open(daily_path, "a") as f:
            await f.write(json.dumps(data, default=str) + "\n")

        logger.debug(f"Decision attempt logged to: {path}")
        return path

    async def write_raw_dump(
        self,
        model: str,
        prompt: str,
        raw_response: str,
        now: datetime | None = None,
    ) -> Path | None:
        """Write the raw response text for debugging.

        Failures are logged and swallowed; the attempt file remains the
        authoritative record.

        Returns:
            Path of the dump, or None if it could not be written.
        """
        now = now or datetime.now(timezone.utc)
        path = self._raw_dir / f"raw_{_model_slug(model)}_{now.strftime('%Y%m%d_%H%M%S_%f')}.txt"
        content = (
            "=== AI TRADER RAW LOG ===\n"
            f"Timestamp: {now.strftime('%Y-%m-%d %H:%M:%S UTC')}\n"
            f"Model: {model}\n"
            "\n"
            "=== PROMPT SENT ===\n"
            f"{prompt}\n"
            "\n"
            "=== RAW RESPONSE ===\n"
            f"{raw_response}\n"
        )
        try:
            self._raw_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "w") as f:
                await f.write(content)
        except OSError as e:
            logger.warning(f"Failed to write raw response dump for {model}: {e}")
            return None
        return path

    async def load_index(self) -> DecisionIndex:
        path = self._logs_dir / self.INDEX_FILE
        if not path.exists():
            return DecisionIndex()

        async with aiofiles.open(path, "r") as f:
            content = await f.read()
        return DecisionIndex.from_dict(json.loads(content))

    async def _save_index(self, index: DecisionIndex) -> None:
        path = self._logs_dir / self.INDEX_FILE
        async with aiofiles.open(path, "w") as f:
            await f.write(json.dumps(index.to_dict(), indent=2))

    async def index_decisions(
        self,
        model: str,
        decisions: list[ParsedDecision],
        log_file: str,
        now: datetime | None = None,
    ) -> list[str]:
        """Add one index entry per decision.

        Args:
            model: Model that produced the decisions.
            decisions: Parsed decisions, in response order.
            log_file: Attempt log file the decisions came from.
            now: Index time. Defaults to the system clock.

        Returns:
            Generated entry ids, aligned with ``decisions``.
        """
        now = now or datetime.now(timezone.utc)
        index = await self.load_index()
        ids = []

        for decision in decisions:
            base_id = f"{now.strftime('%Y%m%d%H%M%S')}_{decision.symbol}"
            entry_id = base_id
            suffix = 2
            while index.has_id(entry_id):
                entry_id = f"{base_id}_{suffix}"
                suffix += 1

            prediction = decision.prediction
            index.add_decision(
                DecisionIndexEntry(
                    id=entry_id,
                    timestamp=now.strftime("%Y-%m-%d %H:%M:%S UTC"),
                    model=model,
                    symbol=decision.symbol,
                    action=decision.action,
                    quantity_percent=decision.quantity_percent,
                    confidence=decision.confidence,
                    predicted_direction=prediction.direction if prediction else "unknown",
                    predicted_price_target=prediction.price_target if prediction else 0.0,
                    log_file=log_file,
                )
            )
            ids.append(entry_id)

        await self._save_index(index)
        return ids

    async def attach_outcome(self, entry_id: str, pnl: float, accurate: bool) -> bool:
        """Attach a graded outcome to an index entry.

        Returns:
            True if the entry exists.
        """
        index = await self.load_index()
        found = index.update_outcome(entry_id, pnl, accurate)
        if not found:
            logger.warning(f"Decision index entry {entry_id} not found")
        await self._save_index(index)
        return found
