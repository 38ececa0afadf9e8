"""Settings for the journal module."""
from pydantic import BaseModel


class JournalSettings(BaseModel):
    """Configuration settings for the decision journal.

    Attributes:
        logs_dir: Directory for attempt logs, raw dumps and index.json.
        data_dir: Directory for decision rows, sessions, risk events and
            performance snapshots.
    """

    logs_dir: str = "logs/ai_decisions"
    data_dir: str = "data/ai_trader"
