from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RunSummary:
    """Row counters for one `validate_all` / `parse` pass."""
    target: str
    seen: int = 0
    skipped_header: int = 0
    skipped_incomplete: int = 0
    processed: int = 0

    def render_one_line(self) -> str:
        """How the summary is formatted for the log."""
        return (
            f"{self.target}: seen={self.seen} processed={self.processed} "
            f"skipped_header={self.skipped_header} skipped_incomplete={self.skipped_incomplete}"
        )
