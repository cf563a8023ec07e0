"""SyncReport model - per-source outcomes of one batch"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class SourceOutcome:
    """Outcome of synchronizing a single source"""

    source: str
    destination: str
    succeeded: bool
    records: int = 0  # Number of records written
    error: Optional[str] = None  # Failure reason if the source failed
    attempts: int = 0  # Fetch attempts made for this source


@dataclass
class SyncReport:
    """Outcomes of a batch, in source order"""

    outcomes: List[SourceOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[SourceOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> List[SourceOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def all_succeeded(self) -> bool:
        """Check if every source in the batch succeeded"""
        return not self.failed

    def summary(self) -> str:
        return f"{len(self.succeeded)}/{len(self.outcomes)} sources synchronized"
