"""
Service layer models - DTOs for service operations.

These models represent the results of service operations, not domain entities.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from auth_classifier.domain.models import EventClassification


@dataclass
class ClassificationReport:
    """
    Result of classifying an export file.

    - How many records were parsed
    - Which classifications survived the filters, in file order
    """
    total_parsed: int
    classifications: List[EventClassification] = field(default_factory=list)

    filepath: str = ""
    record_format: str = ""

    @property
    def total_shown(self) -> int:
        return len(self.classifications)

    def __str__(self) -> str:
        "Human-readable summary"
        return "\n".join([
            f"Classification summary for {self.record_format}:",
            f" File: {self.filepath}",
            f" Parsed: {self.total_parsed}",
            f" Shown: {self.total_shown}",
        ])


@dataclass
class ClassificationSummary:
    """
    Tallies over a set of classifications.

    `crosstab` rows are event types, columns are token type labels.
    """
    total: int
    by_event_type: Dict[str, int] = field(default_factory=dict)
    by_token_type: Dict[str, int] = field(default_factory=dict)
    credential_bearing: int = 0
    crosstab: Optional[pd.DataFrame] = None

    @property
    def top_token_types(self) -> List[tuple]:
        """Token types sorted by count (highest first)"""
        return sorted(self.by_token_type.items(), key=lambda x: x[1], reverse=True)
