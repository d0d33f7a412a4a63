import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd

from auth_classifier.classification import TransactionClassifier
from auth_classifier.domain.enums import EventType, TokenKind
from auth_classifier.domain.models import EventClassification
from auth_classifier.parsers.factory import RecordParserFactory
from auth_classifier.services.models import ClassificationReport, ClassificationSummary

logger = logging.getLogger(__name__)


class ClassificationService:

    def __init__(self, classifier: Optional[TransactionClassifier] = None):
        self._classifier: Optional[TransactionClassifier] = classifier

    @property
    def classifier(self) -> TransactionClassifier:
        """Lazy-load classifier"""
        if self._classifier is None:
            self._classifier = TransactionClassifier()
        return self._classifier

    def classify_file(
        self,
        filepath: Path,
        record_format: Optional[str] = None,
        event_type: Optional[EventType] = None,
        token_kind: Optional[TokenKind] = None,
    ) -> ClassificationReport:
        """
        Load an export file and classify every record in it.

        Args:
            filepath: The path to the export file
            record_format: Registered parser format (e.g. 'api-calls', 'har'),
                guessed from the file suffix when omitted
            event_type: Only keep classifications with this event type
            token_kind: Only keep classifications with this token kind

        Returns:
            A ClassificationReport.

        Raises:
            ValueError: If the format is unknown or cannot be guessed, or the file is malformed
            FileNotFoundError: If the file doesn't exist
        """
        if record_format is None:
            record_format = RecordParserFactory.format_for(filepath)

        parser = RecordParserFactory.create_parser(record_format)
        records = parser.parse(filepath)
        logger.info("Parsed %d records from %s", len(records), filepath)

        classifications = self.classifier.classify_many(records)
        classifications = self.filter_classifications(
            classifications,
            event_type=event_type,
            token_kind=token_kind,
        )

        return ClassificationReport(
            total_parsed=len(records),
            classifications=classifications,
            filepath=str(filepath),
            record_format=record_format,
        )

    def filter_classifications(
        self,
        classifications: List[EventClassification],
        event_type: Optional[EventType] = None,
        token_kind: Optional[TokenKind] = None,
    ) -> List[EventClassification]:
        """Keep classifications matching all provided filters"""
        return [
            c for c in classifications
            if (event_type is None or c.event_type == event_type)
            and (token_kind is None or c.token_type.kind == token_kind)
        ]

    def summarize(self, classifications: List[EventClassification]) -> ClassificationSummary:
        """
        Count classifications by event type and by token type.

        Example:
            ```
            report = service.classify_file(Path("calls.json"), "api-calls")
            summary = service.summarize(report.classifications)
            summary.by_event_type  # {'Access': 12, 'Login': 2}
            ```
        """
        if not classifications:
            return ClassificationSummary(total=0)

        df = pd.DataFrame(
            {
                "event": [c.event_type.value for c in classifications],
                "token": [c.token_type.label for c in classifications],
                "credential": [c.token_type.requires_credential for c in classifications],
            }
        )

        return ClassificationSummary(
            total=len(df),
            by_event_type={k: int(v) for k, v in df["event"].value_counts().items()},
            by_token_type={k: int(v) for k, v in df["token"].value_counts().items()},
            credential_bearing=int(df["credential"].sum()),
            crosstab=pd.crosstab(df["event"], df["token"]),
        )
