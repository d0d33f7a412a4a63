import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List

from auth_classifier.domain.models import TransactionRecord


class RecordParser(ABC):
    """
    Abstract base class for all transaction record parsers.

    This implements the Strategy pattern - each export format gets its own
    concrete parser that implements this interface.
    """

    @abstractmethod
    def parse(self, filepath: str) -> List[TransactionRecord]:
        """
        Parse an export file and return a list of transaction records.

        Args:
            filepath: Path to the export file

        Returns:
            List of TransactionRecord objects

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format is invalid
        """
        pass

    @abstractmethod
    def validate_file(self, filepath: str):
        """
        Validate that the file matches the expected format.

        Args:
            filepath: Path to the export file

        Returns:
            Nothing if file is valid for this parser

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format is invalid
        """
        pass

    def _load_json(self, filepath: str) -> Any:
        """
        Read a JSON document from disk.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If the file is not valid JSON
        """
        path = Path(filepath)

        if not path.exists():
            raise FileNotFoundError(f"File does not exist on path {path}")

        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"{path.name} is not valid JSON: {e}")
