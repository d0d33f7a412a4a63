import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from auth_classifier.domain.enums import HttpMethod
from auth_classifier.domain.models import TransactionRecord
from auth_classifier.parsers.base import RecordParser

logger = logging.getLogger(__name__)


class HarParser(RecordParser):
    """
    Parser for HTTP Archive (HAR 1.2) files exported from browser devtools.

    Each `log.entries[]` item becomes one TransactionRecord. Headers come as
    name/value lists and are folded into maps; repeated headers are joined
    with ', ' except Cookie, which is joined with '; '.
    """

    def validate_file(self, filepath):
        """
        Check the file exists, is JSON and has a `log.entries` list.

        :param filepath: Path to the .har file
        """
        self._check_suffix(filepath)
        self._entries(self._load_json(filepath))

    def parse(self, filepath: str) -> List[TransactionRecord]:
        """Parse a HAR file, skipping entries that cannot be read"""
        self._check_suffix(filepath)
        entries = self._entries(self._load_json(filepath))

        records = []
        for index, entry in enumerate(entries):
            try:
                records.append(self._parse_entry(entry))
            except (ValueError, TypeError, KeyError, AttributeError) as e:
                logger.warning("Skipping HAR entry %d: %s", index, e)

        return records

    def _check_suffix(self, filepath) -> None:
        suffix = Path(filepath).suffix
        if suffix.lower() not in (".har", ".json"):
            raise ValueError(f"File must be .har or .json, got {suffix or 'no extension'}")

    def _entries(self, document: Any) -> List[Any]:
        log = document.get("log") if isinstance(document, Mapping) else None
        entries = log.get("entries") if isinstance(log, Mapping) else None

        if not isinstance(entries, list):
            raise ValueError("Not a HAR file: missing log.entries")

        return entries

    def _parse_entry(self, entry: Mapping[str, Any]) -> TransactionRecord:
        request = entry["request"]
        response = entry.get("response") or {}

        url = request.get("url")
        if not url:
            raise ValueError("request has no url")

        post_data = request.get("postData") or {}
        content = response.get("content") or {}

        return TransactionRecord(
            url=url,
            method=HttpMethod.from_value(request.get("method")),
            status=self._parse_status(response.get("status")),
            request_headers=self._fold_headers(request.get("headers")),
            response_headers=self._fold_headers(response.get("headers")),
            request_body=post_data.get("text") or None,
            response_body=content.get("text") or None,
            timestamp=self._parse_timestamp(entry.get("startedDateTime")),
        )

    def _fold_headers(self, headers: Any) -> Dict[str, str]:
        folded: Dict[str, str] = {}
        for header in headers or []:
            name = header.get("name")
            value = header.get("value")
            if not name or value is None:
                continue

            key = name.lower()
            if key in folded:
                separator = "; " if key == "cookie" else ", "
                folded[key] = f"{folded[key]}{separator}{value}"
            else:
                folded[key] = str(value)

        return folded

    def _parse_status(self, value: Any) -> Optional[int]:
        # HAR uses 0 (or -1) for requests without a response
        if value is None:
            return None
        status = int(value)
        return status if status > 0 else None

    def _parse_timestamp(self, value: Any) -> Optional[datetime]:
        if not value:
            return None
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
