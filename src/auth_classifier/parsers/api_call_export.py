import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from auth_classifier.domain.enums import HttpMethod, OriginKind
from auth_classifier.domain.models import TransactionRecord
from auth_classifier.parsers.base import RecordParser

logger = logging.getLogger(__name__)

HeaderMaps = Tuple[Dict[str, str], Dict[str, str]]

# Stored in place of the body when nothing was captured
PLACEHOLDER_BODY = re.compile(r"^Status: (\d+|undefined)(\s.*)?$", re.DOTALL)


def _as_header_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, Mapping):
        return {}
    return {str(k): str(v) for k, v in value.items() if v is not None}


def resolve_header_maps(entry: Mapping[str, Any]) -> HeaderMaps:
    """
    Work out request and response headers from a stored API call.

    Two storage shapes exist:
    - `headers` holding `{"request": {...}, "response": {...}}`, either as an
      object or a JSON-encoded string
    - separate flat `requestHeaders` / `responseHeaders` maps

    A flat `headers` map without request/response sub-keys is the oldest
    shape and holds request headers only.

    Returns:
        (request_headers, response_headers)

    Raises:
        ValueError: If `headers` is a string that is not valid JSON
    """
    raw = entry.get("headers")
    if isinstance(raw, str):
        raw = json.loads(raw) if raw.strip() else {}

    request_headers: Dict[str, str] = {}
    response_headers: Dict[str, str] = {}

    if isinstance(raw, Mapping):
        if "request" in raw or "response" in raw:
            request_headers = _as_header_map(raw.get("request"))
            response_headers = _as_header_map(raw.get("response"))
        else:
            request_headers = _as_header_map(raw)

    # Separate maps win over the merged object when both are present
    request_headers.update(_as_header_map(entry.get("requestHeaders")))
    response_headers.update(_as_header_map(entry.get("responseHeaders")))

    return request_headers, response_headers


class ApiCallExportParser(RecordParser):
    """
    Parser for exported API call rows from the capture storage.

    Handles the stored row format with:
    - Headers as a JSON string, in either historical shape
    - Epoch millisecond timestamps
    - status 0 for requests that never got a response
    - 'Status: 200 OK' placeholder bodies when no body was captured

    Accepts a top-level list of rows or an object with an `api_calls` list.
    """

    URL_COL = "url"
    METHOD_COL = "method"
    STATUS_COL = "status"
    REQUEST_BODY_COL = "request_body"
    RESPONSE_BODY_COL = "response_body"
    TIMESTAMP_COL = "timestamp"
    TYPE_COL = "type"

    def validate_file(self, filepath):
        """
        Check the file exists, is JSON and holds a list of API call rows.

        :param filepath: Path to the export file
        """
        self._rows(self._load_json(filepath))

    def parse(self, filepath: str) -> List[TransactionRecord]:
        """
        Parse an API call export.

        Rows that cannot be read are skipped with a warning.
        """
        rows = self._rows(self._load_json(filepath))

        records = []
        for index, row in enumerate(rows):
            try:
                record = self._parse_row(row)
            except (ValueError, TypeError) as e:
                logger.warning("Skipping API call row %d: %s", index, e)
                continue

            records.append(record)

        return records

    def _rows(self, document: Any) -> List[Any]:
        if isinstance(document, Mapping):
            document = document.get("api_calls")

        if not isinstance(document, list):
            raise ValueError("Expected a list of API call rows or an object with 'api_calls'")

        return document

    def _parse_row(self, row: Any) -> TransactionRecord:
        if not isinstance(row, Mapping):
            raise ValueError(f"row is a {type(row).__name__}, not an object")

        url = row.get(self.URL_COL)
        if not url or not isinstance(url, str):
            raise ValueError("row has no url")

        request_headers, response_headers = resolve_header_maps(row)

        origin_kind = None
        if row.get(self.TYPE_COL) == OriginKind.ACQUIRE.value:
            origin_kind = OriginKind.ACQUIRE

        return TransactionRecord(
            url=url,
            method=HttpMethod.from_value(row.get(self.METHOD_COL)),
            status=self._parse_status(row.get(self.STATUS_COL)),
            request_headers=request_headers,
            response_headers=response_headers,
            request_body=self._parse_body(row.get(self.REQUEST_BODY_COL, row.get("requestBody"))),
            response_body=self._parse_response_body(row.get(self.RESPONSE_BODY_COL, row.get("responseBody"))),
            origin_kind=origin_kind,
            timestamp=self._parse_timestamp(row.get(self.TIMESTAMP_COL)),
        )

    def _parse_status(self, value: Any) -> Optional[int]:
        if value is None or value == "":
            return None

        status = int(value)
        return status or None

    def _parse_body(self, value: Any) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, str):
            return value
        return json.dumps(value)

    def _parse_response_body(self, value: Any) -> Optional[str]:
        body = self._parse_body(value)
        if body is not None and PLACEHOLDER_BODY.match(body):
            return None
        return body

    def _parse_timestamp(self, value: Any) -> Optional[datetime]:
        """Epoch milliseconds or ISO 8601. Unreadable values become None, the row is kept"""
        if value is None or isinstance(value, bool):
            return None

        try:
            if isinstance(value, (int, float)):
                return datetime.fromtimestamp(value / 1000, tz=timezone.utc)

            return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except (OverflowError, OSError, ValueError) as e:
            logger.warning("Ignoring unreadable timestamp %r: %s", value, e)
            return None
