from functools import cached_property
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from auth_classifier.classification.headers import HeaderView
from auth_classifier.classification.jwt import NOT_JWT, JwtResult, decode_jwt
from auth_classifier.domain.enums import HttpMethod
from auth_classifier.domain.models import TransactionRecord

BEARER_PREFIX = "bearer "


class ClassificationContext:
    """
    Normalized, read-only view of a TransactionRecord for the rule chains.

    Built once per classify() call so header casing, URL lower-casing and the
    Bearer decode happen in one place. Rules only read from it.
    """

    def __init__(self, record: TransactionRecord):
        self.record = record
        self.request_headers = HeaderView(record.request_headers)
        self.response_headers = HeaderView(record.response_headers)
        self.url = (record.url or "").lower()

        try:
            parts = urlsplit(self.url)
            self.path = parts.path
            self.query = parts.query
        except ValueError:
            # Unparseable URL, fall back to substring checks on the whole string
            self.path = self.url
            self.query = ""

    @property
    def method(self) -> Optional[HttpMethod]:
        return self.record.method

    @property
    def status(self) -> Optional[int]:
        return self.record.status

    @property
    def is_success(self) -> bool:
        status = self.record.status
        return isinstance(status, int) and 200 <= status < 300

    @property
    def is_acquisition(self) -> bool:
        return self.record.is_acquisition

    @property
    def has_credential(self) -> bool:
        return self.request_headers.has_credential

    @property
    def request_body(self) -> str:
        return self.record.request_body or ""

    @property
    def response_body(self) -> str:
        return self.record.response_body or ""

    def url_contains(self, *markers: str) -> bool:
        return any(marker in self.url for marker in markers)

    def path_contains(self, *markers: str) -> bool:
        return any(marker in self.path for marker in markers)

    def has_query_param(self, name: str) -> bool:
        return name in parse_qs(self.query, keep_blank_values=True)

    @cached_property
    def bearer_token(self) -> Optional[str]:
        """Credential part of a Bearer Authorization header, if any"""
        authorization = self.request_headers.authorization
        if authorization[:len(BEARER_PREFIX)].lower() != BEARER_PREFIX:
            return None
        return authorization[len(BEARER_PREFIX):].strip()

    @cached_property
    def bearer_jwt(self) -> JwtResult:
        if self.bearer_token is None:
            return NOT_JWT
        return decode_jwt(self.bearer_token)

    def __repr__(self):
        return f"ClassificationContext({self.record!r})"
