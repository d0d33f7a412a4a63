from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional

from auth_classifier.domain.enums import (
    ACQUIRED_KINDS,
    CREDENTIAL_KINDS,
    JWT_KINDS,
    EventType,
    HttpMethod,
    OriginKind,
    TokenKind,
)


@dataclass(frozen=True)
class TransactionRecord:
    """Core domain model representing a single captured network transaction"""
    url: str
    method: Optional[HttpMethod] = None
    status: Optional[int] = None
    request_headers: Mapping[str, str] = field(default_factory=dict)
    response_headers: Mapping[str, str] = field(default_factory=dict)
    request_body: Optional[str] = None
    response_body: Optional[str] = None
    origin_kind: Optional[OriginKind] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        # Accept plain verbs like "delete"; unknown verbs become None
        if isinstance(self.method, str):
            object.__setattr__(self, "method", HttpMethod.from_value(self.method))

    @property
    def is_acquisition(self) -> bool:
        """Captured because a token was being acquired"""
        return self.origin_kind == OriginKind.ACQUIRE

    def __repr__(self):
        method = self.method.value if self.method else "-"
        return f"TransactionRecord({method} {(self.url or '')[:60]}, status={self.status})"


@dataclass(frozen=True)
class TokenType:
    """
    Credential kind, plus the scheme word for custom Authorization schemes.

    `scheme` is only set for TokenKind.CUSTOM_SCHEME.
    """
    kind: TokenKind
    scheme: Optional[str] = None

    @classmethod
    def custom(cls, scheme: str) -> "TokenType":
        return cls(TokenKind.CUSTOM_SCHEME, scheme)

    @property
    def label(self) -> str:
        if self.kind == TokenKind.CUSTOM_SCHEME:
            return f"{self.kind.value}({self.scheme})"
        return self.kind.value

    @property
    def is_jwt(self) -> bool:
        return self.kind in JWT_KINDS

    @property
    def is_acquired(self) -> bool:
        return self.kind in ACQUIRED_KINDS

    @property
    def requires_credential(self) -> bool:
        return self.kind in CREDENTIAL_KINDS

    def __str__(self):
        return self.label


@dataclass(frozen=True)
class EventClassification:
    """
    Result of classifying one TransactionRecord.

    method, status, url and headers are echoed from the record for display.
    """
    event_type: EventType
    token_type: TokenType
    url: str
    method: Optional[HttpMethod] = None
    status: Optional[int] = None
    headers: Mapping[str, str] = field(default_factory=dict, hash=False)
    timestamp: Optional[datetime] = None

    def __repr__(self):
        return f"EventClassification({self.event_type.value}, {self.token_type.label})"
