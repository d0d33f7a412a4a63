from enum import Enum
from typing import Optional


class HttpMethod(Enum):
    """HTTP verbs a captured transaction can carry"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def from_value(cls, value: Optional[str]) -> Optional["HttpMethod"]:
        """Lenient lookup, unknown or missing verbs map to None"""
        if not value:
            return None
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


class OriginKind(Enum):
    """Why the record was captured"""
    ACQUIRE = "acquire" # background token fetch


class EventType(Enum):
    """Authentication event a transaction represents"""
    LOGIN = "Login"
    LOGOUT = "Logout"
    TOKEN_REFRESH = "TokenRefresh"
    EXPIRY_CHECK = "ExpiryCheck"
    ACCESS = "Access"
    UNCLASSIFIED = "Unclassified"


class TokenKind(Enum):
    """Kind of credential involved in a transaction"""
    ACCESS_TOKEN_JWT = "AccessTokenJwt"
    REFRESH_TOKEN_JWT = "RefreshTokenJwt"
    ID_TOKEN_JWT = "IdTokenJwt"
    ACCESS_TOKEN_OPAQUE = "AccessTokenOpaque"
    REFRESH_TOKEN_OPAQUE = "RefreshTokenOpaque"
    ACCESS_TOKEN_ACQUIRED = "AccessTokenAcquired"
    REFRESH_TOKEN_ACQUIRED = "RefreshTokenAcquired"
    OAUTH_TOKEN_ACQUIRED = "OAuthTokenAcquired"
    API_KEY_ACQUIRED = "ApiKeyAcquired"
    AUTH_TOKEN_ACQUIRED = "AuthTokenAcquired"
    BASIC_AUTH = "BasicAuth"
    API_KEY = "ApiKey"
    CSRF_TOKEN = "CsrfToken"
    SESSION_TOKEN = "SessionToken"
    ACCESS_TOKEN_COOKIE = "AccessTokenCookie"
    STATE_TOKEN = "StateToken"
    CUSTOM_SCHEME = "CustomScheme"
    UNKNOWN = "Unknown"


JWT_KINDS = frozenset({
    TokenKind.ACCESS_TOKEN_JWT,
    TokenKind.REFRESH_TOKEN_JWT,
    TokenKind.ID_TOKEN_JWT,
})

ACQUIRED_KINDS = frozenset({
    TokenKind.ACCESS_TOKEN_ACQUIRED,
    TokenKind.REFRESH_TOKEN_ACQUIRED,
    TokenKind.OAUTH_TOKEN_ACQUIRED,
    TokenKind.API_KEY_ACQUIRED,
    TokenKind.AUTH_TOKEN_ACQUIRED,
})

# Kinds that can only be reached when the request presents a credential
CREDENTIAL_KINDS = JWT_KINDS | frozenset({
    TokenKind.ACCESS_TOKEN_OPAQUE,
    TokenKind.REFRESH_TOKEN_OPAQUE,
    TokenKind.BASIC_AUTH,
    TokenKind.API_KEY,
    TokenKind.SESSION_TOKEN,
    TokenKind.ACCESS_TOKEN_COOKIE,
    TokenKind.CUSTOM_SCHEME,
})
