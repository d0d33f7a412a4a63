"""
Rules deciding which kind of credential a transaction involves.

Evaluated independently of the event type, first match wins.
"""
import logging
from typing import Optional, Sequence, Tuple

from auth_classifier.classification.base import ClassificationRule
from auth_classifier.classification.context import ClassificationContext
from auth_classifier.classification.headers import (
    API_KEY_HEADERS,
    CSRF_HEADERS,
    STATE_HEADERS,
)
from auth_classifier.classification.jwt import DecodedJwt
from auth_classifier.domain.enums import TokenKind
from auth_classifier.domain.models import TokenType

logger = logging.getLogger(__name__)

AUTH_ENDPOINT_MARKERS = (
    "/auth", "/login", "/signin", "/oauth", "/oidc", "/openid", "/token", "/refresh",
)
REFRESH_URL_MARKERS = ("refresh", "token", "renew")
SESSION_COOKIE_NAMES = (
    "sessionid=", "session=", "jsessionid=", "phpsessid=", "asp.net_sessionid=",
)
ACCESS_TOKEN_COOKIE_NAMES = ("access_token=",)


class TokenRule(ClassificationRule[TokenType]):
    """Rule that yields a fixed token type when it matches"""

    def __init__(self, token_type: TokenType):
        super().__init__()
        self.token_type = token_type

    def _get_result(self, context: ClassificationContext) -> TokenType:
        return self.token_type

    def __repr__(self):
        return f"{self.__class__.__name__}({self.token_type.label})"


class AcquiredTokenRule(ClassificationRule[TokenType]):
    """
    Token being obtained rather than presented.

    Applies to acquisition records and auth-endpoint URLs, then picks the
    acquired kind from the URL shape. If the URL shape says nothing the rule
    does not match and the chain carries on.
    """

    def _acquired_kind(self, context: ClassificationContext) -> Optional[TokenKind]:
        if context.url_contains("refresh", "renew"):
            return TokenKind.REFRESH_TOKEN_ACQUIRED

        if context.url_contains("oauth", "oidc", "openid"):
            return TokenKind.OAUTH_TOKEN_ACQUIRED

        if context.url_contains("api-key", "apikey", "key"):
            return TokenKind.API_KEY_ACQUIRED

        if context.url_contains("auth", "login", "signin"):
            if "json" in context.response_headers.content_type:
                return TokenKind.ACCESS_TOKEN_ACQUIRED
            return TokenKind.AUTH_TOKEN_ACQUIRED

        if context.url_contains("/token"):
            return TokenKind.ACCESS_TOKEN_ACQUIRED

        return None

    def _matches(self, context: ClassificationContext) -> bool:
        if not (context.is_acquisition or context.url_contains(*AUTH_ENDPOINT_MARKERS)):
            return False
        return self._acquired_kind(context) is not None

    def _get_result(self, context: ClassificationContext) -> TokenType:
        return TokenType(self._acquired_kind(context))


class BearerTokenRule(ClassificationRule[TokenType]):
    """
    Bearer credential, split into JWT and opaque families.

    JWTs with identity claims (sub and email, or aud) are ID tokens. Otherwise
    a refresh-looking URL makes it a refresh token and anything else is an
    access token. The same URL test applies to opaque tokens.
    """

    def _matches(self, context: ClassificationContext) -> bool:
        return context.bearer_token is not None

    def _get_result(self, context: ClassificationContext) -> TokenType:
        refresh_url = context.url_contains(*REFRESH_URL_MARKERS)
        decoded = context.bearer_jwt

        if isinstance(decoded, DecodedJwt):
            if decoded.has_claims("sub", "email") or decoded.has_claims("aud"):
                return TokenType(TokenKind.ID_TOKEN_JWT)
            if refresh_url:
                return TokenType(TokenKind.REFRESH_TOKEN_JWT)
            return TokenType(TokenKind.ACCESS_TOKEN_JWT)

        if refresh_url:
            return TokenType(TokenKind.REFRESH_TOKEN_OPAQUE)
        return TokenType(TokenKind.ACCESS_TOKEN_OPAQUE)

    def __repr__(self):
        return "BearerTokenRule(Jwt | Opaque)"


class AuthorizationSchemeRule(TokenRule):
    """
    Matches the scheme word at the start of the Authorization header.

    Example:
        ```
        rule = AuthorizationSchemeRule(("Basic",), TokenType(TokenKind.BASIC_AUTH))
        ```
    """

    def __init__(self, schemes: Sequence[str], token_type: TokenType):
        super().__init__(token_type)
        self.prefixes: Tuple[str, ...] = tuple(f"{scheme.lower()} " for scheme in schemes)

    def _matches(self, context: ClassificationContext) -> bool:
        authorization = context.request_headers.authorization.lower()
        return authorization.startswith(self.prefixes)


class HeaderPresenceRule(TokenRule):
    """Matches when any of the given request headers is present"""

    def __init__(self, header_names: Sequence[str], token_type: TokenType):
        super().__init__(token_type)
        self.header_names = tuple(name.lower() for name in header_names)

    def _matches(self, context: ClassificationContext) -> bool:
        return context.request_headers.has_any(self.header_names)


class CookieNameRule(TokenRule):
    """Matches when the Cookie header carries one of the given cookie names"""

    def __init__(self, cookie_names: Sequence[str], token_type: TokenType):
        super().__init__(token_type)
        self.cookie_names = tuple(name.lower() for name in cookie_names)

    def _matches(self, context: ClassificationContext) -> bool:
        cookie = context.request_headers.cookie.lower()
        return any(name in cookie for name in self.cookie_names)


class StateTokenRule(TokenRule):
    """OAuth-style `state` query parameter or an explicit state header"""

    def __init__(self):
        super().__init__(TokenType(TokenKind.STATE_TOKEN))

    def _matches(self, context: ClassificationContext) -> bool:
        return (
            context.has_query_param("state")
            or context.request_headers.has_any(STATE_HEADERS)
        )


class CustomSchemeRule(ClassificationRule[TokenType]):
    """
    Authorization header with a scheme word nothing earlier recognized.

    A bare value with no scheme word (`Authorization: abc123`) is not
    reported, the value would otherwise end up as the scheme name.
    """

    def _scheme(self, context: ClassificationContext) -> Optional[str]:
        parts = context.request_headers.authorization.split(None, 1)
        if len(parts) != 2:
            return None
        return parts[0]

    def _matches(self, context: ClassificationContext) -> bool:
        return self._scheme(context) is not None

    def _get_result(self, context: ClassificationContext) -> TokenType:
        scheme = self._scheme(context)
        logger.debug("Unrecognized Authorization scheme %r on %s", scheme, context.url)
        return TokenType.custom(scheme)


class AcquisitionFallbackRule(TokenRule):
    """Acquisition record that gave no more specific signal"""

    def __init__(self):
        super().__init__(TokenType(TokenKind.AUTH_TOKEN_ACQUIRED))

    def _matches(self, context: ClassificationContext) -> bool:
        return context.is_acquisition


class DefaultTokenRule(TokenRule):
    """
    Fallback rule that always matches.

    Should be the last rule in the chain.
    """

    def __init__(self):
        super().__init__(TokenType(TokenKind.UNKNOWN))

    def _matches(self, _: ClassificationContext) -> bool:
        """Always matches"""
        return True


def default_token_rules():
    """Token-type rules in priority order"""
    return [
        AcquiredTokenRule(),
        BearerTokenRule(),
        AuthorizationSchemeRule(("Basic",), TokenType(TokenKind.BASIC_AUTH)),
        AuthorizationSchemeRule(("ApiKey", "API-Key"), TokenType(TokenKind.API_KEY)),
        HeaderPresenceRule(API_KEY_HEADERS, TokenType(TokenKind.API_KEY)),
        HeaderPresenceRule(CSRF_HEADERS, TokenType(TokenKind.CSRF_TOKEN)),
        CookieNameRule(SESSION_COOKIE_NAMES, TokenType(TokenKind.SESSION_TOKEN)),
        CookieNameRule(ACCESS_TOKEN_COOKIE_NAMES, TokenType(TokenKind.ACCESS_TOKEN_COOKIE)),
        StateTokenRule(),
        CustomSchemeRule(),
        AcquisitionFallbackRule(),
        DefaultTokenRule(),
    ]
