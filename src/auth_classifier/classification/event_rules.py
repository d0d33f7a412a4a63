"""
Rules deciding which authentication event a transaction represents.

Listed here in chain order. The engine links them so the first match wins.
"""
import logging
from typing import Sequence, Tuple

from auth_classifier.classification.base import ClassificationRule
from auth_classifier.classification.context import ClassificationContext
from auth_classifier.domain.enums import EventType, HttpMethod

logger = logging.getLogger(__name__)

LOGIN_MARKERS = ("/auth/login", "/login", "/signin")
LOGOUT_MARKERS = ("/auth/logout", "/logout", "/signout")
REFRESH_MARKERS = ("/auth/refresh", "/refresh", "/token")
VERIFY_MARKERS = ("/auth/validate", "/auth/verify", "/token/verify")
AUTH_ENDPOINT_MARKERS = ("/auth", "/login", "/token")
NON_ACCESS_MARKERS = ("/auth", "/login", "/logout")
BODY_TOKEN_MARKERS = ("access_token", "token", "jwt")


class EventRule(ClassificationRule[EventType]):
    """Rule that yields a fixed event type when it matches"""

    event_type: EventType

    def _get_result(self, context: ClassificationContext) -> EventType:
        return self.event_type

    def __repr__(self):
        return f"{self.__class__.__name__}({self.event_type.value})"


class LoginRule(EventRule):
    """Successful POST to a login endpoint"""

    event_type = EventType.LOGIN

    def _matches(self, context: ClassificationContext) -> bool:
        return (
            context.method == HttpMethod.POST
            and context.path_contains(*LOGIN_MARKERS)
            and context.is_success
        )


class LogoutRule(EventRule):
    """POST or DELETE to a logout endpoint, whatever the status"""

    event_type = EventType.LOGOUT

    def _matches(self, context: ClassificationContext) -> bool:
        return (
            context.method in (HttpMethod.POST, HttpMethod.DELETE)
            and context.path_contains(*LOGOUT_MARKERS)
        )


class TokenRefreshRule(EventRule):
    """
    POST to a refresh or token endpoint that is actually refreshing.

    Either the body carries a refresh_token grant, or the URL itself says
    refresh. A plain POST /token with a password grant is not a refresh.
    """

    event_type = EventType.TOKEN_REFRESH

    def _matches(self, context: ClassificationContext) -> bool:
        if context.method != HttpMethod.POST:
            return False

        if not context.url_contains(*REFRESH_MARKERS):
            return False

        body = context.request_body
        refresh_grant = "grant_type" in body and "refresh_token" in body

        return refresh_grant or context.url_contains("refresh")


class ExpiryCheckRule(EventRule):
    """Credentialed request rejected with 401, or an explicit token verify call"""

    event_type = EventType.EXPIRY_CHECK

    def _matches(self, context: ClassificationContext) -> bool:
        if context.status == 401 and context.has_credential:
            return True

        return context.method == HttpMethod.GET and context.url_contains(*VERIFY_MARKERS)


class AcquisitionLoginRule(EventRule):
    """
    Token acquisition that the stricter LoginRule missed.

    Matches records captured as acquisitions, and successful responses from
    auth-looking endpoints. The response body is only sniffed for log detail,
    it never changes the verdict.
    """

    event_type = EventType.LOGIN

    def _matches(self, context: ClassificationContext) -> bool:
        if context.is_acquisition:
            return True

        return context.is_success and context.url_contains(*AUTH_ENDPOINT_MARKERS)

    def _get_result(self, context: ClassificationContext) -> EventType:
        body = context.response_body.lower()
        found = [marker for marker in BODY_TOKEN_MARKERS if marker in body]
        if found:
            logger.debug("Acquisition response carries token fields %s: %s", found, context.url)
        else:
            logger.debug("Acquisition response without token fields: %s", context.url)

        return self.event_type


class AuthenticatedAccessRule(EventRule):
    """Successful credentialed request to a non-auth endpoint"""

    event_type = EventType.ACCESS

    def _matches(self, context: ClassificationContext) -> bool:
        return (
            context.has_credential
            and context.is_success
            and not context.url_contains(*NON_ACCESS_MARKERS)
        )


class UrlMarkerRule(EventRule):
    """
    Legacy URL-only rule: matches on URL markers alone.

    Kept behind the stricter rules above. For most inputs they already decide
    first, but a record that fails their method or status checks still lands
    here.

    Example:
        ```
        rule = UrlMarkerRule(("/auth/logout", "/logout"), EventType.LOGOUT)
        ```
    """

    def __init__(self, markers: Sequence[str], event_type: EventType):
        super().__init__()
        self.markers: Tuple[str, ...] = tuple(marker.lower() for marker in markers)
        self.event_type = event_type

    def _matches(self, context: ClassificationContext) -> bool:
        return context.url_contains(*self.markers)

    def __repr__(self):
        return f"UrlMarkerRule({list(self.markers)} -> {self.event_type.value})"


class CredentialFallbackRule(EventRule):
    """
    Fallback rule that always matches.

    Should be the last rule in the chain: Access when a credential is present,
    Unclassified otherwise.
    """

    def _matches(self, _: ClassificationContext) -> bool:
        """Always matches"""
        return True

    def _get_result(self, context: ClassificationContext) -> EventType:
        if context.has_credential:
            return EventType.ACCESS
        return EventType.UNCLASSIFIED

    def __repr__(self):
        return "CredentialFallbackRule(Access | Unclassified)"


def default_event_rules():
    """Event-type rules in priority order"""
    return [
        LoginRule(),
        LogoutRule(),
        TokenRefreshRule(),
        ExpiryCheckRule(),
        AcquisitionLoginRule(),
        AuthenticatedAccessRule(),
        UrlMarkerRule(("/auth/login", "/login"), EventType.LOGIN),
        UrlMarkerRule(("/auth/logout", "/logout"), EventType.LOGOUT),
        UrlMarkerRule(("/auth/refresh", "/refresh"), EventType.TOKEN_REFRESH),
        CredentialFallbackRule(),
    ]
