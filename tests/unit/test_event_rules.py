import pytest

from auth_classifier.classification.context import ClassificationContext
from auth_classifier.classification.event_rules import (
    AcquisitionLoginRule,
    AuthenticatedAccessRule,
    CredentialFallbackRule,
    ExpiryCheckRule,
    LoginRule,
    LogoutRule,
    TokenRefreshRule,
    UrlMarkerRule,
)
from auth_classifier.domain.enums import EventType, HttpMethod, OriginKind
from auth_classifier.domain.models import TransactionRecord

BEARER = {"Authorization": "Bearer opaque-token"}


def context(url, method=HttpMethod.GET, status=200, **kwargs) -> ClassificationContext:
    return ClassificationContext(TransactionRecord(url=url, method=method, status=status, **kwargs))


@pytest.mark.unit
class TestLoginRule:

    @pytest.mark.parametrize("url", [
        "https://api.example.com/auth/login",
        "https://api.example.com/v1/login",
        "https://api.example.com/signin",
        "https://api.example.com/AUTH/LOGIN",
    ])
    def test_matches_successful_post(self, url):
        assert LoginRule()._matches(context(url, HttpMethod.POST, 200))

    def test_requires_post(self):
        assert not LoginRule()._matches(context("https://api.example.com/login", HttpMethod.GET, 200))

    @pytest.mark.parametrize("status", [None, 199, 300, 401, 500])
    def test_requires_2xx(self, status):
        assert not LoginRule()._matches(context("https://api.example.com/login", HttpMethod.POST, status))

    def test_marker_must_be_in_path(self):
        """A login marker only in the query string is not a login endpoint"""
        url = "https://api.example.com/home?next=/login"

        assert not LoginRule()._matches(context(url, HttpMethod.POST, 200))


@pytest.mark.unit
class TestLogoutRule:

    @pytest.mark.parametrize("method", [HttpMethod.POST, HttpMethod.DELETE])
    def test_matches_post_and_delete(self, method):
        assert LogoutRule()._matches(context("https://api.example.com/auth/logout", method, 204))

    def test_ignores_status(self):
        assert LogoutRule()._matches(context("https://api.example.com/signout", HttpMethod.POST, 500))

    def test_requires_method(self):
        assert not LogoutRule()._matches(context("https://api.example.com/logout", HttpMethod.GET))


@pytest.mark.unit
class TestTokenRefreshRule:

    def test_refresh_url(self):
        ctx = context("https://api.example.com/auth/refresh", HttpMethod.POST)

        assert TokenRefreshRule()._matches(ctx)

    def test_token_url_with_refresh_grant(self):
        ctx = context(
            "https://api.example.com/oauth/token",
            HttpMethod.POST,
            request_body='{"grant_type": "refresh_token", "refresh_token": "def"}',
        )

        assert TokenRefreshRule()._matches(ctx)

    def test_token_url_with_password_grant(self):
        ctx = context(
            "https://api.example.com/oauth/token",
            HttpMethod.POST,
            request_body="grant_type=password&username=jane",
        )

        assert not TokenRefreshRule()._matches(ctx)

    def test_requires_post(self):
        assert not TokenRefreshRule()._matches(context("https://api.example.com/refresh", HttpMethod.GET))

    def test_refresh_grant_needs_endpoint_marker(self):
        ctx = context(
            "https://api.example.com/session",
            HttpMethod.POST,
            request_body="grant_type=refresh_token",
        )

        assert not TokenRefreshRule()._matches(ctx)


@pytest.mark.unit
class TestExpiryCheckRule:

    def test_401_with_credential(self):
        ctx = context("https://api.example.com/data", status=401, request_headers=BEARER)

        assert ExpiryCheckRule()._matches(ctx)

    def test_401_without_credential(self):
        assert not ExpiryCheckRule()._matches(context("https://api.example.com/data", status=401))

    @pytest.mark.parametrize("url", [
        "https://api.example.com/auth/validate",
        "https://api.example.com/auth/verify",
        "https://api.example.com/token/verify",
    ])
    def test_get_verify_endpoint(self, url):
        assert ExpiryCheckRule()._matches(context(url, HttpMethod.GET, status=500))

    def test_verify_endpoint_requires_get(self):
        assert not ExpiryCheckRule()._matches(context("https://api.example.com/auth/verify", HttpMethod.POST))


@pytest.mark.unit
class TestAcquisitionLoginRule:

    def test_acquisition_record(self):
        ctx = context("https://cdn.example.com/anything", status=None, origin_kind=OriginKind.ACQUIRE)

        assert AcquisitionLoginRule()._matches(ctx)

    @pytest.mark.parametrize("url", [
        "https://api.example.com/auth/session",
        "https://api.example.com/login/sso",
        "https://api.example.com/token",
    ])
    def test_successful_auth_endpoint(self, url):
        assert AcquisitionLoginRule()._matches(context(url, status=200))

    def test_failed_auth_endpoint(self):
        assert not AcquisitionLoginRule()._matches(context("https://api.example.com/token", status=400))

    def test_body_does_not_change_verdict(self):
        rule = AcquisitionLoginRule()
        with_token = context("https://api.example.com/token", response_body='{"access_token": "x"}')
        without_token = context("https://api.example.com/token", response_body="<html></html>")

        assert rule._get_result(with_token) == EventType.LOGIN
        assert rule._get_result(without_token) == EventType.LOGIN


@pytest.mark.unit
class TestAuthenticatedAccessRule:

    def test_credentialed_success(self):
        ctx = context("https://api.example.com/users/42", request_headers=BEARER)

        assert AuthenticatedAccessRule()._matches(ctx)

    @pytest.mark.parametrize("url", [
        "https://api.example.com/auth/me",
        "https://api.example.com/login/status",
        "https://api.example.com/logout/confirm",
    ])
    def test_excludes_auth_urls(self, url):
        assert not AuthenticatedAccessRule()._matches(context(url, request_headers=BEARER))

    def test_requires_credential(self):
        assert not AuthenticatedAccessRule()._matches(context("https://api.example.com/users/42"))

    def test_requires_success(self):
        ctx = context("https://api.example.com/users/42", status=404, request_headers=BEARER)

        assert not AuthenticatedAccessRule()._matches(ctx)


@pytest.mark.unit
class TestFallbackRules:

    def test_url_marker_rule(self):
        rule = UrlMarkerRule(("/auth/logout", "/logout"), EventType.LOGOUT)

        assert rule._matches(context("https://api.example.com/logout", HttpMethod.GET, 404))
        assert rule._get_result(context("https://api.example.com/logout")) == EventType.LOGOUT
        assert not rule._matches(context("https://api.example.com/users"))

    def test_url_marker_rule_repr(self):
        rule = UrlMarkerRule(("/Login",), EventType.LOGIN)

        assert repr(rule) == "UrlMarkerRule(['/login'] -> Login)"

    def test_credential_fallback(self):
        rule = CredentialFallbackRule()
        credentialed = context("https://api.example.com/x", status=None, request_headers=BEARER)
        anonymous = context("https://api.example.com/x", status=None)

        assert rule._matches(anonymous)
        assert rule._get_result(credentialed) == EventType.ACCESS
        assert rule._get_result(anonymous) == EventType.UNCLASSIFIED
