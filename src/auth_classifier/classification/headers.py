from typing import Dict, Iterator, Mapping, Optional

AUTHORIZATION = "authorization"
COOKIE = "cookie"
CONTENT_TYPE = "content-type"

API_KEY_HEADERS = ("x-api-key", "x-apikey", "api-key")
CSRF_HEADERS = ("x-csrf-token", "x-xsrf-token")
STATE_HEADERS = ("x-state-token",)


class HeaderView(Mapping[str, str]):
    """
    Read-only, case-insensitive view over a header mapping.

    Names are lower-cased once on construction so every lookup after that is
    a plain dict access. Values are kept as given (stringified), so
    `Authorization` and `authorization` resolve to the same entry.

    Example:
        ```
        >>> headers = HeaderView({"Authorization": "Bearer abc"})
        >>> headers.get("AUTHORIZATION")
        'Bearer abc'
        >>> headers.has_credential
        True
        ```
    """

    def __init__(self, headers: Optional[Mapping[str, object]] = None):
        self._headers: Dict[str, str] = {}
        for name, value in (headers or {}).items():
            if name is None or value is None:
                continue
            self._headers[str(name).strip().lower()] = str(value)

    def __getitem__(self, name: str) -> str:
        return self._headers[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._headers

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def value(self, name: str) -> str:
        """Stripped header value, empty string when absent"""
        return self._headers.get(name.lower(), "").strip()

    def has_any(self, names) -> bool:
        return any(name in self._headers for name in names)

    @property
    def authorization(self) -> str:
        return self.value(AUTHORIZATION)

    @property
    def cookie(self) -> str:
        return self.value(COOKIE)

    @property
    def content_type(self) -> str:
        return self.value(CONTENT_TYPE).lower()

    @property
    def has_api_key(self) -> bool:
        return self.has_any(API_KEY_HEADERS)

    @property
    def has_credential(self) -> bool:
        """
        True if the headers present any credential.

        Shared by the event-type and token-type chains so both agree on
        credential presence.
        """
        return bool(self.authorization) or bool(self.cookie) or self.has_api_key

    def __repr__(self):
        return f"HeaderView({sorted(self._headers)})"
