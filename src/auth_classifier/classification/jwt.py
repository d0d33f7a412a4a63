"""
Structural JWT decoding.

Only the header and payload segments are inspected. The signature is never
verified, so a decoded token says nothing about authenticity.
"""
import base64
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedJwt:
    """Header and payload claims of a JWT-shaped string"""
    header: Dict[str, Any] = field(hash=False)
    payload: Dict[str, Any] = field(hash=False)

    def has_claims(self, *names: str) -> bool:
        return all(name in self.payload for name in names)


class _NotJwt:
    """Sentinel for strings that do not decode as a JWT"""

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_JWT"


NOT_JWT = _NotJwt()

JwtResult = Union[DecodedJwt, _NotJwt]


def _decode_segment(segment: str) -> Dict[str, Any]:
    """
    base64url-decode then JSON-parse one segment.

    Raises:
        ValueError: On bad base64, bad UTF-8, bad JSON or a non-object segment
        RecursionError: On JSON nested too deeply to parse
    """
    padded = segment + "=" * (-len(segment) % 4)
    raw = base64.b64decode(padded, altchars=b"-_", validate=True)
    data = json.loads(raw.decode("utf-8"))

    if not isinstance(data, dict):
        raise ValueError(f"segment decodes to {type(data).__name__}, not an object")

    return data


def decode_jwt(token: str) -> JwtResult:
    """
    Decode a candidate token as a JWT.

    Args:
        token: Candidate string, e.g. the credential part of a Bearer header

    Returns:
        DecodedJwt if the token has exactly three segments and the first two
        are base64url-encoded JSON objects, otherwise NOT_JWT. Never raises.
    """
    if not isinstance(token, str):
        return NOT_JWT

    segments = token.strip().split(".")
    if len(segments) != 3:
        return NOT_JWT

    try:
        header = _decode_segment(segments[0])
        payload = _decode_segment(segments[1])
    except (ValueError, TypeError, RecursionError) as e:
        # binascii.Error, UnicodeDecodeError and JSONDecodeError are all ValueErrors.
        # RecursionError comes from json.loads on deeply nested payloads
        logger.debug("Token is JWT-shaped but not decodable: %s", e)
        return NOT_JWT

    return DecodedJwt(header=header, payload=payload)
