"""
HTTP Digest (RFC 2617) header math and challenge parsing.

Pure functions: nothing here touches the network or mutates state.
MD5 is what the access-control devices speak; it is kept for protocol
compatibility only.
"""

import hashlib
import re
import secrets
from dataclasses import dataclass
from typing import Optional

from .constants import CNONCE_BYTES

_CHALLENGE_RE = re.compile(r'\b(qop|realm|nonce|stale|opaque|domain)="([^"]*)"')


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str

    def __repr__(self):
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class Challenge:
    """Fields of a WWW-Authenticate header. None means the key was absent."""
    qop: Optional[str] = None
    realm: Optional[str] = None
    nonce: Optional[str] = None
    stale: Optional[str] = None
    opaque: Optional[str] = None
    domain: Optional[str] = None


def _md5(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def compute_ha1(username: str, realm: str, password: str) -> str:
    return _md5(f"{username}:{realm}:{password}")


def compute_ha2(method: str, uri: str) -> str:
    return _md5(f"{method}:{uri}")


def compute_response(ha1: str, nonce: str, nc: str, cnonce: str, qop: str, ha2: str) -> str:
    return _md5(f"{ha1}:{nonce}:{nc}:{cnonce}:{qop}:{ha2}")


def format_nonce_count(nonce_count: int) -> str:
    """nc is sent as 8 zero-padded decimal digits."""
    return str(nonce_count).zfill(8)


def generate_header(credentials, context, method, uri, nonce_count) -> str:
    """
    Build the Authorization header for one request.

    Returns "" while no challenge has been received (context.nonce empty);
    the caller must then send the request unauthenticated to elicit one.
    """
    if not context.nonce:
        return ""

    nc = format_nonce_count(nonce_count)
    cnonce = secrets.token_hex(CNONCE_BYTES)
    ha1 = compute_ha1(credentials.username, context.realm, credentials.password)
    ha2 = compute_ha2(method, uri)
    response = compute_response(ha1, context.nonce, nc, cnonce, context.qop, ha2)

    return ", ".join([
        f'Digest username="{credentials.username}"',
        f'realm="{context.realm}"',
        f'nonce="{context.nonce}"',
        f'uri="{uri}"',
        f'response="{response}"',
        f"qop={context.qop}",
        f"nc={nc}",
        f'cnonce="{cnonce}"',
        f'opaque="{context.opaque}"',
    ])


def parse_challenge(header_value) -> Challenge:
    """
    Extract the quoted key="value" pairs of a WWW-Authenticate header.

    Order-independent and tolerant: unknown keys are ignored, absent keys
    stay None, and malformed input yields an empty Challenge.
    """
    if not isinstance(header_value, str):
        return Challenge()
    fields = {}
    for key, value in _CHALLENGE_RE.findall(header_value):
        fields[key] = value
    return Challenge(**fields)
