"""
Access-control device calls — digest-authenticated ISAPI client.

DigestClient owns one device's ChallengeContext for the whole run so the
challenge survives across the device info call, every event page and every
picture download. Calls are strictly sequential; the nonce counter is
advanced on every signed attempt, including attempts that later fail.
"""

import json
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlsplit

import requests
from requests.structures import CaseInsensitiveDict

from .config import log
from .constants import (
    ACS_EVENT_PATH, API_TIMEOUT_DEVICE, DEFAULT_DEVICE_NAME,
    DEVICE_INFO_PATH, DIGEST_MAX_ATTEMPTS,
)
from .digest import generate_header, parse_challenge
from .exceptions import DeviceHTTPError, DigestRetriesExhausted
from .state import ChallengeContext


# ─── Attempt outcomes ────────────────────────────────────────────

@dataclass
class DigestResponse:
    status: int
    data: Any
    headers: Any


@dataclass
class Success:
    response: DigestResponse


@dataclass
class Unauthorized:
    challenge_header: Optional[str]


@dataclass
class TransientNetworkFailure:
    error: Exception


@dataclass
class FatalHttpError:
    status: int


def _decode_body(resp, response_kind):
    if response_kind == "text":
        return resp.text
    if response_kind == "raw":
        return resp.content
    return resp.json()


# ─── Digest client ───────────────────────────────────────────────

class DigestClient:
    """One device, one session, one challenge context."""

    def __init__(self, session, base_url, credentials, context=None, timeout=API_TIMEOUT_DEVICE):
        self._session = session
        self.base_url = base_url.rstrip("/")
        self._credentials = credentials
        self.context = context if context is not None else ChallengeContext()
        self._timeout = timeout

    def _attempt(self, method, path, body, headers, response_kind):
        """Send one request and classify what came back."""
        auth_header = generate_header(
            self._credentials, self.context, method, path, self.context.nonce_count,
        )
        if auth_header:
            self.context.consume_nonce_count()

        merged = CaseInsensitiveDict(headers or {})
        if auth_header:
            merged["Authorization"] = auth_header

        data = None
        if method != "GET" and body is not None:
            if isinstance(body, (dict, list)):
                data = json.dumps(body)
                merged.setdefault("Content-Type", "application/json")
            else:
                data = body

        try:
            resp = self._session.request(
                method, f"{self.base_url}{path}",
                headers=dict(merged), data=data, timeout=self._timeout,
            )
        except requests.ConnectionError as e:
            return TransientNetworkFailure(e)

        if resp.status_code == 401:
            return Unauthorized(resp.headers.get("WWW-Authenticate"))
        if not 200 <= resp.status_code < 300:
            return FatalHttpError(resp.status_code)

        return Success(DigestResponse(
            status=resp.status_code,
            data=_decode_body(resp, response_kind),
            headers=resp.headers,
        ))

    def request(self, method, path, body=None, headers=None,
                response_kind="json", max_attempts=DIGEST_MAX_ATTEMPTS):
        """
        Perform one logical call, negotiating digest auth as needed.

        A 401 refreshes (or, without a challenge header, clears) the
        context and retries; connection resets are retried as-is. Both
        draw from the same max_attempts budget. Any other non-2xx status
        raises DeviceHTTPError at once. Running out of attempts raises
        DigestRetriesExhausted.
        """
        method = method.upper()
        for attempt in range(1, max_attempts + 1):
            try:
                outcome = self._attempt(method, path, body, headers, response_kind)
            except (requests.RequestException, ValueError) as e:
                if attempt >= max_attempts:
                    raise
                log.warning("Device request %s %s failed (attempt %d/%d): %s",
                            method, path, attempt, max_attempts, e)
                continue

            if isinstance(outcome, Success):
                return outcome.response

            if isinstance(outcome, Unauthorized):
                if not outcome.challenge_header:
                    log.debug("401 without challenge from %s — resetting digest context", self.base_url)
                    self.context.reset()
                else:
                    self.context.apply_challenge(parse_challenge(outcome.challenge_header))
                continue

            if isinstance(outcome, TransientNetworkFailure):
                log.warning("Connection to %s was reset (attempt %d/%d). Retrying...",
                            self.base_url, attempt, max_attempts)
                continue

            raise DeviceHTTPError(outcome.status, path)

        raise DigestRetriesExhausted(max_attempts, path)

    # ─── ISAPI endpoints ──────────────────────────────────────────

    def fetch_device_name(self):
        """Display name from /ISAPI/System/deviceInfo (XML)."""
        resp = self.request("GET", DEVICE_INFO_PATH, response_kind="text")
        return parse_device_name(resp.data)

    def fetch_event_page(self, query):
        """POST one event-search page. Returns (total_matches, items or None)."""
        resp = self.request(
            "POST", ACS_EVENT_PATH, body=query,
            headers={"Content-Type": "application/json"},
        )
        acs_event = (resp.data or {}).get("AcsEvent") or {}
        total_matches = acs_event.get("totalMatches") or 0
        return int(total_matches), acs_event.get("InfoList")

    def fetch_picture(self, picture_url):
        """Download an event photo through the same digest context."""
        resp = self.request("GET", relative_picture_path(self.base_url, picture_url),
                            response_kind="raw")
        return resp.data


# ─── Helpers ─────────────────────────────────────────────────────

def parse_device_name(xml_text):
    """<DeviceInfo><deviceName>…</deviceName></DeviceInfo>, any namespace."""
    root = ET.fromstring(xml_text)
    name = (root.findtext("{*}deviceName") or "").strip()
    return name or DEFAULT_DEVICE_NAME


def relative_picture_path(base_url, picture_url):
    """
    Picture URLs come back absolute ("http://10.0.0.5/LOCALS/pic/..."); the
    digest URI must be the path relative to the device base URL.
    """
    base_url = base_url.rstrip("/")
    if picture_url.startswith(base_url):
        return picture_url[len(base_url):]
    parts = urlsplit(picture_url)
    if parts.scheme and parts.netloc:
        return parts.path + (f"?{parts.query}" if parts.query else "")
    return picture_url
