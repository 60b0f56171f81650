"""
OAuth bearer token for the attendance API, cached in memory until shortly
before it expires.
"""

import time
import requests

from .config import log
from .constants import API_TIMEOUT_TOKEN
from .exceptions import TokenError


class TokenProvider:
    def __init__(self, session, config, clock=time.time):
        self._session = session
        self._config = config
        self._clock = clock
        self._token = ""
        self._expires_at = 0

    def _still_valid(self, now):
        margin = self._config.get("tokenRefreshMargin", 60)
        return bool(self._token) and now < self._expires_at - margin

    def get_token(self):
        """Return a valid bearer token, requesting a new one when needed."""
        now = int(self._clock())
        if self._still_valid(now):
            return self._token

        payload = {
            "grant_type": self._config["grantType"],
            "client_id": self._config["clientId"],
            "client_secret": self._config["clientSecret"],
        }
        try:
            resp = self._session.post(self._config["tokenApiUrl"], json=payload,
                                      timeout=API_TIMEOUT_TOKEN)
        except requests.RequestException as e:
            raise TokenError(f"Error fetching bearer token: {e}") from e

        if resp.status_code != 200:
            raise TokenError(f"Error fetching bearer token: HTTP {resp.status_code} — {resp.text[:200]}")

        try:
            data = resp.json()
            token = data["access_token"]
            expires_in = int(data.get("expires_in", 0))
        except (ValueError, KeyError, TypeError) as e:
            raise TokenError(f"Malformed token response: {e}") from e

        self._token = token
        self._expires_at = now + expires_in
        log.info("Bearer token refreshed (expires in %ds)", expires_in)
        return self._token

    def auth_header(self):
        return {"Authorization": f"Bearer {self.get_token()}"}
