"""
ChallengeContext — the digest challenge state for one device.

One instance per device per run, owned by that device's DigestClient.
Never shared between devices and never used by two requests at once:
the nonce counter is mutated on every authenticated attempt.
"""

from dataclasses import dataclass

from .constants import DEFAULT_QOP


@dataclass
class ChallengeContext:
    # ── Last challenge received from the device ───────────────
    realm: str = ""
    nonce: str = ""
    qop: str = DEFAULT_QOP
    opaque: str = ""

    # ── Next unused nonce count (nc) ──────────────────────────
    nonce_count: int = 1

    @property
    def has_challenge(self) -> bool:
        """Whether a nonce is known, i.e. the next request can be signed."""
        return bool(self.nonce)

    def consume_nonce_count(self) -> int:
        """Return the current count and advance it. Counts are never reused."""
        current = self.nonce_count
        self.nonce_count += 1
        return current

    def reset(self):
        """Forget the challenge so the next request goes out unauthenticated."""
        self.realm = ""
        self.nonce = ""
        self.qop = DEFAULT_QOP
        self.opaque = ""
        self.nonce_count = 1

    def apply_challenge(self, challenge):
        """
        Take over the fields a fresh WWW-Authenticate header carried.
        Fields missing from a partial challenge keep their previous value.
        """
        if challenge.realm:
            self.realm = challenge.realm
        if challenge.nonce:
            self.nonce = challenge.nonce
        if challenge.qop:
            self.qop = challenge.qop
        if challenge.opaque:
            self.opaque = challenge.opaque
