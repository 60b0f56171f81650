"""
Error taxonomy. Run-level errors (config, token, snapshot) end the process;
device-level errors end only that device's reconciliation.
"""


class ReconcileError(Exception):
    """Base exception for every reconciliation failure."""


class ConfigError(ReconcileError):
    """Invalid arguments or configuration. Raised before any network call."""


class TokenError(ReconcileError):
    """The bearer token could not be obtained."""


class SnapshotLoadError(ReconcileError):
    """An attendance page could not be fetched; no partial snapshot is used."""


class AttendanceAPIError(ReconcileError):
    """The attendance API answered with a non-2xx status."""

    def __init__(self, status, detail=""):
        self.status = status
        super().__init__(f"Attendance API failed with status: {status} {detail}".rstrip())


class DeviceHTTPError(ReconcileError):
    """A device answered with a non-2xx status other than 401."""

    def __init__(self, status, path=""):
        self.status = status
        self.path = path
        super().__init__(f"Request failed with status: {status} ({path})")


class DigestRetriesExhausted(ReconcileError):
    """Digest negotiation did not succeed within the attempt budget."""

    def __init__(self, attempts, path=""):
        self.attempts = attempts
        self.path = path
        super().__init__(f"Failed after {attempts} digest retries ({path})")
