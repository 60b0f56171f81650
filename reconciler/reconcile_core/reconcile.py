"""
Reconciler — walks every device's event log and submits the punches the
attendance system does not have yet.

Scopes:
  run:    snapshot and token failures end the run (raised to the runner)
  device: any other failure ends that device only, kept in DeviceReport
  record: a failed submission is logged, counted and skipped
"""

import base64
import uuid
from dataclasses import dataclass
from typing import Optional

import requests

from .attendance import attendance_key, submit_record
from .config import log
from .constants import BASE64_1X1_PNG, EVENT_PAGE_SIZE
from .dates import offset_to_tzinfo, parse_event_timestamp
from .device import DigestClient
from .digest import Credentials
from .exceptions import AttendanceAPIError, TokenError
from .query import build_event_query

PLACEHOLDER_PHOTO = ("photo.png", base64.b64decode(BASE64_1X1_PNG), "image/png")


@dataclass(frozen=True)
class DeviceEvent:
    time: str
    employee_id: str
    name: str = ""
    picture_url: str = ""

    @classmethod
    def from_info(cls, info) -> Optional["DeviceEvent"]:
        """Build from an ISAPI InfoList item. None when it names no employee."""
        employee_id = info.get("employeeNoString")
        if not employee_id:
            return None
        return cls(
            time=info.get("time") or "",
            employee_id=str(employee_id),
            name=info.get("name") or "",
            picture_url=info.get("pictureURL") or "",
        )


@dataclass
class DeviceReport:
    base_url: str
    name: str = ""
    valid_records: int = 0
    missing: int = 0
    submitted: int = 0
    failed_submissions: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Reconciler:
    """
    Holds what every device shares: the read-only snapshot, the window,
    the attendance session and the token provider. Each device gets its
    own DigestClient (and with it a fresh ChallengeContext).
    """

    def __init__(self, config, snapshot, window, tokens,
                 attendance_session, device_session, page_size=EVENT_PAGE_SIZE):
        self._config = config
        self._snapshot = snapshot
        self._window = window
        self._tokens = tokens
        self._attendance_session = attendance_session
        self._device_session = device_session
        self._page_size = page_size
        self._local_tz = offset_to_tzinfo(window.tz_offset)

    def run(self, devices):
        """Reconcile every device in order. Returns one DeviceReport per device."""
        return [self.reconcile_device(device) for device in devices]

    def reconcile_device(self, device) -> DeviceReport:
        report = DeviceReport(base_url=device["url"])
        client = DigestClient(
            self._device_session, device["url"],
            Credentials(device["username"], device["password"]),
        )

        try:
            report.name = client.fetch_device_name()
            log.info("== Processing device: %s (%s) ==", report.name, report.base_url)
            self._paginate(client, report)
        except TokenError:
            raise
        except Exception as e:
            report.error = str(e)
            log.error("Error processing device at %s: %s", report.base_url, e)
            return report

        log.info("Total valid records found on device: %d", report.valid_records)
        return report

    # ─── Pagination ──────────────────────────────────────────────

    def _paginate(self, client, report):
        search_id = str(uuid.uuid4())
        offset = 0
        total_matches = self._page_size

        while offset < total_matches:
            query = build_event_query(
                search_id, self._page_size, offset,
                self._window.start_str, self._window.end_str, self._window.tz_offset,
            )
            total_matches, items = client.fetch_event_page(query)
            if not items:
                log.info("No event list at offset %d (device reports %d) — done",
                         offset, total_matches)
                break

            for info in items:
                self._handle_event(client, info, report)

            offset += self._page_size
            log.info("%d of %d", min(offset, total_matches), total_matches)

    # ─── Per event ───────────────────────────────────────────────

    def _handle_event(self, client, info, report):
        event = DeviceEvent.from_info(info)
        if event is None:
            return
        report.valid_records += 1

        try:
            timestamp = parse_event_timestamp(event.time, self._local_tz)
        except ValueError:
            log.warning("Skipping event with unreadable time %r (id: %s)",
                        event.time, event.employee_id)
            return

        if attendance_key(timestamp, event.employee_id) in self._snapshot:
            return

        report.missing += 1
        log.info("Not found in attendance data -> time: %s, id: %s, name: %s",
                 event.time, event.employee_id, event.name)

        photo = self._photo_for(client, event)
        try:
            result = submit_record(
                self._attendance_session, self._config, self._tokens,
                event, photo, report.name,
            )
        except (requests.RequestException, AttendanceAPIError) as e:
            report.failed_submissions += 1
            log.error("Error submitting clocked data for %s at %s: %s",
                      event.employee_id, event.time, e)
            return

        report.submitted += 1
        log.info("Submit response: %s", result)

    def _photo_for(self, client, event):
        if not event.picture_url:
            return PLACEHOLDER_PHOTO
        return ("photo.jpg", client.fetch_picture(event.picture_url), "image/jpeg")
