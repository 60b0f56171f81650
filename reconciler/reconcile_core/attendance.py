"""
Attendance API calls — snapshot of recorded punches, punch submission.

The snapshot is loaded completely before any device is touched. A page
that cannot be fetched aborts the run: reconciling against a partial
snapshot would resubmit punches that already exist.
"""

import requests

from .config import log
from .constants import API_TIMEOUT_ATTENDANCE, ATTENDANCE_PER_PAGE
from .dates import TimezoneResolver, local_timestamp, offset_to_tzinfo
from .exceptions import AttendanceAPIError, SnapshotLoadError


def attendance_key(timestamp, employee_id):
    """Identity of a punch: whole Unix seconds plus employee id."""
    return f"{timestamp}:{employee_id}"


# ─── Snapshot ────────────────────────────────────────────────────

def _fetch_page(session, config, tokens, window, page):
    url = f"{config['attendanceApiBaseUrl']}/range/{window.start_str}/{window.end_str}"
    resp = session.get(
        url,
        params={"per_page": ATTENDANCE_PER_PAGE, "page": page},
        headers=tokens.auth_header(),
        timeout=API_TIMEOUT_ATTENDANCE,
    )
    if resp.status_code != 200:
        raise AttendanceAPIError(resp.status_code, resp.text[:200])
    return resp.json()


def load_snapshot(session, config, tokens, window):
    """
    Page through the attendance API and return the frozenset of punch keys.
    meta.total is re-read from every page.
    """
    zones = TimezoneResolver(fallback=offset_to_tzinfo(window.tz_offset))
    keys = set()
    total = 0
    page = 0

    try:
        while True:
            page += 1
            log.info("Fetching attendance page: %d", page)
            body = _fetch_page(session, config, tokens, window, page)

            for record in body.get("data") or []:
                zone = zones.resolve(record.get("timezone_device"))
                ts = local_timestamp(record["checked_time_by_timezone"], zone)
                keys.add(attendance_key(ts, record["employee_id"]))

            total = int((body.get("meta") or {}).get("total") or 0)
            if page * ATTENDANCE_PER_PAGE >= total:
                break
    except (requests.RequestException, AttendanceAPIError, ValueError, KeyError, TypeError) as e:
        raise SnapshotLoadError(f"Error fetching attendance data (page {page}): {e}") from e

    log.info("%d attendance data records fetched.", len(keys))
    return frozenset(keys)


# ─── Submission ──────────────────────────────────────────────────

def submit_record(session, config, tokens, event, photo, gate_name):
    """
    POST one missing punch as multipart form data.
    photo is a (filename, bytes, content_type) tuple. Returns the decoded body.
    """
    resp = session.post(
        config["attendanceApiUrl"],
        headers=tokens.auth_header(),
        files={"photo": photo},
        data={
            "date_time": event.time,
            "employee_id": event.employee_id,
            "gate_name": gate_name,
        },
        timeout=API_TIMEOUT_ATTENDANCE,
    )
    if not 200 <= resp.status_code < 300:
        raise AttendanceAPIError(resp.status_code, resp.text[:200])
    try:
        return resp.json()
    except ValueError:
        return resp.text
