"""
ACS → Attendance Reconciler
===========================
Reads the access-control event log of every configured door/gate device
(ISAPI, HTTP Digest auth) and submits each punch the attendance system
does not have yet, with the event photo attached.

Configuration comes from the environment (or a .env file):
ATTENDANCE_API_BASE_URL, ATTENDANCE_API_URL, TOKEN_API_URL, CLIENT_ID,
CLIENT_SECRET, LAST_DAYS and DEVICES='[{"url": ..., "username": ..., "password": ...}]'.

Usage:
    python reconciler.py
    python reconciler.py --period-start 2024-05-01 --period-end 2024-05-03
"""

from reconcile_core.runner import run


if __name__ == "__main__":
    run()
