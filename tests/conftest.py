from datetime import date

import pytest

from reconcile_core.dates import ReportWindow
from reconcile_core.digest import Credentials
from reconcile_core.state import ChallengeContext


@pytest.fixture
def credentials():
    return Credentials("admin", "secret")


@pytest.fixture
def context():
    return ChallengeContext()


@pytest.fixture
def window():
    return ReportWindow(
        start=date(2023, 11, 14),
        end=date(2023, 11, 15),
        tz_offset="+07:00",
    )


@pytest.fixture
def config():
    return {
        "grantType": "client_credentials",
        "clientId": 3,
        "clientSecret": "supersecret",
        "tokenApiUrl": "https://attendance.test/api/token",
        "tokenRefreshMargin": 60,
        "attendanceApiBaseUrl": "https://attendance.test/api/attendance",
        "attendanceApiUrl": "https://attendance.test/api/attendance/storage",
        "lastDays": 3,
        "devices": [],
        "logFile": None,
        "logLevel": "INFO",
    }
