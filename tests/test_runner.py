import json

import pytest

from reconcile_core import runner
from reconcile_core.config import load_config, parse_devices
from reconcile_core.exceptions import ConfigError

from fakes import FakeResponse, FakeSession, device_info, event_page

GATE = {"url": "http://10.0.0.5/", "username": "admin", "password": "secret"}


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("DEVICES", json.dumps([GATE]))
    monkeypatch.setenv("TOKEN_API_URL", "https://attendance.test/api/token")
    monkeypatch.setenv("ATTENDANCE_API_BASE_URL", "https://attendance.test/api/attendance")
    monkeypatch.setenv("ATTENDANCE_API_URL", "https://attendance.test/api/attendance/storage")
    for name in ("LOG_FILE", "LOG_LEVEL", "LAST_DAYS", "CLIENT_ID"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def _use_sessions(monkeypatch, attendance, device):
    monkeypatch.setattr(runner.http_client, "create_session", lambda: attendance)
    monkeypatch.setattr(runner.http_client, "create_device_session", lambda: device)


def _token():
    return FakeResponse(200, json_data={"access_token": "tok", "expires_in": 3600})


def _no_network():
    raise AssertionError("no session should be created")


def test_full_run_exits_zero(env):
    attendance = FakeSession([
        _token(),
        FakeResponse(200, json_data={"data": [], "meta": {"total": 0}}),
        FakeResponse(200, json_data={"status": "stored"}),
    ])
    device = FakeSession([
        device_info("Front Gate"),
        event_page([{"time": "2023-11-14T22:18:20Z", "employeeNoString": "E2"}], 1),
    ])
    _use_sessions(env, attendance, device)

    assert runner.main(["--period-start", "2023-11-14", "--period-end", "2023-11-15"]) == 0

    assert attendance.calls[1]["url"].endswith("/range/2023-11-14/2023-11-15")
    assert attendance.calls[2]["data"]["gate_name"] == "Front Gate"
    assert device.calls[0]["url"] == "http://10.0.0.5/ISAPI/System/deviceInfo"
    assert attendance.closed and device.closed


def test_failed_device_still_exits_zero(env):
    attendance = FakeSession([_token(), FakeResponse(200, json_data={"data": [], "meta": {"total": 0}})])
    device = FakeSession([FakeResponse(404)])
    _use_sessions(env, attendance, device)

    assert runner.main([]) == 0


def test_snapshot_failure_exits_one(env):
    attendance = FakeSession([_token(), FakeResponse(500, text="down")])
    device = FakeSession([])
    _use_sessions(env, attendance, device)

    assert runner.main(["--period-start", "2023-11-14"]) == 1
    assert device.calls == []


def test_token_failure_exits_one(env):
    attendance = FakeSession([FakeResponse(401, json_data={"error": "invalid_client"})])
    _use_sessions(env, attendance, FakeSession([]))

    assert runner.main([]) == 1
    assert len(attendance.calls) == 1


@pytest.mark.parametrize("argv", [
    ["--period-end", "2023-11-15"],
    ["--period-start", "2023-11-16", "--period-end", "2023-11-15"],
])
def test_bad_period_exits_before_any_network_call(env, argv):
    env.setattr(runner.http_client, "create_session", _no_network)
    env.setattr(runner.http_client, "create_device_session", _no_network)

    assert runner.main(argv) == 1


def test_bad_devices_config_exits_one(env):
    env.setenv("DEVICES", "{not json")
    env.setattr(runner.http_client, "create_session", _no_network)

    assert runner.main([]) == 1


def test_unknown_log_level_exits_one(env):
    env.setenv("LOG_LEVEL", "verbose")
    env.setattr(runner.http_client, "create_session", _no_network)

    assert runner.main([]) == 1


def test_log_level_is_validated_case_insensitively(env):
    env.setenv("LOG_LEVEL", "debug")
    assert load_config()["logLevel"] == "DEBUG"

    env.setenv("LOG_LEVEL", "loud")
    with pytest.raises(ConfigError, match="LOG_LEVEL"):
        load_config()


def test_parse_devices():
    assert parse_devices(json.dumps([GATE])) == [
        {"url": "http://10.0.0.5", "username": "admin", "password": "secret"},
    ]
    assert parse_devices("") == []
    with pytest.raises(ConfigError):
        parse_devices(json.dumps({"url": "x"}))
    with pytest.raises(ConfigError):
        parse_devices(json.dumps([{"url": "http://x", "username": "admin"}]))
