import subprocess

import pytest

from admintools.errors import MetricQueryError
from admintools.services import cim


def _completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=["pwsh"], returncode=returncode, stdout=stdout, stderr=stderr)


def test_build_command_selects_properties_and_filter():
    command = cim.build_command("srv01", "Win32_LogicalDisk", ["DeviceID", "Size"], where="DriveType=3")

    assert command.startswith("Get-CimInstance -ClassName Win32_LogicalDisk -ComputerName 'srv01'")
    assert '-Filter "DriveType=3"' in command
    assert "Select-Object DeviceID,Size" in command
    assert command.endswith("ConvertTo-Json -Compress -Depth 2")


@pytest.mark.parametrize("host", ["srv01; Remove-Item C:\\", "$(evil)", "", "'srv01'"])
def test_build_command_rejects_unsafe_host(host):
    with pytest.raises(ValueError, match="Invalid host"):
        cim.build_command(host, "Win32_OperatingSystem", ["Caption"])


def test_build_command_rejects_unsafe_property():
    with pytest.raises(ValueError, match="Invalid CIM identifier"):
        cim.build_command("srv01", "Win32_OperatingSystem", ["Caption;whoami"])


def test_query_instances_wraps_single_object(monkeypatch):
    monkeypatch.setattr(
        "admintools.services.cim.subprocess.run",
        lambda cmd, **kwargs: _completed(stdout='{"Caption":"Microsoft Windows Server 2022"}'),
    )

    rows = cim.query_instances("srv01", "Win32_OperatingSystem", ["Caption"])

    assert rows == [{"Caption": "Microsoft Windows Server 2022"}]


def test_query_instances_returns_list(monkeypatch):
    seen = {}

    def fake_run(cmd, **kwargs):
        seen["cmd"] = cmd
        seen["timeout"] = kwargs.get("timeout")
        return _completed(stdout='[{"DeviceID":"C:"},{"DeviceID":"D:"}]')

    monkeypatch.setenv("ADMIN_QUERY_TIMEOUT", "7")
    monkeypatch.setattr("admintools.services.cim.subprocess.run", fake_run)

    rows = cim.query_instances("srv01", "Win32_LogicalDisk", ["DeviceID"])

    assert [r["DeviceID"] for r in rows] == ["C:", "D:"]
    assert seen["cmd"][1:4] == ["-NoProfile", "-NonInteractive", "-Command"]
    assert seen["timeout"] == 7


def test_query_instances_empty_output(monkeypatch):
    monkeypatch.setattr("admintools.services.cim.subprocess.run", lambda cmd, **kwargs: _completed(stdout="\n"))

    assert cim.query_instances("srv01", "Win32_LogicalDisk", ["DeviceID"]) == []


def test_query_instances_failure_raises(monkeypatch):
    monkeypatch.setattr(
        "admintools.services.cim.subprocess.run",
        lambda cmd, **kwargs: _completed(returncode=1, stderr="Access is denied.\nmore"),
    )

    with pytest.raises(MetricQueryError, match="Access is denied") as excinfo:
        cim.query_instances("srv01", "Win32_OperatingSystem", ["Caption"])
    assert excinfo.value.host == "srv01"


def test_query_instances_missing_powershell(monkeypatch):
    def fake_run(*args, **kwargs):
        raise FileNotFoundError("pwsh")

    monkeypatch.setattr("admintools.services.cim.subprocess.run", fake_run)

    with pytest.raises(MetricQueryError, match="PowerShell binary not found"):
        cim.query_instances("srv01", "Win32_OperatingSystem", ["Caption"])


def test_query_instances_bad_json(monkeypatch):
    monkeypatch.setattr(
        "admintools.services.cim.subprocess.run",
        lambda cmd, **kwargs: _completed(stdout="WARNING: something"),
    )

    with pytest.raises(MetricQueryError, match="JSON"):
        cim.query_instances("srv01", "Win32_OperatingSystem", ["Caption"])
