import subprocess

from admintools.models.probe import ProbeResult
from admintools.services import probe


def _completed(returncode=0, stdout=""):
    return subprocess.CompletedProcess(args=["ping"], returncode=returncode, stdout=stdout, stderr="")


def test_ping_host_parses_latency(monkeypatch):
    monkeypatch.setattr(probe.sys, "platform", "linux")

    def fake_run(cmd, **kwargs):
        assert cmd == ["ping", "-c", "1", "-W", "1", "192.168.178.10"]
        return _completed(stdout="64 bytes from 192.168.178.10: icmp_seq=1 ttl=64 time=2.34 ms\n")

    monkeypatch.setattr("admintools.services.probe.subprocess.run", fake_run)

    status = probe.ping_host("192.168.178.10")

    assert isinstance(status, ProbeResult)
    assert status.is_up is True
    assert status.latency_ms == 2.34
    assert status.error is None


def test_ping_host_windows_syntax_and_sub_millisecond_reply(monkeypatch):
    monkeypatch.setattr(probe.sys, "platform", "win32")
    seen = {}

    def fake_run(cmd, **kwargs):
        seen["cmd"] = cmd
        return _completed(stdout="Reply from 10.0.0.5: bytes=32 time<1ms TTL=128\r\n")

    monkeypatch.setattr("admintools.services.probe.subprocess.run", fake_run)

    status = probe.ping_host("srv01", timeout_seconds=2)

    assert seen["cmd"] == ["ping", "-n", "1", "-w", "2000", "srv01"]
    assert status.is_up is True
    assert status.latency_ms == 1.0


def test_windows_unreachable_reply_is_not_up(monkeypatch):
    """Windows ping exits 0 for 'Destination host unreachable'."""
    monkeypatch.setattr(probe.sys, "platform", "win32")
    monkeypatch.setattr(
        "admintools.services.probe.subprocess.run",
        lambda cmd, **kwargs: _completed(stdout="Reply from 10.0.0.1: Destination host unreachable.\r\n"),
    )

    assert probe.ping_host("srv09").is_up is False


def test_ping_failure_sets_error(monkeypatch):
    monkeypatch.setattr(probe.sys, "platform", "linux")
    monkeypatch.setattr(
        "admintools.services.probe.subprocess.run",
        lambda cmd, **kwargs: _completed(returncode=1),
    )

    status = probe.ping_host("srv09")

    assert status.is_up is False
    assert status.latency_ms is None
    assert "return code 1" in (status.error or "")


def test_ping_binary_missing_sets_error_flag(monkeypatch):
    def fake_run(*args, **kwargs):
        raise FileNotFoundError("ping not found")

    monkeypatch.setattr("admintools.services.probe.subprocess.run", fake_run)

    status = probe.ping_host("srv01")

    assert status.is_up is False
    assert status.latency_ms is None
    assert "ping binary not found" in status.error


def test_is_local_recognises_aliases(monkeypatch):
    monkeypatch.setattr(probe.socket, "gethostname", lambda: "WS01.corp.example")

    assert probe.is_local("localhost")
    assert probe.is_local("127.0.0.1")
    assert probe.is_local(".")
    assert probe.is_local("ws01")
    assert probe.is_local("ws01.corp.example")
    assert not probe.is_local("srv01")


def test_is_reachable_does_not_ping_local_host(monkeypatch):
    def fake_ping(*args, **kwargs):
        raise AssertionError("local host must not be pinged")

    monkeypatch.setattr(probe, "ping_host", fake_ping)

    assert probe.is_reachable("localhost") is True


def test_is_reachable_uses_ping_result(monkeypatch):
    monkeypatch.setattr(probe.socket, "gethostname", lambda: "ws01")
    monkeypatch.setattr(
        probe,
        "ping_host",
        lambda host, timeout_seconds=1: ProbeResult(host=host, is_up=host == "srv01"),
    )

    assert probe.is_reachable("srv01") is True
    assert probe.is_reachable("srv02") is False


def test_skip_probe_setting_bypasses_ping(monkeypatch):
    monkeypatch.setenv("ADMIN_SKIP_PROBE", "1")
    monkeypatch.setattr(probe.socket, "gethostname", lambda: "ws01")
    monkeypatch.setattr(probe, "ping_host", lambda *a, **k: ProbeResult(host="srv01", is_up=False))

    assert probe.is_reachable("srv01") is True


def test_ping_not_executable_sets_error_flag(monkeypatch):
    """A ping binary that exists but cannot be started reports the host as down."""

    def fake_run(*args, **kwargs):
        raise PermissionError("ping not executable")

    monkeypatch.setattr("admintools.services.probe.subprocess.run", fake_run)

    status = probe.ping_host("srv01")

    assert status.is_up is False
    assert status.latency_ms is None
    assert "could not be started" in status.error
