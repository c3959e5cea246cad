import json
import re

import pytest

from admintools import cli
from admintools.models.collection import CollectionResult
from admintools.models.host import OperatingSystemInfo
from admintools.services import os_monitor


def test_bytes_command(capsys):
    assert cli.main(["bytes", "1536"]) == 0
    assert capsys.readouterr().out.strip() == "1.50 KB"


def test_bytes_command_with_unit(capsys):
    assert cli.main(["bytes", "1073741824", "--unit", "mb"]) == 0
    assert capsys.readouterr().out.strip() == "1024.00 MB"


def test_bytes_command_rejects_negative(capsys):
    assert cli.main(["bytes", "-5"]) == 2
    assert "[ERROR]" in capsys.readouterr().err


def test_bytes_command_rejects_unknown_unit():
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["bytes", "10", "--unit", "PB"])
    assert excinfo.value.code == 2


def test_password_command(capsys):
    assert cli.main(["password", "--length", "20", "--classes", "digit", "--count", "3"]) == 0
    lines = capsys.readouterr().out.split()
    assert len(lines) == 3
    assert all(re.fullmatch(r"[0-9]{20}", line) for line in lines)


def test_password_command_invalid_class(capsys):
    assert cli.main(["password", "--classes", "emoji"]) == 2
    assert "Unknown character class" in capsys.readouterr().err


def test_pin_command(capsys):
    assert cli.main(["pin", "--length", "6"]) == 0
    assert re.fullmatch(r"[0-9]{6}", capsys.readouterr().out.strip())


def test_passphrase_command(tmp_path, capsys):
    wordlist = tmp_path / "words.txt"
    wordlist.write_text("apple\nriver\nstone\ncloud\n", encoding="utf-8")

    assert cli.main(["passphrase", str(wordlist), "--words", "3", "--separator", "_"]) == 0
    assert len(capsys.readouterr().out.strip().split("_")) == 3


def _os_result():
    return CollectionResult(
        records=[
            OperatingSystemInfo(
                host="srv01",
                name="Microsoft Windows Server 2022 Standard",
                version="10.0.20348",
                build_number="20348",
                architecture="64-bit",
            )
        ],
        unreachable=["srv02"],
    )


def test_collection_command_prints_table(monkeypatch, capsys):
    monkeypatch.setattr(os_monitor, "get_os_info", lambda targets=None: _os_result())

    assert cli.main(["os", "srv01", "srv02"]) == 0

    captured = capsys.readouterr()
    header, separator, row = captured.out.splitlines()
    assert header.split() == ["host", "name", "version", "build_number", "architecture"]
    assert set(separator.replace(" ", "")) == {"-"}
    assert row.startswith("srv01")
    assert "20348" in row
    assert "srv02 is not reachable" in captured.err


def test_collection_command_json(monkeypatch, capsys):
    monkeypatch.setattr(os_monitor, "get_os_info", lambda targets=None: _os_result())

    assert cli.main(["os", "srv01", "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["records"][0]["build_number"] == "20348"
    assert data["unreachable"] == ["srv02"]


def test_collection_command_fails_when_nothing_collected(monkeypatch, capsys):
    monkeypatch.setattr(
        os_monitor,
        "get_os_info",
        lambda targets=None: CollectionResult(unreachable=["srv01"]),
    )

    assert cli.main(["os", "srv01"]) == 1


def test_render_table_formats_cells():
    table = cli.render_table(_os_result().records, ["host", "build_number"])

    assert table.splitlines()[2] == "srv01  20348"
