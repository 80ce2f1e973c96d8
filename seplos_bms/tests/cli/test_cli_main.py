from __future__ import annotations

import json
from pathlib import Path

import pytest

import seplos_bms.cli.commands as commands_mod
from seplos_bms.cli.main import main
from seplos_bms.transport.errors import TransportOpenError


@pytest.fixture(autouse=True)
def _no_log_handlers(monkeypatch):
    monkeypatch.setattr("seplos_bms.cli.main.configure_logging", lambda *a, **k: None)


def test_layouts_lists_both_versions(capsys):
    assert main(["layouts"]) == 0
    out = capsys.readouterr().out
    assert "v2.1 (0x21) total_voltage_scale=0.01" in out
    assert "v2.5 (0x25) total_voltage_scale=0.001" in out


def test_sensors_lists_catalogue(capsys):
    assert main(["sensors"]) == 0
    out = capsys.readouterr().out
    assert "cell_voltage_16" in out
    assert "[off]" not in out


def test_sensors_with_config_marks_registration(tmp_path: Path, capsys):
    cfg = tmp_path / "c.yml"
    cfg.write_text("sensors: [current]\n", encoding="utf-8")
    assert main(["sensors", "--config", str(cfg)]) == 0
    assert "[off]" in capsys.readouterr().out


def test_decode_hex_json(make_frame, capsys):
    frame = make_frame(0x21, cells_raw=[0x0CE4, 0x0CEE, 0x0CDF], current_raw=-250, total_voltage_raw=5200)
    assert main(["decode", "--json", frame.hex()]) == 0

    d = json.loads(capsys.readouterr().out.strip())
    assert d["min_voltage_cell"] == 3
    assert d["discharging_power"] == pytest.approx(130.0)


def test_decode_text_output(make_frame, capsys):
    assert main(["decode", make_frame(0x25, total_voltage_raw=0x1388).hex(" ")]) == 0
    out = capsys.readouterr().out
    assert "Frame 0x25" in out
    assert "Total Voltage: 5.00 V" in out


def test_decode_override(make_frame, capsys):
    frame = make_frame(0x21, cells_raw=[3300, 3300, 3300])
    assert main(["decode", "--json", "--override", "2", frame.hex()]) == 0
    d = json.loads(capsys.readouterr().out.strip())
    assert "cell_voltage_3" not in d


def test_decode_ascii_file(make_frame, link_frame, tmp_path: Path, capsys):
    cap = tmp_path / "capture.txt"
    cap.write_text(
        "# capture\n\n" + link_frame(make_frame(0x21, current_raw=100)).decode("ascii").strip() + "\n",
        encoding="utf-8",
    )
    assert main(["decode", "--ascii", "--json", "--file", str(cap)]) == 0
    d = json.loads(capsys.readouterr().out.strip())
    assert d["current"] == pytest.approx(1.0)


def test_decode_rejected_returns_1(capsys):
    assert main(["decode", "2100", "20" + "00" * 10, "zz"]) == 1
    out = capsys.readouterr().out.splitlines()
    assert out[0].startswith("REJECTED reason=too_short")
    assert out[1].startswith("REJECTED reason=unknown_version")
    assert out[2].startswith("INVALID hex")


def test_decode_without_frames_is_config_error(capsys):
    assert main(["decode"]) == 1
    assert "ERROR: No frames given" in capsys.readouterr().out


def test_bad_log_level_returns_2(capsys):
    assert main(["--log-level", "LOUD", "layouts"]) == 2


def test_listen_connect_error(tmp_path: Path, monkeypatch, capsys):
    cfg = tmp_path / "c.yml"
    cfg.write_text("serial:\n  port: /dev/nope\n", encoding="utf-8")

    def fail_open(self):
        raise TransportOpenError("no such port")

    monkeypatch.setattr(commands_mod.UARTTransport, "open", fail_open)

    assert main(["listen", "--config", str(cfg)]) == 1
    out = capsys.readouterr().out
    assert "ERROR: Cannot open /dev/nope" in out
    assert "Hint:" in out


def test_listen_without_port_is_config_error(tmp_path: Path, capsys):
    cfg = tmp_path / "c.yml"
    cfg.write_text("cell_count_override: 4\n", encoding="utf-8")
    assert main(["listen", "--config", str(cfg)]) == 1
    assert "No serial port configured" in capsys.readouterr().out


def test_listen_decodes_frames(make_frame, link_frame, tmp_path: Path, monkeypatch, capsys):
    cfg = tmp_path / "c.yml"
    cfg.write_text("sensors: [current]\nserial:\n  port: COM1\n", encoding="utf-8")

    frames = [link_frame(make_frame(0x21, current_raw=-250))]

    monkeypatch.setattr(commands_mod.UARTTransport, "open", lambda self: None)
    monkeypatch.setattr(commands_mod.UARTTransport, "close", lambda self: None)
    monkeypatch.setattr(
        commands_mod.UARTTransport, "read_until", lambda self, term, n: frames.pop(0) if frames else b""
    )

    assert main(["listen", "--config", str(cfg), "--max-frames", "1"]) == 0
    out = capsys.readouterr().out
    assert "Current: -2.50 A" in out
    assert "Total Voltage" not in out
    assert "Frames: decoded=1 rejected=0 link_errors=0" in out
