from __future__ import annotations

import json
from pathlib import Path

import pytest

from lvmcollector.main import main

EVENTS = [
    {"type": "key_down", "qpc_ts": 10, "key": "W"},
    {"type": "mouse_move", "qpc_ts": 30, "dx": 4, "dy": 2},
    {"type": "key_up", "qpc_ts": 250, "key": "W"},
]


def _config(tmp_path: Path, dataset_root: Path) -> Path:
    path = tmp_path / "collector.yml"
    path.write_text(
        f"dataset_root: {dataset_root.as_posix()}\n"
        "video:\n"
        "  enabled: false\n"
        "  record_resolution: [2, 1]\n",
        encoding="utf-8",
    )
    return path


def test_dry_run_writes_session(tmp_path, dataset_root, write_jsonl, capsys) -> None:
    events = write_jsonl("events.jsonl", EVENTS)
    thoughts = write_jsonl("thoughts.jsonl", [{"qpc_ts": 210, "text": "let go"}])
    frame = tmp_path / "frame.raw"
    frame.write_bytes(b"\x00" * 8)

    with pytest.raises(SystemExit) as exc_info:
        main(
            [
                "--config",
                str(_config(tmp_path, dataset_root)),
                "dry-run",
                "--events",
                str(events),
                "--thoughts",
                str(thoughts),
                "--frame",
                str(frame),
                "--steps",
                "2",
                "--session-name",
                "cli_run001",
                "--long-goal",
                "win",
            ]
        )
    assert exc_info.value.code == 0

    root = dataset_root / "sessions" / "cli_run001"
    assert capsys.readouterr().out.strip() == str(root)
    assert (root / "frame.bgra").read_bytes() == b"\x00" * 8
    assert len((root / "actions.jsonl").read_text().splitlines()) == 2
    assert json.loads((root / "meta.json").read_text())["long_goal"] == "win"
    assert (root / "thoughts.txt").read_text().splitlines()[1] == (
        "<|thought_start|>let go <|thought_end|>"
    )


def test_malformed_log_exits_with_error(tmp_path, dataset_root, capsys) -> None:
    events = tmp_path / "bad.jsonl"
    events.write_text('{"type": "key_down", "qpc_ts": 1}\n', encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        main(
            [
                "--config",
                str(_config(tmp_path, dataset_root)),
                "dry-run",
                "--events",
                str(events),
                "--steps",
                "1",
            ]
        )
    assert exc_info.value.code == 2
    assert "bad.jsonl:1" in capsys.readouterr().err
    assert not (dataset_root / "sessions").exists()


def test_package_command(tmp_path, dataset_root, capsys) -> None:
    session = dataset_root / "sessions" / "one"
    session.mkdir(parents=True)
    (session / "meta.json").write_text("{}", encoding="utf-8")
    output = tmp_path / "bundle.zip"

    with pytest.raises(SystemExit) as exc_info:
        main(["package", "--dataset-root", str(dataset_root), "--output", str(output)])
    assert exc_info.value.code == 0
    assert capsys.readouterr().out.strip() == str(output)
    assert output.exists()


def test_print_config(tmp_path, dataset_root, capsys) -> None:
    main(["--config", str(_config(tmp_path, dataset_root)), "print-config"])
    printed = json.loads(capsys.readouterr().out)
    assert printed["video"]["enabled"] is False
    assert printed["timing"]["step_ms"] == 200


def test_steps_must_be_positive(tmp_path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["dry-run", "--events", str(tmp_path / "x.jsonl"), "--steps", "0"])
    assert exc_info.value.code == 2


def test_unreadable_frame_image_exits_with_error(
    tmp_path, dataset_root, write_jsonl, capsys
) -> None:
    events = write_jsonl("events.jsonl", EVENTS)
    frame = tmp_path / "frame.png"
    frame.write_bytes(b"not an image")

    with pytest.raises(SystemExit) as exc_info:
        main(
            [
                "--config",
                str(_config(tmp_path, dataset_root)),
                "dry-run",
                "--events",
                str(events),
                "--frame",
                str(frame),
                "--steps",
                "1",
            ]
        )
    assert exc_info.value.code == 2
    assert "dry-run failed" in capsys.readouterr().err
    assert not (dataset_root / "sessions").exists()


def test_invalid_utf8_event_log_exits_with_error(tmp_path, dataset_root, capsys) -> None:
    events = tmp_path / "events.jsonl"
    events.write_bytes(b'{"qpc_ts": 1, "type": "key_down", "key": "\xff"}\n')

    with pytest.raises(SystemExit) as exc_info:
        main(
            [
                "--config",
                str(_config(tmp_path, dataset_root)),
                "dry-run",
                "--events",
                str(events),
                "--steps",
                "1",
            ]
        )
    assert exc_info.value.code == 2
    assert "events.jsonl:1" in capsys.readouterr().err
