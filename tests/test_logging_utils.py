import sys

import pytest

from lvmcollector import logging_utils


def test_default_log_dir_respects_xdg_state_home(monkeypatch, tmp_path):
    if sys.platform == "win32":
        pytest.skip("XDG state paths apply to non-Windows platforms")

    state_home = tmp_path / "state"
    monkeypatch.setenv("XDG_STATE_HOME", str(state_home))

    assert logging_utils.default_log_dir() == state_home / "lvmcollector" / "logs"


def test_configure_logging_skips_file_logging_on_error(monkeypatch, tmp_path):
    def _raise(*_args, **_kwargs):
        raise PermissionError("blocked")

    monkeypatch.setattr(logging_utils.Path, "mkdir", _raise)

    # Should not raise even if the log directory cannot be created.
    logging_utils.configure_logging(log_dir=tmp_path / "logs")


def test_file_sink_receives_component_messages(tmp_path):
    log_dir = tmp_path / "logs"
    logging_utils.configure_logging(log_dir=log_dir, level="DEBUG")
    log = logging_utils.get_logger("session.windowing")
    log.info("Dropped {} events", 3)
    logging_utils.logger.complete()

    content = (log_dir / "lvmcollector.log").read_text(encoding="utf-8")
    assert "Dropped 3 events" in content
    assert "session.windowing" in content


def test_console_sink_writes_to_stderr(capsys):
    logging_utils.configure_logging(log_dir=None, level="INFO")
    logging_utils.get_logger("test").info("hello collector")
    captured = capsys.readouterr()
    assert "hello collector" in captured.err
    assert captured.out == ""


def test_file_sink_defaults_to_state_directory(monkeypatch, tmp_path):
    state_home = tmp_path / "xdg"
    monkeypatch.setenv("XDG_STATE_HOME", str(state_home))

    logging_utils.configure_logging()
    logging_utils.get_logger("test").info("default sink")
    logging_utils.logger.complete()

    log_file = state_home / "lvmcollector" / "logs" / "lvmcollector.log"
    assert "default sink" in log_file.read_text(encoding="utf-8")
