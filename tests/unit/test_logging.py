"""Unit tests for logging setup helpers."""

from __future__ import annotations

import logging
import logging.handlers

from dpm import __version__, dpm_logging
from dpm.common.config import LoggingConfig


class TestStreamLevel:
    """Tests for stderr verbosity."""

    def test_errors_only_by_default(self) -> None:
        """
        Without flags only errors reach stderr.

        Returns:
            None.
        """
        assert dpm_logging.streamLevel_get(LoggingConfig()) == logging.ERROR

    def test_verbose(self) -> None:
        """
        --verbose shows informational lines.

        Returns:
            None.
        """
        assert dpm_logging.streamLevel_get(LoggingConfig(verbose=True)) == logging.INFO

    def test_debug(self) -> None:
        """
        --debug shows everything.

        Returns:
            None.
        """
        assert dpm_logging.streamLevel_get(LoggingConfig(debug=True, verbose=True)) == logging.DEBUG


class TestHandlers:
    """Tests for sink selection."""

    def test_file_handler(self, tmp_path) -> None:
        """
        A writable log file gets a FileHandler after the stderr handler.

        Returns:
            None.
        """
        log_file = tmp_path / "dpm.log"
        handlers = dpm_logging.handlers_build(LoggingConfig(file=str(log_file)))
        try:
            assert isinstance(handlers[0], logging.StreamHandler)
            assert handlers[0].level == logging.ERROR
            assert isinstance(handlers[1], logging.FileHandler)
            assert handlers[1].baseFilename == str(log_file)
        finally:
            for handler in handlers[1:]:
                handler.close()

    def test_no_file(self) -> None:
        """
        file: null logs to stderr only.

        Returns:
            None.
        """
        handlers = dpm_logging.handlers_build(LoggingConfig(file=None))

        assert len(handlers) == 1

    def test_unopenable_file_warns_and_continues(self, tmp_path, capsys) -> None:
        """
        A log file in a missing directory is reported and skipped.

        Returns:
            None.
        """
        bad_path = tmp_path / "missing" / "dpm.log"

        handlers = dpm_logging.handlers_build(LoggingConfig(file=str(bad_path)))

        assert len(handlers) == 1
        assert "Warning: Failed to open log file" in capsys.readouterr().err

    def test_syslog_replaces_file(self, tmp_path, monkeypatch) -> None:
        """
        With syslog enabled the log file is not opened.

        Returns:
            None.
        """
        created: list = []

        class _FakeSysLogHandler(logging.Handler):
            LOG_USER = logging.handlers.SysLogHandler.LOG_USER

            def __init__(self, address, facility) -> None:
                super().__init__()
                created.append((address, facility))
                self.ident = ""

        monkeypatch.setattr(logging.handlers, "SysLogHandler", _FakeSysLogHandler)
        log_file = tmp_path / "dpm.log"

        handlers = dpm_logging.handlers_build(LoggingConfig(file=str(log_file), syslog=True))

        assert len(handlers) == 2
        assert created == [("/dev/log", logging.handlers.SysLogHandler.LOG_USER)]
        assert handlers[1].ident.startswith("display-priority-manager[")
        assert not log_file.exists()

    def test_syslog_unavailable_warns(self, monkeypatch, capsys) -> None:
        """
        An unreachable syslog socket is reported and skipped.

        Returns:
            None.
        """

        class _BrokenSysLogHandler(logging.Handler):
            LOG_USER = 1

            def __init__(self, address, facility) -> None:
                raise OSError("no such socket")

        monkeypatch.setattr(logging.handlers, "SysLogHandler", _BrokenSysLogHandler)

        handlers = dpm_logging.handlers_build(LoggingConfig(syslog=True))

        assert len(handlers) == 1
        assert "Warning: Failed to open syslog" in capsys.readouterr().err


class TestFormat:
    """Tests for the version-tagged format."""

    def test_version_injected_after_timestamp(self) -> None:
        """
        The version tag follows the timestamp token.

        Returns:
            None.
        """
        result = dpm_logging.logFormatWithVersion_get("[%(asctime)s] %(levelname)s: %(message)s")

        assert result == f"[%(asctime)s [v{__version__}]] %(levelname)s: %(message)s"

    def test_format_without_timestamp_unchanged(self) -> None:
        """
        Formats lacking a timestamp are returned as-is.

        Returns:
            None.
        """
        assert dpm_logging.logFormatWithVersion_get("%(message)s") == "%(message)s"
