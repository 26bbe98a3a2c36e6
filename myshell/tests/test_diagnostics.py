"""
Tests for the diagnostics layer and the logger.
"""

import io
import logging
import os
import re
import unittest
from unittest import mock

from myshell.core.config_loader import LoggingConfig
from myshell.core.diagnostics import Diagnostics
from myshell.core.state import create_context, establish_working_directory
from myshell.exceptions import ErrorKind, PathNotFoundError
from myshell.logger import LogFormatter, Logger, LogLevel, get_logger, parse_level
from myshell.tests.support import ShellTestCase, error_output, make_context, quiet_config


LOG_LINE = re.compile(r'^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] ERROR: ')


class TestLogger(ShellTestCase):
    """Test the logging system."""

    def test_logger_per_subsystem(self):
        """Same subsystem gives the same instance."""
        self.assertIs(Logger('parser'), Logger('parser'))
        self.assertIs(get_logger('parser'), Logger('parser'))
        self.assertIsNot(Logger('parser'), Logger('external'))
        self.assertEqual(Logger('parser').subsystem, 'parser')

    def test_parse_level(self):
        self.assertEqual(parse_level("warning"), LogLevel.WARNING)
        self.assertEqual(parse_level("FATAL"), LogLevel.FATAL)
        with self.assertRaises(ValueError):
            parse_level("chatty")

    def test_formatter(self):
        record = logging.LogRecord(
            'myshell.test', logging.WARNING, __file__, 1, "Dropping excess tokens", None, None
        )
        record.context = {'dropped': 3}

        line = LogFormatter().format(record)

        self.assertRegex(line, r'^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] WARNING: ')
        self.assertTrue(line.endswith("Dropping excess tokens {dropped=3}"))

    def test_initialize_and_reset(self):
        log_file = os.path.join(self.make_tempdir(), 'logs', 'shell.log')

        Logger.initialize(level=LogLevel.INFO, log_file=log_file)
        self.assertTrue(Logger.is_initialized())
        get_logger('test').info("hello log")
        get_logger('test').debug("below level")
        Logger.reset()

        self.assertFalse(Logger.is_initialized())
        with open(log_file, encoding='utf-8') as f:
            content = f.read()
        self.assertIn("INFO: hello log", content)
        self.assertNotIn("below level", content)


class TestDiagnostics(ShellTestCase):
    """Test error reporting."""

    def make_diagnostics(self, **logging_options) -> Diagnostics:
        options = {'enabled': False, 'log_file': ""}
        options.update(logging_options)
        return Diagnostics(LoggingConfig(**options), stream=io.StringIO())

    def test_report_writes_one_line(self):
        diag = self.make_diagnostics()

        diag.report(ErrorKind.INVALID_ARGUMENT, "parse_command: empty input")

        self.assertEqual(
            diag.stream.getvalue(),
            "Error in parse_command: empty input: Invalid argument\n"
        )
        self.assertEqual(diag.last_error, ErrorKind.INVALID_ARGUMENT)
        self.assertEqual(diag.error_count, 1)

    def test_report_without_context(self):
        diag = self.make_diagnostics()

        diag.report(ErrorKind.PARSING)

        self.assertEqual(diag.stream.getvalue(), "Error: Command parsing error\n")

    def test_none_is_ignored(self):
        diag = self.make_diagnostics()

        diag.report(ErrorKind.NONE, "nothing")

        self.assertEqual(diag.stream.getvalue(), "")
        self.assertEqual(diag.error_count, 0)
        self.assertEqual(diag.last_error, ErrorKind.NONE)

    def test_system_call_appends_errno(self):
        diag = self.make_diagnostics()

        diag.report(ErrorKind.SYSTEM_CALL, "shell_init", OSError(2, "No such file or directory"))

        self.assertEqual(
            diag.stream.getvalue(),
            "Error in shell_init: System call failed (errno: 2 - No such file or directory)\n"
        )

    def test_errno_only_for_system_calls(self):
        diag = self.make_diagnostics()

        diag.report(ErrorKind.FILE_NOT_FOUND, "cat: x", OSError(2, "No such file or directory"))

        self.assertNotIn("errno", diag.stream.getvalue())

    def test_report_exception(self):
        diag = self.make_diagnostics()

        diag.report_exception(PathNotFoundError("missing", context="builtin_cd: /nope"))

        self.assertEqual(diag.last_error, ErrorKind.FILE_NOT_FOUND)
        self.assertIn("Error in builtin_cd: /nope: File or directory not found", diag.stream.getvalue())

    def test_clear_and_reset(self):
        diag = self.make_diagnostics()
        diag.report(ErrorKind.PARSING, "x")

        diag.clear_last_error()
        diag.reset_error_count()

        self.assertEqual(diag.last_error, ErrorKind.NONE)
        self.assertEqual(diag.error_count, 0)

    def test_warn(self):
        diag = self.make_diagnostics()

        diag.warn("Memory leaks detected during cleanup")

        self.assertEqual(diag.stream.getvalue(), "Warning: Memory leaks detected during cleanup\n")
        self.assertEqual(diag.error_count, 0)

    def test_log_file_line_format(self):
        """Failures are appended to the log with a timestamp and level."""
        log_file = os.path.join(self.make_tempdir(), 'myshell.log')
        diag = self.make_diagnostics(enabled=True, log_file=log_file)

        diag.open_log()
        diag.report(ErrorKind.COMMAND_NOT_FOUND, "frobnicate")
        diag.close_log()

        with open(log_file, encoding='utf-8') as f:
            lines = f.read().splitlines()

        self.assertEqual(len(lines), 1)
        self.assertRegex(lines[0], LOG_LINE)
        self.assertTrue(lines[0].endswith("Error in frobnicate: Command not found"))
        self.assertEqual(diag.stream.getvalue().count("\n"), 1)

    def test_log_is_appended(self):
        log_file = os.path.join(self.make_tempdir(), 'myshell.log')
        self.write_file(log_file, "earlier line\n")
        diag = self.make_diagnostics(enabled=True, log_file=log_file)

        diag.open_log()
        diag.report(ErrorKind.PARSING, "x")
        diag.close_log()

        with open(log_file, encoding='utf-8') as f:
            lines = f.read().splitlines()
        self.assertEqual(lines[0], "earlier line")
        self.assertEqual(len(lines), 2)

    def test_unopenable_log_disables_logging(self):
        blocker = self.write_file(os.path.join(self.make_tempdir(), 'blocker'))
        diag = self.make_diagnostics(enabled=True, log_file=os.path.join(blocker, 'sub', 'x.log'))

        diag.open_log()

        self.assertFalse(diag.logging_enabled)
        self.assertEqual(diag.last_error, ErrorKind.IO_OPERATION)

    def test_unknown_level_disables_logging(self):
        diag = self.make_diagnostics(enabled=True, level="verbose")

        diag.open_log()

        self.assertFalse(diag.logging_enabled)
        self.assertFalse(Logger.is_initialized())
        self.assertEqual(diag.last_error, ErrorKind.INVALID_ARGUMENT)
        self.assertIn("verbose", diag.stream.getvalue())

    def test_fatal_is_logged_only(self):
        log_file = os.path.join(self.make_tempdir(), 'myshell.log')
        diag = self.make_diagnostics(enabled=True, log_file=log_file)

        diag.open_log()
        diag.fatal("shell_init: cannot record the working directory")
        diag.close_log()

        with open(log_file, encoding='utf-8') as f:
            content = f.read()
        self.assertIn("FATAL: shell_init: cannot record the working directory", content)
        self.assertEqual(diag.stream.getvalue(), "")
        self.assertEqual(diag.error_count, 0)


class TestWorkingDirectory(ShellTestCase):
    """Test recording the initial working directory."""

    def make_logged_context(self):
        config = quiet_config()
        config.logging.enabled = True
        config.logging.log_file = os.path.join(self.make_tempdir(), 'myshell.log')
        ctx = create_context(config, stream=io.StringIO())
        ctx.diagnostics.open_log()
        return ctx

    def read_log(self, ctx) -> str:
        ctx.diagnostics.close_log()
        with open(ctx.diagnostics.log_path, encoding='utf-8') as f:
            return f.read()

    def test_records_current_directory(self):
        tmp = self.make_tempdir()
        os.chdir(tmp)
        ctx = make_context()

        self.assertEqual(establish_working_directory(ctx), tmp)
        self.assertEqual(ctx.state.current_dir, tmp)

    def test_falls_back_when_getcwd_fails(self):
        tmp = self.make_tempdir()
        ctx = make_context()
        ctx.config.shell.fallback_dir = tmp

        with mock.patch('os.getcwd', side_effect=OSError(2, "No such file or directory")):
            cwd = establish_working_directory(ctx)

        self.assertEqual(cwd, tmp)
        self.assertEqual(ctx.state.current_dir, tmp)
        self.assertEqual(ctx.diagnostics.last_error, ErrorKind.SYSTEM_CALL)

    def test_no_usable_directory_is_fatal(self):
        ctx = self.make_logged_context()
        missing = OSError(2, "No such file or directory")

        with mock.patch('os.getcwd', side_effect=missing), \
                mock.patch('os.chdir', side_effect=missing):
            with self.assertRaises(SystemExit) as cm:
                establish_working_directory(ctx)

        self.assertEqual(cm.exception.code, 1)
        self.assertIn("failed to change to default directory", error_output(ctx))
        self.assertIn("FATAL: shell_init: no usable working directory", self.read_log(ctx))

    def test_allocation_failure_is_fatal(self):
        ctx = self.make_logged_context()
        ctx.config.limits.max_allocation_size = 1

        with self.assertRaises(SystemExit):
            establish_working_directory(ctx)

        self.assertEqual(ctx.diagnostics.last_error, ErrorKind.MEMORY_ALLOCATION)
        self.assertIsNone(ctx.state.current_dir)
        self.assertIn("FATAL: shell_init: cannot record the working directory", self.read_log(ctx))


if __name__ == '__main__':
    unittest.main()
