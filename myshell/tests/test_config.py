"""
Tests for configuration loading and the command-line entry point.
"""

import io
import json
import os
import unittest
from contextlib import redirect_stdout
from unittest import mock

from myshell.__main__ import main
from myshell.core.config_loader import Config, ConfigLoader, ConfigValidationError
from myshell.tests.support import ShellTestCase


class TestConfig(ShellTestCase):
    """Test configuration loading."""

    def write_config(self, data) -> str:
        path = os.path.join(self.make_tempdir(), 'myshell.json')
        with open(path, 'w', encoding='utf-8') as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)
        return path

    def test_defaults(self):
        config = Config()

        self.assertEqual(config.limits.max_input_size, 1024)
        self.assertEqual(config.limits.max_args, 64)
        self.assertEqual(config.limits.max_path_size, 1024)
        self.assertEqual(config.limits.max_allocation_size, 10 * 1024 * 1024)
        self.assertEqual(config.logging.log_file, "~/.myshell.log")
        self.assertFalse(config.shell.truncate_excess_tokens)

    def test_partial_file_keeps_defaults(self):
        path = self.write_config({
            'limits': {'max_args': 8},
            'logging': {'enabled': False},
        })

        config = ConfigLoader().load(path)

        self.assertEqual(config.limits.max_args, 8)
        self.assertEqual(config.limits.max_input_size, 1024)
        self.assertFalse(config.logging.enabled)
        self.assertEqual(config.logging.level, "INFO")

    def test_missing_file(self):
        with self.assertRaises(ConfigValidationError):
            ConfigLoader().load('/nonexistent/myshell.json')

    def test_invalid_files(self):
        bad = [
            "{not json",
            [1, 2, 3],
            {'limits': 5},
            {'limits': {'max_tokens': 3}},
            {'limits': {'max_args': "64"}},
            {'logging': {'enabled': 1}},
            {'limits': {'max_input_size': 0}},
            {'logging': {'level': 'verbose'}},
        ]
        for data in bad:
            with self.subTest(data=data):
                with self.assertRaises(ConfigValidationError):
                    ConfigLoader().load(self.write_config(data))

    def test_to_dict(self):
        loader = ConfigLoader()
        data = loader.to_dict()

        self.assertEqual(set(data), {'limits', 'logging', 'memory', 'shell'})
        self.assertEqual(data['limits']['max_args'], 64)


class TestMain(ShellTestCase):
    """Test the command-line entry point."""

    def test_command_exit_status(self):
        out = io.StringIO()
        with redirect_stdout(out):
            status = main(['--no-log', '-c', 'exit 3'])

        self.assertEqual(status, 3)

    def test_command_runs_builtin(self):
        out = io.StringIO()
        with redirect_stdout(out):
            status = main(['--no-log', '-c', 'echo from-cli'])

        self.assertEqual(status, 0)
        self.assertIn("from-cli\n", out.getvalue())

    def test_script_file(self):
        script = os.path.join(self.make_tempdir(), 'script.msh')
        self.write_file(script, "# comment\necho one\nexit 4\necho two\n")

        out = io.StringIO()
        with redirect_stdout(out):
            status = main(['--no-log', script])

        self.assertEqual(status, 4)
        self.assertIn("one\n", out.getvalue())
        self.assertNotIn("two", out.getvalue())

    def test_script_file_with_undecodable_bytes(self):
        script = os.path.join(self.make_tempdir(), 'latin1.msh')
        with open(script, 'wb') as f:
            f.write(b'echo caf\xe9\n')

        out = io.StringIO()
        with redirect_stdout(out):
            status = main(['--no-log', script])

        self.assertEqual(status, 0)
        self.assertIn("caf\udce9\n", out.getvalue())

    def test_unknown_log_level(self):
        path = os.path.join(self.make_tempdir(), 'myshell.json')
        with open(path, 'w', encoding='utf-8') as f:
            json.dump({'logging': {'level': 'verbose'}}, f)

        err = io.StringIO()
        with mock.patch('sys.stderr', err):
            status = main(['--config', path])

        self.assertEqual(status, 2)
        self.assertIn("logging.level", err.getvalue())

    def test_dump_config(self):
        out = io.StringIO()
        with redirect_stdout(out):
            status = main(['--no-log', '--dump-config'])

        self.assertEqual(status, 0)
        data = json.loads(out.getvalue())
        self.assertFalse(data['logging']['enabled'])

    def test_bad_config_path(self):
        err = io.StringIO()
        with mock.patch('sys.stderr', err):
            status = main(['--config', '/nonexistent/myshell.json'])

        self.assertEqual(status, 2)
        self.assertIn("Configuration file not found", err.getvalue())


if __name__ == '__main__':
    unittest.main()
