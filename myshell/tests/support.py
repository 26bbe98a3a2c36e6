"""
Shared helpers for the MyShell tests.
"""

import io
import os
import tempfile
import unittest
from unittest import mock

from myshell.core.config_loader import Config
from myshell.core.state import ShellContext, create_context
from myshell.logger import Logger


def quiet_config(**limits) -> Config:
    """Default configuration with the log file switched off."""
    config = Config()
    config.logging.enabled = False
    config.logging.log_file = ""
    for name, value in limits.items():
        setattr(config.limits, name, value)
    return config


def make_context(config: Config = None) -> ShellContext:
    """Context whose diagnostics write to an in-memory stream."""
    return create_context(config or quiet_config(), stream=io.StringIO())


def error_output(ctx: ShellContext) -> str:
    return ctx.diagnostics.stream.getvalue()


class ShellTestCase(unittest.TestCase):
    """
    Base test case isolating os.environ, the working directory and the
    logging handlers.
    """

    def setUp(self):
        patcher = mock.patch.dict(os.environ)
        patcher.start()
        self.addCleanup(patcher.stop)

        original_cwd = os.getcwd()
        self.addCleanup(os.chdir, original_cwd)
        self.addCleanup(Logger.reset)

    def make_tempdir(self) -> str:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        return os.path.realpath(tmp.name)

    def write_file(self, path: str, content: str = "", mode: int = None) -> str:
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        if mode is not None:
            os.chmod(path, mode)
        return path
