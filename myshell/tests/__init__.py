"""MyShell test suite."""
