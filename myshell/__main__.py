#!/usr/bin/env python3
"""
MyShell - A Line-Oriented Command Interpreter

This is the main entry point for MyShell.

Modes:
- Interactive read-eval loop (default)
- One command string with -c
- A script file given as a positional argument
"""

import argparse
import json
import sys
from typing import Optional, List

from myshell import __version__
from myshell.core.config_loader import ConfigLoader, ConfigValidationError
from myshell.shell.shell import Shell


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='myshell',
        description='Line-oriented command interpreter.'
    )
    parser.add_argument(
        '-c', dest='command', metavar='COMMAND',
        help='run COMMAND and exit'
    )
    parser.add_argument(
        'script', nargs='?',
        help='script file to run instead of the interactive loop'
    )
    parser.add_argument(
        '--config', metavar='PATH',
        help='JSON configuration file'
    )
    parser.add_argument(
        '--no-log', action='store_true',
        help='disable the log file'
    )
    parser.add_argument(
        '--dump-config', action='store_true',
        help='print the effective configuration as JSON and exit'
    )
    parser.add_argument(
        '--version', action='version', version=f'%(prog)s {__version__}'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for MyShell.

    Returns:
        Exit status of the last command run
    """
    args = build_arg_parser().parse_args(argv)

    loader = ConfigLoader()
    if args.config:
        try:
            config = loader.load(args.config)
        except ConfigValidationError as e:
            print(f"myshell: {e}", file=sys.stderr)
            return 2
    else:
        config = loader.config

    if args.no_log:
        config.logging.enabled = False

    if args.dump_config:
        print(json.dumps(loader.to_dict(), indent=2))
        return 0

    shell = Shell(config=config)
    try:
        if args.command is not None:
            status = shell.run_script(args.command)
        elif args.script:
            status = shell.run_file(args.script)
        else:
            status = shell.run()
    except KeyboardInterrupt:
        print("\n\nInterrupted")
        status = shell.last_exit_status
    finally:
        shell.shutdown()

    return status


if __name__ == '__main__':
    sys.exit(main())
