#!/usr/bin/env python3

"""
Generate SCRAM-SHA-256 password verifiers.

The password is read from the terminal without echo, or as a single line from
standard input with --stdin. Output value can be safely placed into
PostgreSQL's `pg_authid` catalog (via `ALTER USER ... PASSWORD`) or into
PgBouncer's `userlist.txt`. When an existing verifier is given, the password is
checked against it instead.
"""

import sys
from argparse import (
    ArgumentDefaultsHelpFormatter,
    ArgumentParser,
    SUPPRESS,
    ArgumentTypeError,
    Namespace,
    RawDescriptionHelpFormatter,
)
from collections.abc import Sequence

from . import __author__, __email__, __prog__, __status__, __version__
from .errors import ScramError
from .prompt import prompt_password, read_password_line
from .verifier import ITERATIONS, MAX_ITERATIONS, scram_sha256, verify_scram_sha256

EPILOG = f"""\
examples:
  {__prog__}                             prompt for password
  echo 'mypass' | {__prog__} --stdin     read password from stdin
  {__prog__} -i 8192                     custom iterations
  {__prog__} 'SCRAM-SHA-256$4096:...'    verify password against verifier

single-dash long options (-stdin, -iterations, -help) are accepted as aliases.

Written by {__author__} <{__email__}>."""


class _HelpFormatter(ArgumentDefaultsHelpFormatter, RawDescriptionHelpFormatter):
    """Show defaults while keeping description and epilog layout."""


def parse_iterations(s: str) -> int:
    """Parse PBKDF2 iterations count value."""

    try:
        i = int(s)

    except ValueError:
        raise ArgumentTypeError(f"invalid iterations count: {s!r}") from None

    if i < 1:
        msg = "PBKDF2 iterations count must be positive integer"
        raise ArgumentTypeError(msg)

    if i > MAX_ITERATIONS:
        msg = f"PBKDF2 iterations count must not exceed {MAX_ITERATIONS}"
        raise ArgumentTypeError(msg)

    return i


def _parse_cli_args(argv: Sequence[str] | None = None) -> Namespace:
    """Parse and validate command-line arguments."""

    cli_parser = ArgumentParser(
        prog=__prog__,
        description=__doc__,
        epilog=EPILOG,
        formatter_class=lambda prog: _HelpFormatter(
            prog=prog,
            max_help_position=120,
        ),
    )

    cli_parser.add_argument(
        "--version",
        action="version",
        version=f"{__prog__} v{__version__} ({__status__})",
    )

    cli_parser.add_argument("-help", action="help", help=SUPPRESS)

    cli_parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="exit quietly",
    )

    cli_parser.add_argument(
        "--stdin",
        "-stdin",
        action="store_true",
        help="read password as a single line from stdin instead of prompting. "
        "Trailing CR/LF characters are stripped.",
    )

    cli_parser.add_argument(
        "-c",
        "--confirm",
        action="store_true",
        help="ask for the password twice when prompting",
    )

    cli_parser.add_argument(
        "verifier",
        nargs="?",
        help="specify existing SCRAM verifier. When provided, verification is performed "
        "and --iterations is ignored, since the verifier carries its own count.",
    )

    cli_parser.add_argument(
        "-i",
        "--iterations",
        "-iterations",
        type=parse_iterations,
        default=ITERATIONS,
        help=f"specify PBKDF2 iteration count. PostgreSQL uses {ITERATIONS}. "
        "Increasing this value improves brute-force resistance but slows down "
        "authentication.",
    )

    return cli_parser.parse_args(argv)


def _read_password(args: Namespace) -> bytes | str:
    """Obtain password from stdin or the terminal."""

    if args.stdin:
        return read_password_line(sys.stdin.buffer)

    return prompt_password(confirm=args.confirm)


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI execution entrypoint."""

    args = _parse_cli_args(argv)

    if args.verifier is None and args.iterations < ITERATIONS and not args.quiet:
        print(
            f"{__prog__}: warning: PBKDF2 iterations count below {ITERATIONS} is discouraged",
            file=sys.stderr,
        )

    try:
        password = _read_password(args)

        if args.verifier is not None:
            if not verify_scram_sha256(password, args.verifier):
                if not args.quiet:
                    print("failed", file=sys.stderr)

                return 1

            if not args.quiet:
                print("ok")

            return 0

        print(
            scram_sha256(
                password=password,
                iterations=args.iterations,
            )
        )

    except EOFError:
        print(f"{__prog__}: error: no password entered", file=sys.stderr)
        return 1

    except (ScramError, OSError) as e:
        print(f"{__prog__}: error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
