"""``python -m perfdash_app``: the live view unless a subcommand is given."""

from __future__ import annotations

import sys

from perfdash_app.cli import main as cli_main

DEFAULT_COMMAND = "run"
_HELP_FLAGS = ("-h", "--help")


def resolve_argv(args: list[str]) -> list[str]:
    """Prefix the default command when launched bare or with only its options."""
    if not args or (args[0].startswith("-") and args[0] not in _HELP_FLAGS):
        return [DEFAULT_COMMAND, *args]
    return list(args)


def main(argv: list[str] | None = None) -> int:
    return int(cli_main(resolve_argv(sys.argv[1:] if argv is None else argv)))


if __name__ == "__main__":
    raise SystemExit(main())
