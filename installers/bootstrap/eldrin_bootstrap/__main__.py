from __future__ import annotations

import sys

try:
    # Normal package import path.
    from .cli import main as _cli_main
except ImportError:
    # Script entrypoint path (e.g. ``python eldrin_bootstrap/__main__.py``).
    from eldrin_bootstrap.cli import main as _cli_main


def _needs_default_command(args: list[str]) -> bool:
    if not args:
        return True
    return args[0].startswith("-") and args[0] not in ("-h", "--help")


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if _needs_default_command(args):
        # Bare invocation from package setup means "install".
        return int(_cli_main(["install", *args]))
    return int(_cli_main(args))


if __name__ == "__main__":
    raise SystemExit(main())
