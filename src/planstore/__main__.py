"""Module entrypoint for ``python -m planstore``."""

from planstore.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
