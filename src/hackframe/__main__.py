"""Module entrypoint for ``python -m hackframe``."""

from hackframe.repl import main

if __name__ == "__main__":  # pragma: no cover
    main()
