"""Entrypoint for `python -m hostfilter.blacklist`."""

from .cli import main

if __name__ == "__main__":
    main()
