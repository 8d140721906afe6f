"""Module entrypoint for `python -m spector`.

Delegates to the CLI implementation.
"""

from .cli import main


if __name__ == "__main__":
    main()
