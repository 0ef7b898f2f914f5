"""Allow running stagebuild as ``python -m stagebuild``."""

from stagebuild.cli import main

if __name__ == "__main__":
    main()
