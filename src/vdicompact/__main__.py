"""Allow running as ``python -m vdicompact``."""

from .cli.main import app

if __name__ == "__main__":
    app()
