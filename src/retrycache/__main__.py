"""Allow ``python -m retrycache``."""

from retrycache.cli.app import app

if __name__ == "__main__":
    app()
