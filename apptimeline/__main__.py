"""
Allow running the CLI via ``python -m apptimeline``.
"""

from .cli.app import app

if __name__ == "__main__":
    app()
