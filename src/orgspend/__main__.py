"""Entry point for ``python -m orgspend``."""

from orgspend.cli import app

app()
