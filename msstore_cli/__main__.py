"""Allow running as ``python -m msstore_cli``."""

from msstore_cli.cli import app

app(prog_name="msstore")
