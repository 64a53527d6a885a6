from cli._runner import run

SOURCES = ["transit_fraud", "cli", "tests"]


def main() -> None:
    """Run linting."""
    import sys

    sys.exit(run(["uv", "run", "ruff", "check", *SOURCES]))


def format() -> None:
    """Run code formatting."""
    import sys

    sys.exit(run(["uv", "run", "ruff", "format", *SOURCES]))
