from cli._runner import run


def main() -> None:
    """Run tests."""
    import sys

    sys.exit(run(["uv", "run", "pytest"]))


def test_v() -> None:
    """Run tests with verbose output."""
    import sys

    sys.exit(run(["uv", "run", "pytest", "-v"]))


def test_unit() -> None:
    """Run unit tests only."""
    import sys

    sys.exit(run(["uv", "run", "pytest", "tests/unit"]))
