"""Allow ``python -m empress``."""

from empress.cli.main import run

if __name__ == "__main__":
    run()
