"""Allow ``python -m repovault``."""

from repovault.interfaces.cli.app import run_cli

if __name__ == "__main__":
    run_cli()
