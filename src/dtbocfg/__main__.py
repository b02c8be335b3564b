"""Allow ``python -m dtbocfg``."""

from dtbocfg.cli import cli

if __name__ == "__main__":
    cli()
