"""Allow ``python -m disco``."""

from disco.cli.app import cli

if __name__ == "__main__":
    cli()
