"""Support `python -m repodesk`."""

from repodesk.cli import cli

if __name__ == "__main__":
    cli()
