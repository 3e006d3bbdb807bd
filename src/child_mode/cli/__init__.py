"""
Child Mode CLI

Command-line interface over the restriction store.
"""

from .main import cli

__all__ = ["cli"]


def main() -> None:
    """Main CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
