"""
Entry point.

Run: python -m vitrina [--storage PATH] [--log-level LEVEL]
"""

from vitrina.cli import main


if __name__ == "__main__":
    main()
