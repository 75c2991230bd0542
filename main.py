"""
Console entrypoint.
Imports the typer app from cli.py so `python main.py ...` and the `fileops`
script share one command set.
"""

from cli import app

__all__ = ["app"]

if __name__ == "__main__":
    app()
