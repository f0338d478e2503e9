"""Entry point for running as a module."""
from pitchcraft.cli import app

if __name__ == "__main__":
    app()
