"""
Entry point for running hookbot as a module: python -m hookbot
"""

from hookbot.cli.commands import app

if __name__ == "__main__":
    app()
