"""
Entry point for running wifictl as a module: python -m wifictl
"""

from wifictl.cli.commands import app

if __name__ == "__main__":
    app()
