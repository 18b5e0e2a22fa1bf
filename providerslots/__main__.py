"""
Convenience entry point for running providerslots directly.

Usage: python -m providerslots [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
