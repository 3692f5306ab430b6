#!/usr/bin/env python3
"""
Main entry point for the SweetSpot CLI application.
"""

from sweetspot.cli import app

if __name__ == "__main__":
    app()
