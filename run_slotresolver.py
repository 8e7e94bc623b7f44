#!/usr/bin/env python3
"""
Convenience entry point for running slotresolver directly.

Usage: python run_slotresolver.py [command] [options]
"""

from slotresolver.cli.app import app

if __name__ == "__main__":
    app()
