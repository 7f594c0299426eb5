#!/usr/bin/env python3
"""
Main entry point for the codepulse module.
This allows running the module with: python -m codepulse
"""

from .core import main

if __name__ == "__main__":
    main()
