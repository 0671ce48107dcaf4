#!/usr/bin/env python
"""
Main entry point for Media Manager.
"""

from media_manager.cli import main

if __name__ == "__main__":
    main()
