#!/usr/bin/env python3
"""
Convenience shim to run Tunescout from a source checkout.
Usage: python tunescout.py [-b yt_music|youtube] [-a ARTIST] TRACK
"""

from tunescout.cli import main


if __name__ == "__main__":
    main()
