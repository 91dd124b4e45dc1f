"""Tunescout - rank playable sources for a piece of track metadata."""

from .__version__ import __version__

__all__ = ["__version__"]
