"""Podtally - weekly release tracking for podcasts and channels."""

__version__ = "0.1.0"
