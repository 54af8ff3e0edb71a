"""Contract suite for the HitePro smart-home hub HTTP device API."""

__version__ = "1.0.0"
