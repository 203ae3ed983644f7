"""Stellar fee estimation, currency display and an async Horizon API client."""

__version__ = "0.1.0"