"""Configuration for ctfiling."""

from ctfiling.config.logging import configure_logging

__all__ = ["configure_logging"]
