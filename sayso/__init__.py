"""Sayso agent -- spoken requests in, platform actions out."""

__version__ = "0.1.0"
