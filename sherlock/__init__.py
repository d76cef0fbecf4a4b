"""Sherlock: multi-provider AI adapter and normalization pipeline for OSINT investigations."""

__version__ = "0.1.0"
