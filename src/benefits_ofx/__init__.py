"""Benefit-card statements exported as OFX documents"""

__version__ = "0.1.0"
