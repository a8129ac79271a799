"""Output writers for canonical statements"""

from .ofx_writer import OFXWriter, serialize

__all__ = ['OFXWriter', 'serialize']
