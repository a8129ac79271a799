"""Benefit card statement providers"""

from .base import StatementProvider
from .caju import CajuClient
from .flash import FlashClient

__all__ = ['StatementProvider', 'CajuClient', 'FlashClient']
