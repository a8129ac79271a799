"""Flash benefits card provider"""

from .auth import AuthState, Authenticated, Initialized, NotStarted
from .client import FlashClient
from .statement import FlashTransaction, convert

__all__ = [
    'AuthState',
    'Authenticated',
    'Initialized',
    'NotStarted',
    'FlashClient',
    'FlashTransaction',
    'convert',
]
