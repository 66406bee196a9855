"""
Mod Commands Package
====================
Commandes réservées aux administrateurs configurés.
"""

from .banwords import handle_addword, handle_listwords, handle_removeword

__all__ = [
    'handle_addword',
    'handle_listwords',
    'handle_removeword',
]
