"""
Core - Utilitaires transverses (bus, types, config, erreurs, audit)
"""

from core.errors import PlatformAPIError, TransportError, ValidationError
from core.message_bus import MessageBus

__all__ = ["MessageBus", "PlatformAPIError", "TransportError", "ValidationError"]
