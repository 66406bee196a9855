"""
tgapi/
======

Module dédié à TOUTE la gestion de l'API Telegram (aiogram).

Organisation:
- client.py : Appels Bot API (send, edit, delete, ban, get_chat_member)
- transport.py : Long polling → MessageBus

Philosophie:
- Séparation claire : core/ + modules/ = logique bot, tgapi/ = Telegram-specific
- Testable : Code Telegram isolé = mocking facile
"""

from tgapi.client import TelegramClient
from tgapi.transport import TelegramTransport

__all__ = ["TelegramClient", "TelegramTransport"]
