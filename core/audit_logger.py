#!/usr/bin/env python3
"""
Audit Logger - Journal des actions de modération

Chaque ligne d'audit est:
- loggée sur la console / instance log (logger "audit")
- envoyée en message privé à chaque admin configuré (ADMIN_IDS)

Un échec d'envoi à un admin est loggé localement et n'empêche pas
l'envoi aux autres.
"""

import logging
from typing import TYPE_CHECKING, Iterable, List

from core.errors import PlatformError

if TYPE_CHECKING:
    from tgapi.client import TelegramClient

LOGGER = logging.getLogger(__name__)


class AuditLog:
    """Canal d'audit: console + DMs aux admins"""

    def __init__(self, client: "TelegramClient", admin_ids: Iterable[int]):
        """
        Args:
            client: TelegramClient pour les DMs
            admin_ids: Destinataires du log d'audit
        """
        self.client = client
        self.admin_ids: List[int] = list(admin_ids)
        self.entry_count = 0
        self._audit_logger = logging.getLogger("audit")

        LOGGER.info(f"📋 AuditLog initialisé - {len(self.admin_ids)} destinataires")

    async def log(self, text: str, level: int = logging.INFO) -> None:
        """
        Publie une ligne d'audit.

        Args:
            text: Ligne à publier
            level: Niveau pour le mirror console
        """
        self.entry_count += 1
        self._audit_logger.log(level, text)

        for admin_id in self.admin_ids:
            try:
                await self.client.send_message(admin_id, text)
            except PlatformError as e:
                LOGGER.error(f"❌ Audit DM to admin {admin_id} failed: {e.describe()}")

    async def error(self, text: str) -> None:
        await self.log(text, level=logging.ERROR)
