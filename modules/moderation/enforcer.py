#!/usr/bin/env python3
"""
Enforcer - Exécution des sanctions sur Telegram

Chaque appel (delete, ban) est indépendant et best-effort:
- un échec est loggé sur le canal d'audit avec son label
  ("Erreur API" / "Erreur réseau") puis abandonné (pas de retry)
- un échec n'empêche jamais les appels suivants (pas de rollback)

resolve() retire TOUJOURS la session du registry (finally).
"""

import logging
from typing import TYPE_CHECKING

from core.errors import PlatformError
from core.message_types import ChatMessage
from modules.moderation.policy import BanReason, ModerationDecision
from modules.voteban.session import SessionState, VotebanSession

if TYPE_CHECKING:
    from core.audit_logger import AuditLog
    from modules.voteban.registry import VotebanRegistry
    from tgapi.client import TelegramClient

LOGGER = logging.getLogger(__name__)


class Enforcer:
    """Applique les décisions de modération et les résultats de voteban"""

    def __init__(self, client: "TelegramClient", audit: "AuditLog", registry: "VotebanRegistry"):
        self.client = client
        self.audit = audit
        self.registry = registry
        self.ban_count = 0

    # ========================================================================
    # APPELS UNITAIRES
    # ========================================================================

    async def delete_message(self, chat_id: int, message_id: int) -> bool:
        """Supprime un message. Returns: True si réussi"""
        try:
            await self.client.delete_message(chat_id, message_id)
            return True
        except PlatformError as e:
            await self.audit.error(f"❌ Suppression du message {message_id} échouée. {e.describe()}")
            return False

    async def ban(self, chat_id: int, user_id: int) -> bool:
        """Bannit un membre du groupe. Returns: True si réussi"""
        try:
            await self.client.ban_chat_member(chat_id, user_id)
            self.ban_count += 1
            return True
        except PlatformError as e:
            await self.audit.error(f"❌ Ban de l'utilisateur {user_id} échoué. {e.describe()}")
            return False

    # ========================================================================
    # MODÉRATION AUTOMATIQUE
    # ========================================================================

    async def enforce(self, message: ChatMessage, decision: ModerationDecision) -> bool:
        """
        Exécute une décision BAN: supprime le message puis bannit l'auteur.

        Args:
            message: Message fautif
            decision: Décision de la ModerationPolicy

        Returns:
            True si le ban a réussi (False aussi pour ALLOW)
        """
        if not decision.is_ban:
            return False

        sender = message.sender
        who = f"{sender.display_name} ({sender.user_id})"
        if decision.reason is BanReason.FORWARDED_FROM_OTHER_CHAT:
            await self.audit.log(f"📨 Message transféré d'un autre chat par {who}. Blocage.")
        else:
            await self.audit.log(f"🚫 Mot interdit \"{decision.matched_word}\" dans le message de {who}. Blocage.")

        await self.delete_message(message.chat_id, message.message_id)
        banned = await self.ban(message.chat_id, sender.user_id)

        if banned:
            await self.audit.log(f"✅ Utilisateur {sender.user_id} banni.")
        else:
            await self.audit.error(f"⚠️ Impossible de bannir {who}.")
        return banned

    # ========================================================================
    # VOTEBAN
    # ========================================================================

    async def resolve(self, session: VotebanSession, outcome: SessionState) -> None:
        """
        Applique le résultat d'un voteban puis retire la session.

        RESOLVED_BAN: supprime le message visé, bannit la cible, supprime le poll
        RESOLVED_DISMISS: supprime uniquement le poll

        Raises:
            ValueError: outcome n'est pas un état résolu
        """
        if not outcome.is_resolved:
            raise ValueError(f"Cannot resolve voteban {session.poll_id} with state {outcome.value}")

        pro_count, against_count = session.tally()
        try:
            if outcome is SessionState.RESOLVED_BAN:
                await self.delete_message(session.chat_id, session.target_message_id)
                banned = await self.ban(session.chat_id, session.target_user_id)
                await self.delete_message(session.chat_id, session.poll_id)
                status = "banni" if banned else "NON banni (échec)"
                await self.audit.log(
                    f"🗳️ Voteban: {session.target_display_name} ({session.target_user_id}) {status} "
                    f"- {pro_count} pour / {against_count} contre"
                )
            else:
                await self.delete_message(session.chat_id, session.poll_id)
                await self.audit.log(
                    f"🗳️ Voteban contre {session.target_display_name} ({session.target_user_id}) rejeté "
                    f"- {pro_count} pour / {against_count} contre"
                )
        finally:
            self.registry.remove(session.chat_id, session.poll_id)
