#!/usr/bin/env python3
"""
Message Handler
Route les événements Telegram: commandes, modération automatique, votes
"""
import logging
import time
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, Optional, Tuple

from core.errors import PlatformError
from core.message_bus import TOPIC_INBOUND, MessageBus
from core.message_types import CallbackEvent, ChatMessage, InboundEvent
from modules.classic_commands.mod_commands.banwords import (
    handle_addword,
    handle_listwords,
    handle_removeword,
)
from modules.classic_commands.user_commands.voteban import handle_vote, handle_voteban
from modules.moderation.policy import evaluate

if TYPE_CHECKING:
    from core.audit_logger import AuditLog
    from core.config import Settings
    from database.word_store import WordStore
    from modules.moderation.enforcer import Enforcer
    from modules.voteban.registry import VotebanRegistry
    from tgapi.client import TelegramClient

LOGGER = logging.getLogger(__name__)

CommandHandler = Callable[["MessageHandler", ChatMessage, str], Awaitable[None]]

COMMANDS: Dict[str, CommandHandler] = {
    "addword": handle_addword,
    "removeword": handle_removeword,
    "listwords": handle_listwords,
    "voteban": handle_voteban,
}


def parse_command(text: str) -> Optional[Tuple[str, str]]:
    """
    "/addword@varta_bot spam, promo" -> ("addword", "spam, promo")

    Returns:
        (commande, args) ou None si le texte n'est pas une commande
    """
    if not text.startswith("/"):
        return None
    parts = text.split(maxsplit=1)
    command = parts[0][1:].split("@", 1)[0].lower()
    if not command:
        return None
    args = parts[1] if len(parts) > 1 else ""
    return command, args


class MessageHandler:
    """
    Handler central

    Pipeline d'un message:
    1. Commande connue (/addword, /removeword, /listwords, /voteban) → dispatch, STOP
    2. Groupe uniquement: statut admin de l'auteur → ModerationPolicy → Enforcer
    """

    def __init__(
        self,
        bus: MessageBus,
        settings: "Settings",
        client: "TelegramClient",
        word_store: "WordStore",
        registry: "VotebanRegistry",
        enforcer: "Enforcer",
        audit: "AuditLog",
    ):
        self.bus = bus
        self.settings = settings
        self.client = client
        self.word_store = word_store
        self.registry = registry
        self.enforcer = enforcer
        self.audit = audit
        self.start_time = time.time()
        self.processed_count = 0

        self.bus.subscribe(TOPIC_INBOUND, self._handle_event)

        LOGGER.info("MessageHandler initialisé")

    # ========================================================================
    # RÉPONSES
    # ========================================================================

    async def reply(self, msg: ChatMessage, text: str) -> None:
        """Répond dans le chat d'origine, en citant le message"""
        try:
            await self.client.send_message(msg.chat_id, text, reply_to_message_id=msg.message_id)
        except PlatformError as e:
            LOGGER.error(f"❌ Reply to {msg.chat_id}/{msg.message_id} failed: {e.describe()}")

    async def answer(self, event: CallbackEvent, text: str, show_alert: bool = False) -> None:
        """Répond à un clic de bouton"""
        try:
            await self.client.answer_callback(event.callback_id, text, show_alert=show_alert)
        except PlatformError as e:
            LOGGER.warning(f"⚠️ Callback answer {event.callback_id} failed: {e.describe()}")

    # ========================================================================
    # PIPELINE
    # ========================================================================

    async def _handle_event(self, event: InboundEvent) -> None:
        """
        Point d'entrée du bus: dispatch sur la variante de l'événement.

        Raises:
            TypeError: variante inconnue (transport mal branché)
        """
        if isinstance(event, ChatMessage):
            await self._handle_chat_message(event)
        elif isinstance(event, CallbackEvent):
            await self._handle_callback(event)
        else:
            raise TypeError(f"Unsupported inbound event: {type(event).__name__}")

    async def _handle_chat_message(self, msg: ChatMessage) -> None:
        """
        Traite un message entrant.

        Args:
            msg: Message normalisé par le transport
        """
        self.processed_count += 1
        text = (msg.text or "").strip()

        parsed = parse_command(text)
        if parsed is not None:
            command, args = parsed
            command_handler = COMMANDS.get(command)
            if command_handler is not None:
                LOGGER.info(f"🤖 Command: /{command} from {msg.sender.display_name} in {msg.chat_id}")
                await command_handler(self, msg, args)
                return

        if not msg.is_group:
            return

        await self._moderate(msg)

    async def _moderate(self, msg: ChatMessage) -> None:
        """Admin check → policy → enforcement"""
        sender = msg.sender
        is_admin = await self._is_group_admin(msg.chat_id, sender.user_id)

        decision = evaluate(msg, is_admin, self.word_store.list_words())
        if is_admin:
            LOGGER.info(f"🛡️ {sender.display_name} ({sender.user_id}) - administrateur, aucune action.")
        elif decision.is_ban:
            LOGGER.warning(
                f"🚫 {decision.reason.value} | {sender.display_name} ({sender.user_id}) "
                f"in {msg.chat_id} - Message: '{msg.text[:50]}'"
            )
            await self.enforcer.enforce(msg, decision)

    async def _is_group_admin(self, chat_id: int, user_id: int) -> bool:
        """
        Statut admin de l'auteur. Si Telegram ne répond pas, l'erreur
        part sur le canal d'audit et l'auteur est traité comme non-admin.
        """
        try:
            return await self.client.is_chat_admin(chat_id, user_id)
        except PlatformError as e:
            await self.audit.error(
                f"❌ Vérification des droits de l'utilisateur {user_id} échouée. {e.describe()}"
            )
            return False

    async def _handle_callback(self, event: CallbackEvent) -> None:
        """Clic sur un bouton inline (seuls les votes voteban existent)"""
        await handle_vote(self, event)

    def get_uptime_seconds(self) -> int:
        """Retourne l'uptime en secondes"""
        return int(time.time() - self.start_time)
