#!/usr/bin/env python3
"""
Telegram Transport - Long polling aiogram
- Écoute messages + callbacks → convertit en ChatMessage / CallbackEvent
- Publie sur chat.inbound (messages et callbacks)

Aucune décision ici: le MessageHandler traite tout côté bus.
"""

import logging
from typing import Optional

from aiogram import Bot, Dispatcher, Router
from aiogram.types import (
    CallbackQuery,
    Message,
    MessageOriginChannel,
    MessageOriginChat,
    User,
)

from core.message_bus import TOPIC_INBOUND, MessageBus
from core.message_types import CallbackEvent, ChatMessage, Participant

LOGGER = logging.getLogger(__name__)

ALLOWED_UPDATES = ["message", "callback_query"]


def to_participant(user: User) -> Participant:
    return Participant(
        user_id=user.id,
        username=user.username,
        first_name=user.first_name,
        is_bot=user.is_bot,
    )


def forward_origin_chat_id(message: Message) -> Optional[int]:
    """ID du chat d'origine d'un transfert (canal ou groupe), None sinon"""
    origin = message.forward_origin
    if isinstance(origin, MessageOriginChannel):
        return origin.chat.id
    if isinstance(origin, MessageOriginChat):
        return origin.sender_chat.id
    return None


def is_explicit_reply(message: Message) -> bool:
    """
    True si l'utilisateur a répondu à un message précis.

    Dans un topic de forum, Telegram remplit reply_to_message avec le
    message de création du topic même sans réponse explicite.
    """
    replied = message.reply_to_message
    if replied is None:
        return False
    if replied.forum_topic_created is not None:
        return False
    if message.is_topic_message and replied.message_id == message.message_thread_id:
        return False
    return True


def to_chat_message(message: Message, with_reply: bool = True) -> Optional[ChatMessage]:
    """
    Convertit un Message aiogram. None si pas d'auteur (post de canal,
    admin anonyme): rien à modérer dans ce cas.
    """
    if message.from_user is None:
        return None

    reply_to = None
    if with_reply and is_explicit_reply(message):
        reply_to = to_chat_message(message.reply_to_message, with_reply=False)

    return ChatMessage(
        chat_id=message.chat.id,
        message_id=message.message_id,
        sender=to_participant(message.from_user),
        text=message.text or message.caption or "",
        chat_type=message.chat.type,
        forward_from_chat_id=forward_origin_chat_id(message),
        reply_to=reply_to,
    )


def to_callback_event(query: CallbackQuery) -> Optional[CallbackEvent]:
    """Convertit un CallbackQuery. None si le message d'origine est inaccessible."""
    if query.message is None:
        return None
    return CallbackEvent(
        callback_id=query.id,
        chat_id=query.message.chat.id,
        message_id=query.message.message_id,
        sender=to_participant(query.from_user),
        data=query.data or "",
    )


class TelegramTransport:
    """
    Transport Telegram (long polling)
    - Message → chat.inbound
    - CallbackQuery → chat.inbound
    """

    def __init__(self, bot: Bot, bus: MessageBus):
        """
        Args:
            bot: Instance aiogram Bot
            bus: MessageBus pour publier
        """
        self.bot = bot
        self.bus = bus
        self.dispatcher = Dispatcher()
        self.router = Router(name="varta")
        self.router.message.register(self._on_message)
        self.router.callback_query.register(self._on_callback)
        self.dispatcher.include_router(self.router)

        LOGGER.info("TelegramTransport initialisé")

    async def _on_message(self, message: Message) -> None:
        event = to_chat_message(message)
        if event is None:
            LOGGER.debug(f"⏭️ Message {message.message_id} sans auteur, ignoré")
            return
        await self.bus.publish(TOPIC_INBOUND, event)

    async def _on_callback(self, callback_query: CallbackQuery) -> None:
        event = to_callback_event(callback_query)
        if event is None:
            LOGGER.debug(f"⏭️ Callback {callback_query.id} sur message inaccessible, ignoré")
            return
        await self.bus.publish(TOPIC_INBOUND, event)

    async def start(self) -> None:
        """Long polling jusqu'à stop() ou SIGINT/SIGTERM"""
        LOGGER.info("🚀 Démarrage du polling Telegram...")
        await self.dispatcher.start_polling(self.bot, allowed_updates=ALLOWED_UPDATES)

    async def stop(self) -> None:
        """Arrête le polling (no-op s'il ne tourne pas)"""
        try:
            await self.dispatcher.stop_polling()
        except RuntimeError:
            LOGGER.debug("Polling déjà arrêté")
