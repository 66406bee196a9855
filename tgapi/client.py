#!/usr/bin/env python3
"""
Telegram Client - Appels Bot API utilisés par la modération

Wrapper mince autour d'aiogram.Bot:
- Traduit les exceptions aiogram en PlatformAPIError / TransportError
- Ignore "message is not modified" (refresh redondant d'un poll)
- Aucune logique métier, aucun retry
"""

import logging
from typing import Optional

from aiogram import Bot
from aiogram.enums import ChatMemberStatus
from aiogram.exceptions import TelegramAPIError, TelegramBadRequest, TelegramNetworkError
from aiogram.types import InlineKeyboardMarkup, ReplyParameters

from core.errors import PlatformAPIError, TransportError

LOGGER = logging.getLogger(__name__)

ADMIN_STATUSES = (ChatMemberStatus.ADMINISTRATOR, ChatMemberStatus.CREATOR)


class TelegramClient:
    """Accès Bot API (send / edit / delete / ban / get_chat_member)"""

    def __init__(self, bot: Bot):
        """
        Args:
            bot: Instance aiogram Bot (token déjà configuré)
        """
        self.bot = bot

    async def _call(self, what: str, coro):
        """Exécute un appel Bot API et normalise les erreurs"""
        try:
            return await coro
        except TelegramNetworkError as e:
            raise TransportError(f"{what}: {e.message}", cause=e) from e
        except TelegramAPIError as e:
            raise PlatformAPIError(f"{what}: {e.message}", cause=e) from e

    # ========================================================================
    # LECTURE
    # ========================================================================

    async def get_member_status(self, chat_id: int, user_id: int) -> str:
        """Statut du membre ("creator", "administrator", "member", ...)"""
        member = await self._call(
            f"get_chat_member({chat_id}, {user_id})",
            self.bot.get_chat_member(chat_id=chat_id, user_id=user_id),
        )
        return member.status

    async def is_chat_admin(self, chat_id: int, user_id: int) -> bool:
        """Administrateur ou créateur du groupe ?"""
        return await self.get_member_status(chat_id, user_id) in ADMIN_STATUSES

    # ========================================================================
    # ÉCRITURE
    # ========================================================================

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: Optional[InlineKeyboardMarkup] = None,
        reply_to_message_id: Optional[int] = None,
    ) -> int:
        """
        Envoie un message.

        Returns:
            ID du message envoyé
        """
        reply_parameters = None
        if reply_to_message_id is not None:
            reply_parameters = ReplyParameters(
                message_id=reply_to_message_id,
                allow_sending_without_reply=True,
            )
        sent = await self._call(
            f"send_message({chat_id})",
            self.bot.send_message(
                chat_id=chat_id,
                text=text,
                reply_markup=reply_markup,
                reply_parameters=reply_parameters,
            ),
        )
        return sent.message_id

    async def edit_message_text(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        reply_markup: Optional[InlineKeyboardMarkup] = None,
    ) -> None:
        """Modifie un message (refresh d'un poll)"""
        try:
            await self.bot.edit_message_text(
                text=text,
                chat_id=chat_id,
                message_id=message_id,
                reply_markup=reply_markup,
            )
        except TelegramBadRequest as e:
            if "message is not modified" in e.message:
                LOGGER.debug(f"⏭️ Message {message_id} inchangé, refresh ignoré")
                return
            raise PlatformAPIError(f"edit_message_text({chat_id}, {message_id}): {e.message}", cause=e) from e
        except TelegramNetworkError as e:
            raise TransportError(f"edit_message_text({chat_id}, {message_id}): {e.message}", cause=e) from e
        except TelegramAPIError as e:
            raise PlatformAPIError(f"edit_message_text({chat_id}, {message_id}): {e.message}", cause=e) from e

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        await self._call(
            f"delete_message({chat_id}, {message_id})",
            self.bot.delete_message(chat_id=chat_id, message_id=message_id),
        )

    async def ban_chat_member(self, chat_id: int, user_id: int) -> None:
        await self._call(
            f"ban_chat_member({chat_id}, {user_id})",
            self.bot.ban_chat_member(chat_id=chat_id, user_id=user_id),
        )

    async def answer_callback(self, callback_id: str, text: Optional[str] = None, show_alert: bool = False) -> None:
        """Répond à un clic de bouton (toast ou alerte)"""
        await self._call(
            f"answer_callback_query({callback_id})",
            self.bot.answer_callback_query(callback_query_id=callback_id, text=text, show_alert=show_alert),
        )
