"""
Banword Commands Module - /addword, /removeword, /listwords
============================================================
Gestion des mots interdits (auto-ban). Réservé aux admins configurés (ADMIN_IDS).

Pattern: handler(MessageHandler, ChatMessage, args: str) -> None
"""

import logging
import re
from typing import List

from core.message_types import ChatMessage
from database.word_store import normalize_word

LOGGER = logging.getLogger("varta.commands.banwords")

# "/addword spam, casino;crypto promo" -> 4 mots
WORD_SEPARATORS = re.compile(r"[,; ]+")


def split_words(args: str) -> List[str]:
    """Découpe les arguments de /addword (virgule, point-virgule ou espace), forme stockée"""
    return [normalize_word(part) for part in WORD_SEPARATORS.split(args.strip()) if part.strip()]


async def handle_addword(handler, msg: ChatMessage, args: str = "") -> None:
    """
    /addword <mot>[, <mot>...] - Ajoute des mots interdits (admins only)

    Tout message contenant un de ces mots = BAN instantané
    """
    if not handler.settings.is_admin(msg.sender.user_id):
        await handler.reply(msg, "⛔ Seuls les administrateurs peuvent ajouter des mots.")
        return

    words = split_words(args)
    if not words:
        await handler.reply(msg, "Usage: /addword <mot>[, <mot>...] (au moins un mot)")
        return

    added = [
        word for word in words
        if handler.word_store.add_word(word, added_by=msg.sender.display_name)
    ]

    if not added:
        await handler.reply(msg, "ℹ️ Aucun nouveau mot ajouté (ils sont peut-être déjà dans la liste).")
        return

    await handler.reply(msg, f"🚫 {len(added)} nouveau(x) mot(s) ajouté(s).")
    LOGGER.info(f"🚫 BANWORD | {msg.sender.display_name} added: {added}")
    await handler.audit.log(
        f"{msg.sender.display_name}: a ajouté {len(added)} mot(s) interdit(s): {', '.join(added)}"
    )


async def handle_removeword(handler, msg: ChatMessage, args: str = "") -> None:
    """
    /removeword <mot> - Retire un mot interdit (admins only)
    """
    if not handler.settings.is_admin(msg.sender.user_id):
        await handler.reply(msg, "⛔ Seuls les administrateurs peuvent retirer des mots.")
        return

    word = normalize_word(args)
    if not word:
        await handler.reply(msg, "Usage: /removeword <mot>")
        return

    removed = handler.word_store.remove_word(word)
    if removed:
        await handler.reply(msg, f"✅ Mot \"{word}\" retiré de la liste.")
        LOGGER.info(f"✅ BANWORD | {msg.sender.display_name} removed: '{word}'")
        await handler.audit.log(f"{msg.sender.display_name}: a retiré le mot \"{word}\" de la liste.")
    else:
        await handler.reply(msg, f"ℹ️ Mot \"{word}\" introuvable.")


async def handle_listwords(handler, msg: ChatMessage, args: str = "") -> None:
    """
    /listwords - Liste les mots interdits (admins only)
    """
    if not handler.settings.is_admin(msg.sender.user_id):
        await handler.reply(msg, "⛔ Seuls les administrateurs peuvent consulter la liste.")
        return

    words = handler.word_store.list_words()
    if not words:
        await handler.reply(msg, "ℹ️ La liste des mots interdits est vide.")
        return

    await handler.reply(msg, f"🚫 Mots interdits ({len(words)}): {', '.join(words)}")
