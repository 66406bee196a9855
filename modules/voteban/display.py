"""
Affichage d'un poll voteban (texte + boutons inline)
"""

from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from modules.voteban.session import VotebanSession

# callback_data des boutons
CALLBACK_PREFIX = "voteban"
CALLBACK_BAN = f"{CALLBACK_PREFIX}:ban"
CALLBACK_KEEP = f"{CALLBACK_PREFIX}:keep"


def parse_callback(data: str):
    """
    "voteban:ban" -> True, "voteban:keep" -> False, autre -> None
    """
    if data == CALLBACK_BAN:
        return True
    if data == CALLBACK_KEEP:
        return False
    return None


def render_text(session: VotebanSession) -> str:
    """Texte du message d'ancrage: cible, seuil, votants des deux camps"""
    pro_count, against_count = session.tally()
    pro_names = ", ".join(session.voter_names_for(True)) or "-"
    against_names = ", ".join(session.voter_names_for(False)) or "-"
    return (
        f"🗳️ Voteban contre {session.target_display_name}\n"
        f"Votes nécessaires: {session.threshold}\n\n"
        f"🚫 Pour le ban ({pro_count}): {pro_names}\n"
        f"✅ Contre ({against_count}): {against_names}"
    )


def build_keyboard(session: VotebanSession) -> InlineKeyboardMarkup:
    """Boutons Ban / Garder avec les compteurs"""
    pro_count, against_count = session.tally()
    builder = InlineKeyboardBuilder()
    builder.button(text=f"🚫 Ban ({pro_count})", callback_data=CALLBACK_BAN)
    builder.button(text=f"✅ Garder ({against_count})", callback_data=CALLBACK_KEEP)
    builder.adjust(2)
    return builder.as_markup()
