"""
📦 Message Types - DTOs pour le système de messaging

Contrats de données entre le transport Telegram et la logique métier.
Le transport convertit les objets aiogram en ces dataclasses avant de
publier sur le MessageBus: le core ne voit jamais un payload aiogram.
"""
from dataclasses import dataclass
from typing import Optional, Union

# Label affiché quand un utilisateur n'a ni username ni prénom
FALLBACK_DISPLAY_NAME = "sans nom"


@dataclass(frozen=True)
class Participant:
    """Utilisateur Telegram (auteur d'un message ou votant)"""
    user_id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    is_bot: bool = False

    @property
    def display_name(self) -> str:
        """@username si dispo, sinon prénom, sinon label par défaut"""
        if self.username:
            return f"@{self.username}"
        if self.first_name:
            return self.first_name
        return FALLBACK_DISPLAY_NAME


@dataclass
class ChatMessage:
    """Message entrant (groupe ou privé)"""
    chat_id: int                                # ID du chat Telegram
    message_id: int                             # ID du message dans ce chat
    sender: Participant                         # Auteur
    text: str = ""                              # Texte ou légende (caption)
    chat_type: str = "supergroup"               # "private", "group", "supergroup", "channel"
    forward_from_chat_id: Optional[int] = None  # Chat d'origine si message transféré
    reply_to: Optional["ChatMessage"] = None    # Message auquel on répond (un seul niveau)

    @property
    def is_group(self) -> bool:
        return self.chat_type in ("group", "supergroup")


@dataclass
class CallbackEvent:
    """Clic sur un bouton inline"""
    callback_id: str                # ID à utiliser pour answer_callback_query
    chat_id: int                    # Chat du message portant le bouton
    message_id: int                 # ID du message portant le bouton (ancre du poll)
    sender: Participant             # Qui a cliqué
    data: str = ""                  # callback_data du bouton


# Variante taguée consommée par le MessageHandler
InboundEvent = Union[ChatMessage, CallbackEvent]
