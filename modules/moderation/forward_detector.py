"""
Forward Detector - Messages transférés depuis un autre chat
"""

from core.message_types import ChatMessage


def is_foreign_forward(message: ChatMessage, current_chat_id: int) -> bool:
    """
    True si le message a été transféré depuis un autre chat (canal, groupe).

    Un transfert interne au même chat, ou depuis un utilisateur
    (pas de chat d'origine), n'est pas signalé.
    """
    origin = message.forward_from_chat_id
    return origin is not None and origin != current_chat_id
