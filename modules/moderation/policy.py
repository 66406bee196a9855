"""
Moderation Policy - Décision unique par message entrant

Ordre d'évaluation (premier match gagne):
1. Admin du groupe      → ALLOW (jamais sanctionné)
2. Transfert étranger   → BAN (FORWARDED_FROM_OTHER_CHAT)
3. Mot interdit         → BAN (BANWORD_MATCH)
4. Sinon                → ALLOW

Pure: aucun log, aucun appel réseau. L'exécution est faite par l'Enforcer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from core.message_types import ChatMessage
from modules.moderation.banword_matcher import find_banword
from modules.moderation.forward_detector import is_foreign_forward


class BanReason(Enum):
    """Motif d'un ban automatique"""
    FORWARDED_FROM_OTHER_CHAT = "forwarded_from_other_chat"
    BANWORD_MATCH = "banword_match"


@dataclass(frozen=True)
class ModerationDecision:
    """ALLOW (reason=None) ou BAN(reason)"""
    reason: Optional[BanReason] = None
    matched_word: Optional[str] = None

    @property
    def is_ban(self) -> bool:
        return self.reason is not None

    @classmethod
    def ban(cls, reason: BanReason, matched_word: Optional[str] = None) -> "ModerationDecision":
        return cls(reason=reason, matched_word=matched_word)


ALLOW = ModerationDecision()


def evaluate(message: ChatMessage, is_sender_admin: bool, words: Iterable[str]) -> ModerationDecision:
    """
    Évalue un message.

    Args:
        message: Message entrant
        is_sender_admin: L'auteur est administrateur/créateur du groupe
        words: Liste des mots interdits lue au moment de la décision

    Returns:
        ModerationDecision
    """
    if is_sender_admin:
        return ALLOW

    if is_foreign_forward(message, message.chat_id):
        return ModerationDecision.ban(BanReason.FORWARDED_FROM_OTHER_CHAT)

    matched = find_banword(message.text, words)
    if matched is not None:
        return ModerationDecision.ban(BanReason.BANWORD_MATCH, matched_word=matched)

    return ALLOW
