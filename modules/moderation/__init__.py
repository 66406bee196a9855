"""
Moderation Module - Modération automatique

Contient:
- banword_matcher: mots interdits (sous-chaîne, case-insensitive)
- forward_detector: messages transférés depuis un autre chat
- policy: décision ALLOW / BAN(reason) par message
- Enforcer: suppression + ban via Telegram, résolution des votebans

Usage:
    from modules.moderation import evaluate, Enforcer

    decision = evaluate(msg, is_sender_admin, store.list_words())
    if decision.is_ban:
        await enforcer.enforce(msg, decision)
"""

from .banword_matcher import find_banword, matches
from .enforcer import Enforcer
from .forward_detector import is_foreign_forward
from .policy import ALLOW, BanReason, ModerationDecision, evaluate

__all__ = [
    "ALLOW",
    "BanReason",
    "Enforcer",
    "ModerationDecision",
    "evaluate",
    "find_banword",
    "is_foreign_forward",
    "matches",
]
