"""
Voteban Module - Votes communautaires de bannissement

Contient:
- VotebanSession: machine à états d'un poll (votes, seuil, résolution)
- VotebanRegistry: sessions actives + lock par poll
- display: texte et boutons du message d'ancrage
"""

from .registry import VotebanRegistry
from .session import SessionState, VoteOutcome, VotebanSession

__all__ = [
    "SessionState",
    "VoteOutcome",
    "VotebanRegistry",
    "VotebanSession",
]
