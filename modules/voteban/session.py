"""
Voteban Session - Machine à états d'un vote communautaire

    OPEN ──(pour >= seuil)──────► RESOLVED_BAN
      │
      └───(contre >= seuil)─────► RESOLVED_DISMISS

Créée OPEN avec le vote "ban" de l'initiateur déjà compté.
Un votant = une voix (dernier choix gagne). La cible ne vote jamais.
Les deux seuils sont testés sur le MÊME décompte post-mutation: un vote
ne fait bouger qu'un seul camp d'une voix, donc une seule résolution possible.

Pas de lock ici: l'appelant sérialise via VotebanRegistry.lock(poll_id).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from core.errors import DuplicateVoteError, SelfVoteError, SessionClosedError
from core.message_types import FALLBACK_DISPLAY_NAME

LOGGER = logging.getLogger(__name__)


class SessionState(Enum):
    OPEN = "open"
    RESOLVED_BAN = "resolved_ban"
    RESOLVED_DISMISS = "resolved_dismiss"

    @property
    def is_resolved(self) -> bool:
        return self is not SessionState.OPEN


@dataclass(frozen=True)
class VoteOutcome:
    """Résultat d'un cast_vote: nouvel état + décompte utilisé pour décider"""
    state: SessionState
    pro_count: int
    against_count: int

    @property
    def needs_refresh(self) -> bool:
        """Session toujours ouverte → rafraîchir l'affichage du poll"""
        return self.state is SessionState.OPEN


@dataclass
class VotebanSession:
    """Un poll voteban en cours"""
    poll_id: int                    # ID du message d'ancrage (clé du registry)
    chat_id: int
    target_user_id: int
    target_display_name: str
    target_message_id: int          # Supprimé uniquement si ban
    initiator_id: int
    threshold: int
    initiator_name: str = FALLBACK_DISPLAY_NAME
    votes: Dict[int, bool] = field(default_factory=dict)        # voter_id -> True (ban) / False (contre)
    voter_names: Dict[int, str] = field(default_factory=dict)   # voter_id -> nom affiché
    state: SessionState = SessionState.OPEN

    def __post_init__(self):
        if self.threshold < 1:
            raise ValueError(f"Voteban threshold must be >= 1, got {self.threshold}")
        if self.initiator_id == self.target_user_id:
            raise SelfVoteError(self.initiator_id)
        # L'initiateur compte comme premier vote "ban"
        self.votes[self.initiator_id] = True
        self.voter_names[self.initiator_id] = self.initiator_name

    # ========================================================================
    # TRANSITIONS
    # ========================================================================

    def cast_vote(self, voter_id: int, wants_ban: bool, voter_name: Optional[str] = None) -> VoteOutcome:
        """
        Enregistre un vote et tranche si un seuil est atteint.

        Args:
            voter_id: ID Telegram du votant
            wants_ban: True = ban, False = contre
            voter_name: Nom affiché du votant

        Returns:
            VoteOutcome (OPEN, RESOLVED_BAN ou RESOLVED_DISMISS)

        Raises:
            SessionClosedError: session déjà résolue
            SelfVoteError: la cible vote sur son propre cas
            DuplicateVoteError: même vote déjà enregistré (rien n'a changé)
        """
        if self.state.is_resolved:
            raise SessionClosedError(f"Voteban {self.poll_id} is already {self.state.value}")
        if voter_id == self.target_user_id:
            raise SelfVoteError(voter_id)
        if self.votes.get(voter_id) == wants_ban:
            raise DuplicateVoteError(voter_id, wants_ban)

        self.votes[voter_id] = wants_ban
        self.voter_names[voter_id] = voter_name or FALLBACK_DISPLAY_NAME

        pro_count, against_count = self.tally()
        if pro_count >= self.threshold:
            self.state = SessionState.RESOLVED_BAN
        elif against_count >= self.threshold:
            self.state = SessionState.RESOLVED_DISMISS

        LOGGER.debug(
            f"🗳️ Voteban {self.poll_id}: {voter_id} -> {'ban' if wants_ban else 'keep'} "
            f"({pro_count}/{against_count}, seuil {self.threshold}) → {self.state.value}"
        )
        return VoteOutcome(self.state, pro_count, against_count)

    # ========================================================================
    # LECTURE
    # ========================================================================

    @property
    def key(self) -> Tuple[int, int]:
        """Identité du message d'ancrage: (chat_id, poll_id)"""
        return self.chat_id, self.poll_id

    def tally(self) -> Tuple[int, int]:
        """(pour, contre)"""
        pro_count = sum(1 for value in self.votes.values() if value)
        return pro_count, len(self.votes) - pro_count

    def voter_names_for(self, wants_ban: bool) -> List[str]:
        """Noms des votants d'un camp, dans l'ordre du dict"""
        return [
            self.voter_names.get(voter_id, FALLBACK_DISPLAY_NAME)
            for voter_id, value in self.votes.items()
            if value == wants_ban
        ]
