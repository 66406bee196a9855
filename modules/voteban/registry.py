"""
🗂️ Voteban Registry - Sessions voteban actives

Table (chat_id, poll_id) -> VotebanSession, construite au démarrage et
injectée (pas de singleton). Une session y figure tant qu'elle n'est pas
résolue. Les message_id Telegram ne sont uniques que par chat, d'où la
clé (chat_id, poll_id) pour identifier le message d'ancrage.

Concurrence:
    Chaque poll a son asyncio.Lock. Toute lecture-modification d'une
    session (cast + résolution + remove) se fait sous ce lock, et la
    session est relue APRÈS l'acquisition:

        async with registry.lock(chat_id, poll_id):
            session = registry.get(chat_id, poll_id)
            if session is None:
                return  # déjà résolue
            ...

    Le lock est retiré du dict au remove(); un waiter qui le détient
    déjà l'acquiert quand même, puis trouve get() -> None.
"""
import asyncio
import logging
from contextlib import contextmanager
from typing import Dict, Optional, Tuple

from core.errors import DuplicatePollError, NotFoundError
from modules.voteban.session import VotebanSession

LOGGER = logging.getLogger(__name__)

PollKey = Tuple[int, int]  # (chat_id, poll_id)


class VotebanRegistry:
    """Sessions voteban en mémoire (process unique)"""

    def __init__(self):
        self._sessions: Dict[PollKey, VotebanSession] = {}
        self._locks: Dict[PollKey, asyncio.Lock] = {}
        self._opening: Dict[int, int] = {}  # chat_id -> polls en cours d'envoi

    def lock(self, chat_id: int, poll_id: int) -> asyncio.Lock:
        """Lock exclusif du poll (créé à la demande)"""
        key = (chat_id, poll_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def create(self, session: VotebanSession) -> None:
        """
        Enregistre une nouvelle session.

        Raises:
            DuplicatePollError: une session existe déjà pour ce message d'ancrage
        """
        if session.key in self._sessions:
            raise DuplicatePollError(session.poll_id)
        self._sessions[session.key] = session
        LOGGER.info(
            f"🗳️ Voteban ouvert: chat={session.chat_id} poll={session.poll_id} "
            f"target={session.target_user_id} initiator={session.initiator_id} seuil={session.threshold}"
        )

    def get(self, chat_id: int, poll_id: int) -> Optional[VotebanSession]:
        return self._sessions.get((chat_id, poll_id))

    def require(self, chat_id: int, poll_id: int) -> VotebanSession:
        """
        Comme get(), mais une session absente est une erreur.

        Raises:
            NotFoundError: aucune session ouverte pour ce message d'ancrage
        """
        session = self.get(chat_id, poll_id)
        if session is None:
            raise NotFoundError(f"No open voteban for poll {poll_id} in chat {chat_id}")
        return session

    @contextmanager
    def opening(self, chat_id: int):
        """
        Marque un poll en cours d'ouverture dans ce chat (envoi du message
        d'ancrage puis create()). Un clic qui arrive entre les deux ne
        trouve pas encore de session.
        """
        self._opening[chat_id] = self._opening.get(chat_id, 0) + 1
        try:
            yield
        finally:
            self._opening[chat_id] -= 1
            if not self._opening[chat_id]:
                del self._opening[chat_id]

    def is_opening(self, chat_id: int) -> bool:
        return chat_id in self._opening

    def remove(self, chat_id: int, poll_id: int) -> Optional[VotebanSession]:
        """Retire une session (et son lock). Retourne None si déjà absente."""
        key = (chat_id, poll_id)
        session = self._sessions.pop(key, None)
        self._locks.pop(key, None)
        if session is not None:
            LOGGER.info(f"🗑️ Voteban fermé: chat={chat_id} poll={poll_id} ({session.state.value})")
        return session

    def __contains__(self, key: PollKey) -> bool:
        return key in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def get_stats(self) -> Dict[str, int]:
        """Retourne les stats du registry"""
        return {
            "sessions": len(self._sessions),
            "locks": len(self._locks),
            "opening": sum(self._opening.values()),
        }
