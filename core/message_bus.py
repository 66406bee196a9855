"""
🚌 MessageBus - Pub/sub interne

Découple le transport Telegram de la logique de modération.
Chaque publication crée une task par subscriber: deux événements
simultanés (ex: deux votes) sont traités de façon entrelacée, d'où
les locks par poll côté VotebanRegistry.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Set

LOGGER = logging.getLogger(__name__)

# Topic
TOPIC_INBOUND = "chat.inbound"      # InboundEvent (ChatMessage | CallbackEvent)

Handler = Callable[[Any], Awaitable[None]]


class MessageBus:
    """Bus de messages asynchrone (fire-and-forget)"""

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}
        self._tasks: Set[asyncio.Task] = set()

    def subscribe(self, topic: str, handler: Handler) -> None:
        """
        Abonne un handler async à un topic.

        Args:
            topic: Nom du topic (TOPIC_INBOUND)
            handler: Coroutine function appelée avec l'événement
        """
        self._subscribers.setdefault(topic, []).append(handler)
        LOGGER.info(f"📌 Subscriber ajouté: {topic} -> {getattr(handler, '__name__', handler)}")

    async def publish(self, topic: str, data: Any) -> None:
        """
        Publie un événement sur un topic sans attendre les handlers.

        Args:
            topic: Nom du topic
            data: ChatMessage ou CallbackEvent
        """
        handlers = self._subscribers.get(topic, [])
        if not handlers:
            LOGGER.debug(f"⚠️ MessageBus: aucun subscriber pour {topic}")
            return

        for handler in handlers:
            task = asyncio.create_task(self._safe_handle(handler, data, topic))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _safe_handle(self, handler: Handler, data: Any, topic: str) -> None:
        """Exécute un handler; une exception ne tue ni le bus ni les autres tasks"""
        try:
            await handler(data)
        except Exception as e:
            LOGGER.error(
                f"❌ Erreur handler {getattr(handler, '__name__', handler)} sur {topic}: {e}",
                exc_info=True
            )

    async def wait_all(self) -> None:
        """Attend la fin des tasks en cours (shutdown, tests)"""
        if self._tasks:
            LOGGER.info(f"⏳ Attente de {len(self._tasks)} tasks...")
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def get_stats(self) -> Dict[str, int]:
        """Retourne les stats du bus"""
        return {
            "topics": len(self._subscribers),
            "subscribers": sum(len(h) for h in self._subscribers.values()),
            "active_tasks": len(self._tasks),
        }
