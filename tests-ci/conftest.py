"""
Pytest configuration for CI tests
Provides common fixtures (settings, mocks Telegram, store SQLite temporaire)
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.config import Settings
from core.message_bus import MessageBus
from core.message_handler import MessageHandler
from core.message_types import CallbackEvent, ChatMessage, Participant
from database.word_store import WordStore
from modules.moderation.enforcer import Enforcer
from modules.voteban.registry import VotebanRegistry

GROUP_ID = -1001234567890
ADMIN_ID = 1
POLL_MESSAGE_ID = 500


@pytest.fixture
def settings():
    """Config de test (aucun vrai token)"""
    return Settings(bot_token="123456:TEST-token", admin_ids=[ADMIN_ID], voteban_threshold=2)


@pytest.fixture
def mock_client():
    """TelegramClient mocké: tous les appels réussissent"""
    client = MagicMock()
    client.send_message = AsyncMock(return_value=POLL_MESSAGE_ID)
    client.edit_message_text = AsyncMock()
    client.delete_message = AsyncMock()
    client.ban_chat_member = AsyncMock()
    client.answer_callback = AsyncMock()
    client.is_chat_admin = AsyncMock(return_value=False)
    return client


@pytest.fixture
def mock_audit():
    """AuditLog mocké (on vérifie les lignes publiées)"""
    audit = MagicMock()
    audit.log = AsyncMock()
    audit.error = AsyncMock()
    return audit


@pytest.fixture
def registry():
    return VotebanRegistry()


@pytest.fixture
def enforcer(mock_client, mock_audit, registry):
    return Enforcer(mock_client, mock_audit, registry)


@pytest.fixture
def word_store(tmp_path):
    return WordStore(str(tmp_path / "test.db"))


@pytest.fixture
def bus():
    return MessageBus()


@pytest.fixture
def handler(bus, settings, mock_client, word_store, registry, enforcer, mock_audit):
    """MessageHandler complet branché sur les mocks"""
    return MessageHandler(bus, settings, mock_client, word_store, registry, enforcer, mock_audit)


@pytest.fixture
def make_message():
    """Factory de ChatMessage"""
    def _make(
        text="bonjour",
        user_id=100,
        username="someone",
        chat_id=GROUP_ID,
        message_id=10,
        chat_type="supergroup",
        forward_from_chat_id=None,
        reply_to=None,
        is_bot=False,
    ):
        return ChatMessage(
            chat_id=chat_id,
            message_id=message_id,
            sender=Participant(user_id=user_id, username=username, is_bot=is_bot),
            text=text,
            chat_type=chat_type,
            forward_from_chat_id=forward_from_chat_id,
            reply_to=reply_to,
        )
    return _make


@pytest.fixture
def make_callback():
    """Factory de CallbackEvent (clic sur un bouton du poll)"""
    def _make(user_id, data, username=None, chat_id=GROUP_ID, message_id=POLL_MESSAGE_ID):
        return CallbackEvent(
            callback_id=f"cb-{user_id}-{data}",
            chat_id=chat_id,
            message_id=message_id,
            sender=Participant(user_id=user_id, username=username or f"user{user_id}"),
            data=data,
        )
    return _make
