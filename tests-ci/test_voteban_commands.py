"""
Tests pour /voteban et les boutons de vote
Flux complet: création du poll → votes → résolution via l'Enforcer
"""
import asyncio
from datetime import datetime

import pytest
from aiogram.types import Chat, ForumTopicCreated, Message, User

from core.errors import PlatformAPIError, TransportError
from modules.classic_commands.user_commands.voteban import handle_vote, handle_voteban
from modules.voteban.display import CALLBACK_BAN, CALLBACK_KEEP
from modules.voteban.session import SessionState
from tgapi.transport import to_chat_message

from conftest import GROUP_ID, POLL_MESSAGE_ID

TARGET_ID = 666
INITIATOR_ID = 100
NOW = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def target_message(make_message):
    return make_message(text="message douteux", user_id=TARGET_ID, username="target", message_id=42)


@pytest.fixture
def voteban_command(make_message, target_message):
    return make_message(text="/voteban", user_id=INITIATOR_ID, username="initiator", reply_to=target_message)


async def open_poll(handler, voteban_command):
    await handle_voteban(handler, voteban_command, "")
    return handler.registry.get(GROUP_ID, POLL_MESSAGE_ID)


def answers(mock_client):
    return [call.args[1] for call in mock_client.answer_callback.await_args_list]


@pytest.mark.unit
class TestVotebanCommand:

    @pytest.mark.asyncio
    async def test_creates_session_and_poll(self, handler, mock_client, mock_audit, voteban_command):
        session = await open_poll(handler, voteban_command)

        assert session is not None
        assert session.target_user_id == TARGET_ID
        assert session.target_message_id == 42
        assert session.threshold == 2
        assert session.votes == {INITIATOR_ID: True}

        call = mock_client.send_message.await_args
        assert call.args[0] == GROUP_ID
        assert "@target" in call.args[1]
        assert call.kwargs["reply_to_message_id"] == 42
        assert call.kwargs["reply_markup"] is not None
        mock_audit.log.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_requires_reply(self, handler, mock_client, make_message):
        await handle_voteban(handler, make_message(text="/voteban"), "")
        assert len(handler.registry) == 0
        assert "Répondez" in mock_client.send_message.await_args.args[1]

    @pytest.mark.asyncio
    async def test_private_chat_refused(self, handler, mock_client, make_message, target_message):
        msg = make_message(text="/voteban", chat_type="private", chat_id=INITIATOR_ID, reply_to=target_message)
        await handle_voteban(handler, msg, "")
        assert len(handler.registry) == 0
        assert "groupe" in mock_client.send_message.await_args.args[1]

    @pytest.mark.asyncio
    async def test_self_target_refused(self, handler, mock_client, make_message):
        own = make_message(user_id=INITIATOR_ID, message_id=41)
        await handle_voteban(handler, make_message(text="/voteban", user_id=INITIATOR_ID, reply_to=own), "")
        assert len(handler.registry) == 0
        assert "vous-même" in mock_client.send_message.await_args.args[1]

    @pytest.mark.asyncio
    async def test_bot_target_refused(self, handler, mock_client, make_message):
        bot_msg = make_message(user_id=777, username="some_bot", is_bot=True)
        await handle_voteban(handler, make_message(text="/voteban", reply_to=bot_msg), "")
        assert len(handler.registry) == 0
        assert "bot" in mock_client.send_message.await_args.args[1]

    @pytest.mark.asyncio
    async def test_admin_target_refused(self, handler, mock_client, voteban_command):
        mock_client.is_chat_admin.return_value = True
        await handle_voteban(handler, voteban_command, "")
        assert len(handler.registry) == 0
        assert "administrateur" in mock_client.send_message.await_args.args[1]

    @pytest.mark.asyncio
    async def test_admin_check_failure(self, handler, mock_client, mock_audit, voteban_command):
        mock_client.is_chat_admin.side_effect = TransportError("timeout")
        await handle_voteban(handler, voteban_command, "")
        assert len(handler.registry) == 0
        assert "Erreur réseau: timeout" in mock_audit.error.await_args.args[0]

    @pytest.mark.asyncio
    async def test_poll_send_failure(self, handler, mock_client, mock_audit, voteban_command):
        mock_client.send_message.side_effect = PlatformAPIError("not enough rights")
        await handle_voteban(handler, voteban_command, "")
        assert len(handler.registry) == 0
        assert "Envoi du voteban échoué" in mock_audit.error.await_args.args[0]

    @pytest.mark.asyncio
    async def test_forum_topic_without_reply_refused(self, handler, mock_client):
        """Dans un topic, /voteban sans réponse ne vise pas le créateur du topic"""
        group = Chat(id=GROUP_ID, type="supergroup", title="Forum", is_forum=True)
        topic_start = Message(
            message_id=5,
            date=NOW,
            chat=group,
            from_user=User(id=999, is_bot=False, first_name="Créateur"),
            forum_topic_created=ForumTopicCreated(name="Général", icon_color=0x6FB9F0),
        )
        command = Message(
            message_id=11,
            date=NOW,
            chat=group,
            from_user=User(id=INITIATOR_ID, is_bot=False, first_name="Init"),
            text="/voteban",
            is_topic_message=True,
            message_thread_id=5,
            reply_to_message=topic_start,
        )

        await handle_voteban(handler, to_chat_message(command), "")

        assert len(handler.registry) == 0
        mock_client.is_chat_admin.assert_not_awaited()
        assert "Répondez" in mock_client.send_message.await_args.args[1]


@pytest.mark.unit
class TestVoteButtons:

    @pytest.mark.asyncio
    async def test_against_vote_refreshes_poll(self, handler, mock_client, voteban_command, make_callback):
        session = await open_poll(handler, voteban_command)

        await handle_vote(handler, make_callback(200, CALLBACK_KEEP, username="bob"))

        assert session.tally() == (1, 1)
        assert answers(mock_client) == ["✅ Vote enregistré."]
        edit = mock_client.edit_message_text.await_args
        assert edit.args[:2] == (GROUP_ID, POLL_MESSAGE_ID)
        assert "@bob" in edit.args[2]

    @pytest.mark.asyncio
    async def test_ban_vote_reaching_threshold_resolves(
        self, handler, mock_client, voteban_command, make_callback
    ):
        await open_poll(handler, voteban_command)

        await handle_vote(handler, make_callback(200, CALLBACK_BAN))

        mock_client.ban_chat_member.assert_awaited_once_with(GROUP_ID, TARGET_ID)
        deleted = [call.args for call in mock_client.delete_message.await_args_list]
        assert deleted == [(GROUP_ID, 42), (GROUP_ID, POLL_MESSAGE_ID)]
        mock_client.edit_message_text.assert_not_awaited()
        assert len(handler.registry) == 0

    @pytest.mark.asyncio
    async def test_dismiss_only_deletes_poll(self, handler, mock_client, voteban_command, make_callback):
        await open_poll(handler, voteban_command)

        await handle_vote(handler, make_callback(200, CALLBACK_KEEP))
        await handle_vote(handler, make_callback(300, CALLBACK_KEEP))

        mock_client.ban_chat_member.assert_not_awaited()
        mock_client.delete_message.assert_awaited_once_with(GROUP_ID, POLL_MESSAGE_ID)
        assert len(handler.registry) == 0

    @pytest.mark.asyncio
    async def test_target_vote_rejected_with_alert(self, handler, mock_client, voteban_command, make_callback):
        session = await open_poll(handler, voteban_command)

        await handle_vote(handler, make_callback(TARGET_ID, CALLBACK_KEEP))

        assert TARGET_ID not in session.votes
        call = mock_client.answer_callback.await_args
        assert "propre cas" in call.args[1]
        assert call.kwargs["show_alert"] is True

    @pytest.mark.asyncio
    async def test_duplicate_vote_is_noop(self, handler, mock_client, voteban_command, make_callback):
        await open_poll(handler, voteban_command)

        await handle_vote(handler, make_callback(INITIATOR_ID, CALLBACK_BAN))

        assert "déjà voté" in answers(mock_client)[-1]
        mock_client.edit_message_text.assert_not_awaited()
        assert len(handler.registry) == 1

    @pytest.mark.asyncio
    async def test_unknown_poll(self, handler, mock_client, make_callback):
        await handle_vote(handler, make_callback(200, CALLBACK_BAN, message_id=12345))
        assert answers(mock_client) == ["ℹ️ Ce vote est terminé."]

    @pytest.mark.asyncio
    async def test_unknown_callback_data_ignored(self, handler, mock_client, voteban_command, make_callback):
        await open_poll(handler, voteban_command)
        await handle_vote(handler, make_callback(200, "something:else"))
        mock_client.answer_callback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refresh_failure_goes_to_audit(
        self, handler, mock_client, mock_audit, voteban_command, make_callback
    ):
        session = await open_poll(handler, voteban_command)
        mock_client.edit_message_text.side_effect = TransportError("down")

        await handle_vote(handler, make_callback(200, CALLBACK_KEEP))

        assert session.state is SessionState.OPEN
        assert "Erreur réseau: down" in mock_audit.error.await_args.args[0]

    @pytest.mark.asyncio
    async def test_concurrent_decisive_votes_resolve_once(
        self, handler, mock_client, voteban_command, make_callback
    ):
        await open_poll(handler, voteban_command)

        async def slow_delete(*args):
            await asyncio.sleep(0)

        mock_client.delete_message.side_effect = slow_delete

        await asyncio.gather(
            handle_vote(handler, make_callback(200, CALLBACK_BAN)),
            handle_vote(handler, make_callback(300, CALLBACK_BAN)),
        )

        mock_client.ban_chat_member.assert_awaited_once_with(GROUP_ID, TARGET_ID)
        assert mock_client.delete_message.await_count == 2
        assert "ℹ️ Ce vote est terminé." in answers(mock_client)
        assert len(handler.registry) == 0

    @pytest.mark.asyncio
    async def test_resolution_survives_answer_crash(
        self, handler, mock_client, voteban_command, make_callback
    ):
        """Une session résolue quitte toujours le registry"""
        await open_poll(handler, voteban_command)
        mock_client.answer_callback.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await handle_vote(handler, make_callback(200, CALLBACK_BAN))

        mock_client.ban_chat_member.assert_awaited_once_with(GROUP_ID, TARGET_ID)
        assert len(handler.registry) == 0

    @pytest.mark.asyncio
    async def test_click_while_poll_opening_gets_retry_hint(
        self, handler, mock_client, voteban_command, make_callback
    ):
        """Clic reçu entre l'envoi du poll et son enregistrement"""
        async def send_then_click(*args, **kwargs):
            await handle_vote(handler, make_callback(200, CALLBACK_BAN))
            return POLL_MESSAGE_ID

        mock_client.send_message.side_effect = send_then_click

        await handle_voteban(handler, voteban_command, "")

        assert answers(mock_client) == ["⏳ Le vote s'ouvre, réessayez dans un instant."]
        session = handler.registry.get(GROUP_ID, POLL_MESSAGE_ID)
        assert session.votes == {INITIATOR_ID: True}
        assert not handler.registry.is_opening(GROUP_ID)

        await handle_vote(handler, make_callback(200, CALLBACK_BAN))
        mock_client.ban_chat_member.assert_awaited_once_with(GROUP_ID, TARGET_ID)
