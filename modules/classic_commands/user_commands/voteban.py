"""
Voteban Commands Module - /voteban + boutons de vote
===================================================
/voteban en réponse à un message → poll "Ban / Garder" avec seuil configurable.

Pattern: handler(MessageHandler, event, ...) -> None
"""

import logging

from core.errors import (
    AdminTargetError,
    DuplicatePollError,
    DuplicateVoteError,
    NotFoundError,
    PlatformError,
    SelfVoteError,
    SessionClosedError,
    ValidationError,
)
from core.message_types import CallbackEvent, ChatMessage
from modules.voteban.display import build_keyboard, parse_callback, render_text
from modules.voteban.session import VotebanSession

LOGGER = logging.getLogger("varta.commands.voteban")


def vote_error_text(error: ValidationError) -> str:
    """Texte affiché au votant pour un vote refusé"""
    if isinstance(error, SelfVoteError):
        return "⛔ Vous ne pouvez pas voter sur votre propre cas."
    if isinstance(error, DuplicateVoteError):
        return "ℹ️ Vous avez déjà voté ainsi."
    if isinstance(error, SessionClosedError):
        return "ℹ️ Ce vote est terminé."
    return f"⛔ {error.message}"


async def _validate_target(handler, msg: ChatMessage) -> ChatMessage:
    """
    Vérifie que /voteban vise un message valide.

    Returns:
        Le message visé

    Raises:
        ValidationError: pas de réponse, hors groupe, cible bot
        SelfVoteError: l'initiateur se vise lui-même
        AdminTargetError: la cible est admin du groupe
        PlatformError: statut de la cible impossible à vérifier
    """
    if not msg.is_group:
        raise ValidationError("Le voteban ne fonctionne que dans un groupe.")

    target = msg.reply_to
    if target is None:
        raise ValidationError("Répondez au message concerné avec /voteban.")

    if target.sender.user_id == msg.sender.user_id:
        raise SelfVoteError(msg.sender.user_id)

    if target.sender.is_bot:
        raise ValidationError("Impossible de lancer un voteban contre un bot.")

    if await handler.client.is_chat_admin(msg.chat_id, target.sender.user_id):
        raise AdminTargetError("Impossible de lancer un voteban contre un administrateur.")

    return target


async def handle_voteban(handler, msg: ChatMessage, args: str = "") -> None:
    """
    /voteban (en réponse à un message) - Ouvre un vote de bannissement

    L'initiateur compte comme premier vote "ban".
    """
    try:
        target = await _validate_target(handler, msg)
    except SelfVoteError:
        await handler.reply(msg, "⛔ Impossible de lancer un voteban contre vous-même.")
        return
    except ValidationError as e:
        await handler.reply(msg, f"⛔ {e.message}")
        return
    except PlatformError as e:
        await handler.audit.error(f"❌ Vérification des droits de l'utilisateur échouée. {e.describe()}")
        await handler.reply(msg, "⚠️ Impossible de vérifier le membre visé, réessayez plus tard.")
        return

    session = VotebanSession(
        poll_id=0,
        chat_id=msg.chat_id,
        target_user_id=target.sender.user_id,
        target_display_name=target.sender.display_name,
        target_message_id=target.message_id,
        initiator_id=msg.sender.user_id,
        initiator_name=msg.sender.display_name,
        threshold=handler.settings.voteban_threshold,
    )

    registry = handler.registry
    # poll_id n'est connu qu'après l'envoi: les clics reçus entre-temps
    # voient is_opening() et reçoivent un message "réessayez"
    with registry.opening(msg.chat_id):
        try:
            poll_id = await handler.client.send_message(
                msg.chat_id,
                render_text(session),
                reply_markup=build_keyboard(session),
                reply_to_message_id=target.message_id,
            )
        except PlatformError as e:
            await handler.audit.error(f"❌ Envoi du voteban échoué. {e.describe()}")
            return

        session.poll_id = poll_id
        async with registry.lock(msg.chat_id, poll_id):
            try:
                registry.create(session)
            except DuplicatePollError as e:
                await handler.audit.error(f"❌ {e.message}")
                return

    LOGGER.info(
        f"🗳️ VOTEBAN | {msg.sender.display_name} → {target.sender.display_name} "
        f"(poll {poll_id}, seuil {session.threshold})"
    )
    await handler.audit.log(
        f"🗳️ {msg.sender.display_name} a lancé un voteban contre "
        f"{target.sender.display_name} ({target.sender.user_id})."
    )


async def handle_vote(handler, event: CallbackEvent) -> None:
    """
    Clic sur "Ban" / "Garder" d'un poll voteban.

    Sous le lock du poll: relecture de la session, vote, puis refresh
    de l'affichage ou résolution (qui retire la session).
    """
    wants_ban = parse_callback(event.data)
    if wants_ban is None:
        LOGGER.debug(f"Unknown callback data: {event.data}")
        return

    registry = handler.registry
    async with registry.lock(event.chat_id, event.message_id):
        try:
            session = registry.require(event.chat_id, event.message_id)
        except NotFoundError:
            if registry.is_opening(event.chat_id):
                await handler.answer(event, "⏳ Le vote s'ouvre, réessayez dans un instant.")
                return
            registry.remove(event.chat_id, event.message_id)
            await handler.answer(event, "ℹ️ Ce vote est terminé.")
            return

        try:
            outcome = session.cast_vote(event.sender.user_id, wants_ban, event.sender.display_name)
        except ValidationError as e:
            await handler.answer(event, vote_error_text(e), show_alert=True)
            return

        if outcome.state.is_resolved:
            # Session résolue: elle doit quitter le registry quoi qu'il arrive
            try:
                await handler.answer(event, "✅ Vote enregistré.")
            finally:
                await handler.enforcer.resolve(session, outcome.state)
            return

        await handler.answer(event, "✅ Vote enregistré.")

        try:
            await handler.client.edit_message_text(
                session.chat_id,
                session.poll_id,
                render_text(session),
                reply_markup=build_keyboard(session),
            )
        except PlatformError as e:
            await handler.audit.error(f"❌ Mise à jour du voteban {session.poll_id} échouée. {e.describe()}")
