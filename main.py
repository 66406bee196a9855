#!/usr/bin/env python3
"""
VartaBot - Modérateur automatique pour groupes Telegram

════════════════════════════════════════════════════════════════════════════
- Ban automatique: messages transférés d'autres chats, mots interdits
- Voteban: vote communautaire pour les cas limites
- Log d'audit: console + messages privés aux admins
════════════════════════════════════════════════════════════════════════════
"""

import argparse
import asyncio
import logging
import pathlib
import sys

import pydantic
from aiogram import Bot
from aiogram.utils.token import TokenValidationError

from core.audit_logger import AuditLog
from core.config import DEFAULT_CONFIG_PATH, load_settings
from core.message_bus import MessageBus
from core.message_handler import MessageHandler
from database.word_store import WordStore
from modules.moderation.enforcer import Enforcer
from modules.voteban.registry import VotebanRegistry
from tgapi.client import TelegramClient
from tgapi.transport import TelegramTransport

# Logger will be configured in setup_logging()
LOGGER = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(description="VartaBot - Telegram group moderator")
    parser.add_argument(
        '--config',
        type=str,
        default=DEFAULT_CONFIG_PATH,
        help=f'Path to YAML config file (default: {DEFAULT_CONFIG_PATH})'
    )
    parser.add_argument(
        '--db',
        type=str,
        default=None,
        help='Path to database file (overrides DATABASE_PATH)'
    )
    parser.add_argument(
        '--log-dir',
        type=str,
        default='logs',
        help='Directory for log files (default: logs)'
    )
    return parser.parse_args(argv)


def setup_logging(log_dir='logs'):
    """
    Configure le root logger: fichier + console.

    Structure:
        logs/
        └── varta.log   (instance + audit)
    """
    logs_base = pathlib.Path(log_dir)
    logs_base.mkdir(parents=True, exist_ok=True)
    log_file = logs_base / "varta.log"

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s %(message)s",
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler()
        ],
        force=True  # Override any existing config
    )
    # aiogram logge chaque update en INFO
    logging.getLogger("aiogram.event").setLevel(logging.WARNING)

    return log_file


async def main(argv=None):
    """Main entry point: config, wiring, polling"""
    args = parse_args(argv)
    log_file = setup_logging(args.log_dir)

    overrides = {"database_path": args.db} if args.db else {}
    try:
        settings = load_settings(args.config, **overrides)
    except pydantic.ValidationError as e:
        LOGGER.error(f"❌ Configuration invalide:\n{e}")
        sys.exit(1)

    try:
        bot = Bot(token=settings.bot_token)
    except TokenValidationError as e:
        LOGGER.error(f"❌ BOT_TOKEN invalide: {e}")
        sys.exit(1)

    bus = MessageBus()
    client = TelegramClient(bot)
    word_store = WordStore(settings.database_path)
    registry = VotebanRegistry()
    audit = AuditLog(client, settings.admin_ids)
    enforcer = Enforcer(client, audit, registry)
    MessageHandler(bus, settings, client, word_store, registry, enforcer, audit)
    transport = TelegramTransport(bot, bus)

    print("=" * 70)
    print("VartaBot - Telegram group moderator")
    print(f"📝 Logs: {log_file}")
    print(f"🗄️ Database: {settings.database_path} ({word_store.count()} banwords)")
    print(f"🗳️ Voteban threshold: {settings.voteban_threshold}")
    print(f"👮 Audit recipients: {len(settings.admin_ids)}")
    print("💬 Commands: /addword /removeword /listwords /voteban")
    print('   Press CTRL+C to shutdown...')
    print("=" * 70)

    await audit.log("✅ Bot démarré avec succès !")

    try:
        await transport.start()
    except Exception as e:
        await audit.error(f"❌ Problème de polling: {e}")
        raise
    finally:
        LOGGER.info("Arrêt...")
        await transport.stop()
        await bus.wait_all()
        await bot.session.close()
        LOGGER.info(f"Terminé ({enforcer.ban_count} bans, {len(registry)} votebans non résolus)")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nAu revoir !")
    except Exception as e:
        LOGGER.error(f"Erreur fatale: {e}", exc_info=True)
        sys.exit(1)
