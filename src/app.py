"""Application entry point for the spamscope bot."""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from telethon import events

import settings
from adapters.lua_scorer import LuaScriptScorer
from adapters.sqlite_storage import open_storage
from adapters.telegram_admins import TelegramAdminAuthorizer, TelegramAdminNotifier
from adapters.telegram_mapper import build_context
from client import bot_token, build_client
from core.commands import parse_command
from core.config import SCORER_KEYWORDS, SCORER_LUA, ScoringConfig
from core.orchestrator import ScoringOrchestrator
from core.ports import ScoringFunction, StoragePort
from core.processor import MessageProcessor
from core.rule_cache import RuleCache
from core.rules_engine import KeywordRuleScorer
from logging_setup import configure_logging

NAME = "SPAMSCOPE"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _configure_logging() -> None:
    # Secrets to mask are read from the environment, so .env must be loaded first.
    load_dotenv()
    configure_logging(settings.LOGGING, settings.PROJECT_ROOT)


def build_scorer(config: ScoringConfig, cache: RuleCache) -> ScoringFunction:
    """Pick the scoring variant named in the configuration."""

    if config.scorer == SCORER_LUA:
        return LuaScriptScorer(config.script_path, config.instruction_limit)
    if config.scorer == SCORER_KEYWORDS:
        return KeywordRuleScorer(cache)
    raise RuntimeError(f"scoring.scorer must be '{SCORER_LUA}' or '{SCORER_KEYWORDS}'")


def build_orchestrator(storage: StoragePort, config: ScoringConfig) -> ScoringOrchestrator:
    cache = RuleCache()
    scorer = build_scorer(config, cache)
    return ScoringOrchestrator(
        storage=storage,
        scorer=scorer,
        cache=cache,
        threshold=config.spam_threshold,
    )


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting spamscope")

    storage = open_storage(settings.DB_PATH)
    orchestrator = build_orchestrator(storage, settings.SCORING)
    logger.info("Selected scorer - %s", settings.SCORING.scorer)

    client = build_client()
    client.start(bot_token=bot_token())
    me = client.loop.run_until_complete(client.get_me())
    bot_username = getattr(me, "username", None)

    processor = MessageProcessor(
        orchestrator=orchestrator,
        notifier=TelegramAdminNotifier(client, settings.NOTIFICATIONS.format),
        authorizer=TelegramAdminAuthorizer(client),
        snippet_chars=settings.NOTIFICATIONS.snippet_chars,
    )

    # Single handler keeps Telethon integration minimal and defers all
    # decisions to the core processor.
    @client.on(events.NewMessage(incoming=True))
    async def handler(event) -> None:
        try:
            context = await build_context(event.message)
            command = parse_command(context.text, bot_username)
            if command is None:
                await processor.handle_message(context)
                return
            reply = await processor.handle_command(context, command)
            if reply:
                await event.respond(reply)
        except Exception:
            logger.exception("Error while processing message")

    logger.info("Bot started! Listening for incoming messages...")
    try:
        client.run_until_disconnected()
    finally:
        storage.close()


def _check(text: str) -> None:
    _configure_logging()
    storage = open_storage(settings.DB_PATH)
    try:
        orchestrator = build_orchestrator(storage, settings.SCORING)
        evaluation = orchestrator.evaluate(text)
    finally:
        storage.close()
    verdict = "spam" if evaluation.is_spam else "not spam"
    print(f"score={evaluation.score:g} threshold={orchestrator.threshold:g} -> {verdict}")


def _add_rule(keyword: str, score: float) -> None:
    _configure_logging()
    storage = open_storage(settings.DB_PATH)
    try:
        orchestrator = build_orchestrator(storage, settings.SCORING)
        rule = orchestrator.add_rule(keyword, score)
        total = len(orchestrator.snapshot_rules())
    finally:
        storage.close()
    print(f"Rule added: {rule.keyword} = {rule.score:g} ({total} rules)")


def _reputation(sender_id: str) -> None:
    _configure_logging()
    storage = open_storage(settings.DB_PATH)
    try:
        record = storage.get_record(sender_id)
    finally:
        storage.close()
    if record is None:
        print(f"{sender_id}: no messages recorded")
        return
    print(f"{sender_id}: spam_score={record.spam_flag_count} messages={record.message_count}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="spamscope")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the bot")

    check_parser = subparsers.add_parser("check", help="Score a text with the configured scorer")
    check_parser.add_argument("text")

    add_rule_parser = subparsers.add_parser("add-rule", help="Add a keyword scoring rule")
    add_rule_parser.add_argument("keyword")
    add_rule_parser.add_argument("score", type=float)

    reputation_parser = subparsers.add_parser("reputation", help="Show a sender's counters")
    reputation_parser.add_argument("sender_id")

    args = parser.parse_args(argv)
    if args.command == "check":
        _check(args.text)
        return
    if args.command == "add-rule":
        _add_rule(args.keyword, args.score)
        return
    if args.command == "reputation":
        _reputation(args.sender_id)
        return
    _run()


if __name__ == "__main__":
    main()
