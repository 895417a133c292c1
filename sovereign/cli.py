"""
Sovereign CLI - Command-line interface for the engine.

Usage:
    sovereign validate <cards>      Load and validate card definitions
    sovereign decks [--cards PATH]  List decks and cards
    sovereign play [options]        Play a game in the terminal
    sovereign serve [options]       Run the REST API (uvicorn)
"""

import argparse
import asyncio
import logging
import sys

from .logging_config import setup_logging


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Sovereign - Turn-based civilization engine",
        prog="sovereign",
    )
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    parser.add_argument("--log-file", help="Also write JSON-lines logs to this file")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate card definitions")
    validate_parser.add_argument("cards", help="Path to a .json/.xml file or a directory")

    # Decks command
    decks_parser = subparsers.add_parser("decks", help="List decks and cards")
    decks_parser.add_argument("--cards", help="Card definitions (default: built-in decks)")

    # Play command
    from .bots import POLICY_NAMES
    play_parser = subparsers.add_parser("play", help="Play a game in the terminal")
    play_parser.add_argument("--cards", help="Card definitions (default: built-in decks)")
    play_parser.add_argument("--turns", type=int, default=None, help="Stop after N turns")
    play_parser.add_argument("--tick-ms", type=int, default=None, help="Milliseconds between turns")
    play_parser.add_argument("--turns-per-card", type=int, default=None, help="Turns between cards")
    play_parser.add_argument(
        "--policy", default="human", choices=["human", *POLICY_NAMES],
        help="Who picks choices (default: human)",
    )
    play_parser.add_argument("--seed", type=int, default=None, help="Random seed")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the REST API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    args = parser.parse_args(argv)
    setup_logging(getattr(logging, args.log_level), log_file=args.log_file)

    if args.command == "validate":
        return cmd_validate(args)
    elif args.command == "decks":
        return cmd_decks(args)
    elif args.command == "play":
        return cmd_play(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        return 1


def cmd_validate(args):
    """Load card definitions and check them against the default capitals."""
    from .card_schema import validate_catalog
    from .engine_core import CapitalRegistry
    from .loader import build_catalog

    result = build_catalog(args.cards)
    print(f"Load status: {result.status.value}")
    print(f"Files: {', '.join(result.files_loaded) or '-'}")
    print(f"Cards: {result.catalog.card_count} in {len(result.catalog.deck_names)} deck(s)")

    validation = validate_catalog(
        result.catalog, capital_names=CapitalRegistry.create_default().names()
    )
    warnings = result.warnings + validation.warnings
    errors = result.errors + validation.errors

    if warnings:
        print("\nWarnings:")
        for w in warnings:
            print(f"  - {w}")

    if errors:
        print("\nErrors:")
        for e in errors:
            print(f"  - {e}")

    return 0 if result.ok and validation.valid and not result.errors else 1


def cmd_decks(args):
    """List decks and cards."""
    from .loader import build_catalog

    result = build_catalog(args.cards)
    if not result.ok:
        for e in result.errors:
            print(f"Error: {e}")
        return 1

    for deck, cards in result.catalog.get_all_decks().items():
        print(f"{deck} ({len(cards)})")
        for card in cards:
            labels = ", ".join(c.label for c in card.choices)
            print(f"  {card.id:<16} {card.title}  [{labels}]")
    return 0


def cmd_play(args):
    """Play a game in the terminal."""
    from .bots import create_policy
    from .config import GameConfig

    try:
        config = GameConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.cards:
        config.cards_path = args.cards
    if args.turns is not None:
        config.max_turns = args.turns
    if args.tick_ms is not None:
        config.tick_interval_ms = args.tick_ms
    if args.turns_per_card is not None:
        config.turns_per_card = args.turns_per_card
    if args.seed is not None:
        config.random_seed = args.seed

    try:
        config.validate()
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    policy = None
    if args.policy != "human":
        policy = create_policy(args.policy, seed=config.random_seed)

    try:
        asyncio.run(_play(config, policy))
    except KeyboardInterrupt:
        print("\nInterrupted")
    return 0


async def _play(config, policy):
    from .session import SessionManager

    manager = SessionManager()
    session = manager.create_session(config, policy=policy)
    session.add_listener(lambda event: _print_event(session, event))

    print(f"Session {session.session_id}")
    print(_format_state(session))

    session.start()
    prompter = None
    if policy is None:
        prompter = asyncio.create_task(_prompt_choices(session))

    try:
        await session.wait()
    finally:
        if prompter is not None:
            prompter.cancel()
        await manager.end_session(session.session_id)

    print(f"\nGame over after turn {session.current_turn} ({session.status.value})")
    print(_format_state(session))


async def _prompt_choices(session):
    """Ask the player for a choice whenever a card is waiting."""
    from .errors import ChoiceLockedError

    drawn = asyncio.Event()
    session.card_manager.on_card_drawn.subscribe(lambda card, choices: drawn.set())

    while True:
        await drawn.wait()
        drawn.clear()

        orchestrator = session.orchestrator
        while orchestrator.has_pending_choice():
            pending = orchestrator.pending
            for i, choice in enumerate(pending.card.choices, start=1):
                locked = "" if session.card_manager.is_available(choice) else "  [locked]"
                print(f"  {i}. {choice.label}{locked}")

            try:
                raw = await asyncio.to_thread(input, "Choice> ")
            except EOFError:
                session.scheduler.stop()
                return

            try:
                orchestrator.submit_choice_index(int(raw) - 1)
            except ChoiceLockedError as e:
                print(f"  {e}")
            except ValueError:
                print(f"  Enter a number between 1 and {len(pending.card.choices)}")


def _print_event(session, event):
    if event.kind == "turn_ended":
        print(_format_state(session, prefix=f"Turn {event.turn:>3}"))
    elif event.kind == "card_drawn":
        card = session.card_manager.catalog.get_by_id(
            session.card_manager.current_deck or "", event.payload["card_id"]
        )
        print(f"\n== {event.payload['title']} ==")
        if card is not None and card.description:
            print(card.description)
        if not event.payload["available"]:
            print("  (no choice available, card skipped)")
    elif event.kind == "choice_applied":
        effects = ", ".join(event.payload["effects"]) or "no effect"
        print(f"  -> {event.payload['label']}: {effects}\n")


def _format_state(session, prefix="State"):
    resources = "  ".join(f"{k} {v}" for k, v in session.world.ledger.snapshot().items())
    capitals = "  ".join(
        f"{c.name} {c.health:g}%" for c in session.world.registry.get_all()
    )
    return f"{prefix} | {resources} | {capitals}"


def cmd_serve(args):
    """Run the REST API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        return 1

    uvicorn.run(
        "sovereign.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
