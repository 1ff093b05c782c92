#!/usr/bin/env python3
"""
Interactive local chat harness (no HTTP, no widget).

Usage:
  python3 scripts/chat_local.py

What it does:
- Keeps the transcript for the session and sends it whole on every turn
- Runs each turn through HandleAssistantTurnUseCase, so bookings land in the configured store
- Prints the decided action and the reply text
"""
from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from receptionist.core.logging_config import configure_logging
from receptionist.domain.entities.message import ConversationTurn
from receptionist.wiring.dependencies import (
    get_booking_store,
    get_handle_assistant_turn_use_case,
    get_reply_composer,
)


def _print_header() -> None:
    print("\nLocal Chat Harness")
    print("-" * 60)
    print("Type your message and press Enter.")
    print("Commands: /new (new conversation), /bookings, /history, /quit, /help")
    print("-" * 60)


def _new_history() -> list[ConversationTurn]:
    return [ConversationTurn(role="assistant", content=get_reply_composer().greeting())]


def main() -> None:
    configure_logging()
    use_case = get_handle_assistant_turn_use_case()
    store = get_booking_store()
    history = _new_history()
    _print_header()
    print(f"(assistant) {history[0].content}")

    while True:
        try:
            user_text = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_text:
            continue

        cmd = user_text.lower()
        if cmd in ("/quit", "/exit"):
            print("Bye!")
            return
        if cmd == "/help":
            print("Commands:")
            print("  /new      -> start a new conversation")
            print("  /bookings -> list stored bookings")
            print("  /history  -> show last 10 messages")
            print("  /quit     -> exit")
            continue
        if cmd == "/new":
            history = _new_history()
            print(f"(assistant) {history[0].content}")
            continue
        if cmd == "/history":
            print("\n--- History (last 10) ---")
            for turn in history[-10:]:
                print(f"{turn.role}: {turn.content}")
            continue
        if cmd == "/bookings":
            print("\n--- Bookings ---")
            for booking in store.list():
                print(
                    f"{booking.id[:8]}  {booking.status.value:<9}  {booking.start_time.isoformat()}  "
                    f"{booking.service} ({booking.duration_minutes} min) for {booking.guest_name}"
                )
            continue

        history.append(ConversationTurn(role="user", content=user_text))
        outcome = use_case.execute(history)
        history.append(ConversationTurn(role="assistant", content=outcome.reply))

        print("\n--- Decision ---")
        print(f"action: {outcome.action.to_dict()}")
        if outcome.created_booking:
            print(f"created: {outcome.created_booking.id}")
        if outcome.updated_booking:
            print(f"updated: {outcome.updated_booking.id} -> {outcome.updated_booking.status.value}")

        print("\n--- Reply ---")
        print(outcome.reply)
        print("-" * 60)


if __name__ == "__main__":
    main()
