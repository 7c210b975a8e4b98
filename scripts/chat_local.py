#!/usr/bin/env python3
"""
Interactive local chat harness (no HTTP).

Usage:
  python3 scripts/chat_local.py

What it does:
- Keeps the chat history for the session
- Sends it through the same ConversationalAgentUseCase the API uses
- Prints each dispatched tool result (type, stage, error) and the reply text
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.domain.entities.message import ChatMessage  # noqa: E402
from app.wiring.dependencies import get_conversational_agent  # noqa: E402


def _print_header() -> None:
    print("\nLocal Scheduling Chat")
    print("-" * 60)
    print("Type your message and press Enter.")
    print("Commands: /new (new conversation), /quit")
    print("-" * 60)


def main() -> None:
    agent = get_conversational_agent()
    history: list[ChatMessage] = []
    _print_header()

    while True:
        try:
            text = input("you> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return

        if not text:
            continue
        if text == "/quit":
            return
        if text == "/new":
            history = []
            print("(new conversation)")
            continue

        history.append(ChatMessage(role="user", content=text))
        reply = agent.respond(history)

        for envelope in reply.envelopes:
            result = envelope["functionResult"]
            stage = (result.get("data") or {}).get("stage", "-")
            error = envelope.get("error", {}).get("type", "-")
            print(f"  [tool] type={result['type']} stage={stage} error={error}")

        print(f"bot> {reply.text}")
        history.append(ChatMessage(role="assistant", content=reply.text))


if __name__ == "__main__":
    main()
