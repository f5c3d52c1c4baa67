"""Terminal chat client for a running relay server.

Usage:
    chat-cli                                # talks to http://localhost:5000
    CHAT_SERVER_URL=http://host:5000 chat-cli

Type a prompt and press Enter; an empty line or Ctrl-D quits.
"""
from __future__ import annotations

import asyncio
import os

import httpx

from chatbot.client.session import PROMPT_MAX_LENGTH, ChatSession, SessionSnapshot
from chatbot.utils.logger import setup_logging


def render(snapshot: SessionSnapshot) -> None:
    if snapshot.is_sending:
        print("assistant is typing...", flush=True)
        return
    if snapshot.error:
        print(f"! {snapshot.error}", flush=True)
        return
    if snapshot.messages and snapshot.messages[-1].role == "assistant":
        print(f"assistant> {snapshot.messages[-1].content}\n", flush=True)


async def main() -> None:
    setup_logging(log_level=os.environ.get("LOG_LEVEL", "WARNING"), log_format="console")
    base_url = os.environ.get("CHAT_SERVER_URL", "http://localhost:5000")

    # The server may take a while on long replies; no client-side deadline.
    async with httpx.AsyncClient(base_url=base_url, timeout=None) as http:
        session = ChatSession(http)
        session.subscribe(render)
        print(f"conversation {session.conversation_id} (empty line to quit)\n")

        while True:
            try:
                prompt = await asyncio.to_thread(input, "you> ")
            except EOFError:
                break
            if not prompt.strip():
                break
            if len(prompt.strip()) > PROMPT_MAX_LENGTH:
                print(f"! Prompt is too long (max {PROMPT_MAX_LENGTH} characters).", flush=True)
                continue
            await session.submit(prompt)


def run() -> None:
    """Console-script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
