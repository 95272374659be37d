"""
Command-line client for the delegating agent.

    python -m delegator.cli "Show me a pie chart"
    python -m delegator.cli            # interactive
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Optional, TextIO

from delegator.api.deps import build_agent
from delegator.errors import DelegatorError
from delegator.orchestrator import ConversationMemory, DelegatingAgent
from delegator.rag.references import format_references
from delegator.types import (
    ChartReference,
    EventType,
    ImageReference,
    Query,
    RetrievalReference,
    StreamEvent,
)


def print_event(event: StreamEvent, out: TextIO = sys.stdout) -> None:
    """Render one event for a terminal."""
    if event.type is EventType.THINKING:
        print("Analyzing query...", file=out)
    elif event.type is EventType.ROUTE:
        labels = ", ".join(r.value for r in event.data.labels)
        print(f"Route: {labels} ({event.data.rationale})", file=out)
        print("Answer:", file=out)
    elif event.type is EventType.TOKEN:
        out.write(event.data)
        out.flush()
    elif event.type is EventType.SOURCES:
        print(f"\n\nSources: {event.data}", file=out)
    elif event.type is EventType.CHART:
        print(f"[chart: {event.data.kind.value}]", file=out)
    elif event.type is EventType.IMAGE:
        print(f"[image: {event.data.url}]", file=out)
    elif event.type is EventType.DONE:
        print(file=out)
        print_references(event.data.references, out)
    elif event.type is EventType.ERROR:
        print(f"\n{event.data}", file=out)


def print_references(references, out: TextIO = sys.stdout) -> None:
    retrieval = [r for r in references if isinstance(r, RetrievalReference)]
    if retrieval:
        print(format_references(retrieval), file=out)
    for ref in references:
        if isinstance(ref, ChartReference):
            datasets = ref.config.get("data", {}).get("datasets", [])
            print(f"Chart ({ref.kind.value}): {len(datasets)} dataset(s)", file=out)
        elif isinstance(ref, ImageReference):
            print(f"Image ({ref.model}): {ref.url}", file=out)


def run_query(
    agent: DelegatingAgent,
    text: str,
    image_url: Optional[str] = None,
    stream: bool = True,
    memory: Optional[ConversationMemory] = None,
) -> bool:
    """Run one query and print it. Returns False when the query failed."""
    started = time.monotonic()
    history = tuple(memory.get_history()) if memory is not None else ()
    query = Query(text=text, image_url=image_url, history=history)
    ok = True
    if stream:
        tokens = []
        for event in agent.stream(query):
            if event.type is EventType.TOKEN:
                tokens.append(event.data)
            elif event.type is EventType.DONE and memory is not None:
                memory.add_turn(text, "".join(tokens))
            elif event.type is EventType.ERROR:
                ok = False
            print_event(event)
    else:
        try:
            resp = agent.answer(query)
        except DelegatorError as e:
            print(str(e))
            return False
        print(resp.answer)
        print_references(resp.references)
        if memory is not None:
            memory.add_turn(text, resp.answer)
    print(f"Completed in {time.monotonic() - started:.2f}s")
    return ok


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Ask a question; it is routed to retrieval, chart, image or a direct answer."
    )
    parser.add_argument("query", nargs="?", help="Question to ask (omit for interactive mode)")
    parser.add_argument("--image-url", default=None, help="Source image to edit")
    parser.add_argument(
        "--no-stream",
        action="store_true",
        help="Wait for the full answer instead of streaming events",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    agent, _ = build_agent()
    stream = not args.no_stream

    if args.query:
        ok = run_query(agent, args.query, args.image_url, stream=stream)
        sys.exit(0 if ok else 1)

    memory = ConversationMemory()
    print("Type a question, or 'exit' to quit.")
    while True:
        try:
            text = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not text:
            continue
        if text.lower() in ("exit", "quit"):
            break
        run_query(agent, text, stream=stream, memory=memory)


if __name__ == "__main__":
    main()
