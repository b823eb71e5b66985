#!/usr/bin/env python
"""Ask the professor assistant a question from the command line.

Usage:
    python -m scripts.ask "Who teaches algorithms well?"
    python -m scripts.ask --conversation chat.json
    python -m scripts.ask --show-prompt "Easy graders in biology?"

Runs the same pipeline as POST /api/chat against the configured providers
and writes the reply to stdout as it streams.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from professor_rag.api.routes import parse_conversation
from professor_rag.exceptions import MalformedRequestError, ProfessorRAGError
from professor_rag.llm.models import Message
from professor_rag.logging_config import get_logger, setup_logging
from professor_rag.rag.pipeline import create_pipeline

logger = get_logger(__name__)


async def ask(conversation: list[Message], show_prompt: bool = False) -> bool:
    """Run one conversation through the pipeline.

    Args:
        conversation: Messages to send; the last one is the query.
        show_prompt: Print the augmented messages instead of calling the
            chat provider.

    Returns:
        True on success, False if a provider step failed.
    """
    pipeline = create_pipeline()

    try:
        if show_prompt:
            messages = await pipeline.build_messages(conversation)
            await pipeline.close()
            for message in messages:
                print(f"--- {message.role.value} ---")
                print(message.content)
            return True

        stream = await pipeline.open_stream(conversation)
    except ProfessorRAGError as e:
        await pipeline.close()
        logger.error(f"{e.code.value}: {e.message}", extra={"details": e.details})
        return False

    try:
        async for chunk in pipeline.relay(stream):
            sys.stdout.write(chunk.decode("utf-8"))
            sys.stdout.flush()
    except ProfessorRAGError as e:
        logger.error(f"{e.code.value}: {e.message}", extra={"details": e.details})
        return False

    sys.stdout.write("\n")
    return True


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Ask the professor assistant a question",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "question",
        nargs="?",
        default=None,
        help="Question to ask as a single user message",
    )
    parser.add_argument(
        "--conversation",
        type=Path,
        default=None,
        help="Path to a JSON array of {role, content} messages",
    )
    parser.add_argument(
        "--show-prompt",
        action="store_true",
        help="Print the augmented prompt instead of streaming a reply",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level",
    )

    args = parser.parse_args()
    setup_logging(level=args.log_level, json_output=False)

    if args.conversation is not None:
        try:
            conversation = parse_conversation(args.conversation.read_bytes())
        except MalformedRequestError as e:
            parser.error(f"{args.conversation}: {e.message}")
    elif args.question:
        conversation = [Message.user(args.question)]
    else:
        parser.error("a question or --conversation is required")

    ok = asyncio.run(ask(conversation, show_prompt=args.show_prompt))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
