"""
Command line entry point.

Usage:
    # Free-form prompt with the general-purpose tools available
    python -m revieworder.cli prompt "Summarize changes.diff"

    # Inspect the chunks of a diff file
    python -m revieworder.cli read-diff --path changes.diff

    # Order a diff file for review
    python -m revieworder.cli order-diff --input changes.diff --output ordered.md --strategy graph

    # Order the staged changes of the current repository
    python -m revieworder.cli order-diff --git staged --output ordered.md

    # Print tool schemas
    python -m revieworder.cli show-schemas

    # Run the HTTP API
    python -m revieworder.cli serve --port 8000
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from revieworder.config.settings import settings
from revieworder.core.context import new_run_id, run_id_var
from revieworder.domain.schemas.ordering import OrderRequest
from revieworder.exceptions.errors import ReviewOrderError
from revieworder.pipelines.diff_parser import read_diff_file
from revieworder.services.export import render_result, write_output
from revieworder.services.ordering_service import OrderingService, default_conversation_logger
from revieworder.shared.logging import setup_logging


def build_service() -> OrderingService:
    return OrderingService(conversation_logger=default_conversation_logger())


async def cmd_prompt(args: argparse.Namespace) -> None:
    service = build_service()
    response = await service.prompt(args.text, args.system, args.key)
    print(response)


async def cmd_read_diff(args: argparse.Namespace) -> None:
    chunks = read_diff_file(args.path)
    print(f"Total chunks: {len(chunks)}")
    for chunk in chunks:
        print(f"\n--- {chunk.id} ---")
        print(chunk.patch)


async def cmd_order_diff(args: argparse.Namespace) -> None:
    if not args.input and not args.git:
        raise SystemExit("order-diff needs --input or --git")

    service = build_service()
    req = OrderRequest(diff_path=args.input, diff_target=args.git, strategy=args.strategy)
    result = await service.order(req)

    written = write_output(args.output, render_result(result, args.output))
    print(f"Ordered {len(result.chunks)} chunks ({result.strategy}) -> {written}")
    if result.groups:
        for tag, group in result.groups.items():
            print(f"  {tag}: {len(group)}")


async def cmd_show_schemas(_: argparse.Namespace) -> None:
    service = build_service()
    specs = [spec.model_dump() for spec in service.registry.describe_all()]
    print(json.dumps(specs, indent=2))


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run("revieworder.main:app", host=args.host, port=args.port)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Order git diff chunks for code review",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # prompt command
    prompt_parser = subparsers.add_parser("prompt", help="Send a free-form prompt")
    prompt_parser.add_argument("text", help="Prompt text")
    prompt_parser.add_argument("--system", help="System prompt")
    prompt_parser.add_argument("--key", help="Conversation log key")

    # read-diff command
    read_parser = subparsers.add_parser("read-diff", help="Print the chunks of a diff file")
    read_parser.add_argument("--path", required=True, help="Diff file path")

    # order-diff command
    order_parser = subparsers.add_parser("order-diff", help="Order diff chunks for review")
    order_parser.add_argument("--input", "-i", help="Diff file path")
    order_parser.add_argument("--git", help="Git diff target: staged, worktree or a commit range")
    order_parser.add_argument("--output", "-o", required=True, help="Output file (.md or .json)")
    order_parser.add_argument(
        "--strategy",
        choices=["tags", "graph"],
        default=settings.default_strategy,
        help="Ordering strategy preset",
    )

    # show-schemas command
    subparsers.add_parser("show-schemas", help="Print tool input schemas")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    setup_logging()

    if args.command == "serve":
        cmd_serve(args)
        return

    commands = {
        "prompt": cmd_prompt,
        "read-diff": cmd_read_diff,
        "order-diff": cmd_order_diff,
        "show-schemas": cmd_show_schemas,
    }
    run_id_var.set(new_run_id())
    try:
        asyncio.run(commands[args.command](args))
    except ReviewOrderError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
