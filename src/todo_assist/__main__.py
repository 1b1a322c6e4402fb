"""CLI entry point for todo-assist."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from todo_assist.ai.models import RequestContext
from todo_assist.app import TodoAssistApp
from todo_assist.config import AppConfig, load_config
from todo_assist.log import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="todo-assist",
        description="To-do list assistant backed by Gemini function calling",
    )
    parser.add_argument("-c", "--config", default="config.yaml", help="Path to config file")
    parser.add_argument("-e", "--env", default=".env", help="Path to .env file")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # chat command
    chat_parser = subparsers.add_parser("chat", help="Ask the assistant one question")
    chat_parser.add_argument("prompt", help="Message for the assistant")
    _add_identity_args(chat_parser)
    chat_parser.add_argument("--user-name", default=None, help="Display name used in the system prompt")

    # add command
    add_parser = subparsers.add_parser("add", help="Create a to-do directly")
    add_parser.add_argument("content", help="To-do content")
    add_parser.add_argument("--date", required=True, help="Target date (YYYY-MM-DD)")
    add_parser.add_argument("--note", default=None, help="Optional note")
    _add_identity_args(add_parser)

    # list command
    list_parser = subparsers.add_parser("list", help="List to-dos as the assistant sees them")
    list_parser.add_argument("--user-seq", type=int, required=True, help="Owner user number")
    list_parser.add_argument(
        "--status", choices=["completed", "incomplete", "overdue"], default=None
    )
    list_parser.add_argument("--days", type=int, default=None, help="Offset from today in days")

    # remove command
    remove_parser = subparsers.add_parser("remove", help="Delete a to-do")
    remove_parser.add_argument("todo_seq", type=int, help="To-do number")
    _add_identity_args(remove_parser)

    # config-check command
    subparsers.add_parser("config-check", help="Validate configuration")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(2)

    if args.command == "config-check":
        _check_config(args.config, args.env)
        return

    config = _load_or_exit(args.config, args.env)
    setup_logging(config.log_level)

    if args.command == "chat":
        asyncio.run(_chat(config, args))
    elif args.command == "add":
        asyncio.run(_add(config, args))
    elif args.command == "list":
        asyncio.run(_list(config, args))
    elif args.command == "remove":
        asyncio.run(_remove(config, args))


def _add_identity_args(sub: argparse.ArgumentParser) -> None:
    sub.add_argument("--user-seq", type=int, required=True, help="Owner user number")
    sub.add_argument("--user-id", required=True, help="Login id recorded in audit columns")
    sub.add_argument("--ip", default="127.0.0.1", help="Client address recorded in audit columns")


def _load_or_exit(config_path: str, env_path: str) -> AppConfig:
    try:
        return load_config(config_path, env_path)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Copy config.example.yaml to config.yaml and .env.example to .env first.")
        sys.exit(1)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)


def _check_config(config_path: str, env_path: str) -> None:
    """Validate configuration and print summary."""
    config = _load_or_exit(config_path, env_path)
    print(f"Configuration valid: {config_path}")
    print(f"  Data directory : {config.data_dir}")
    print(f"  Gemini model   : {config.gemini.model}")
    print(f"  API key set    : {'yes' if config.gemini.api_key and '${' not in config.gemini.api_key else 'no'}")
    print(f"  System prompt  : {config.assistant.system_prompt_path}")
    print(f"  Time zone      : {config.assistant.timezone}")
    print(f"  Retries        : {config.assistant.max_retries}")
    print(f"  Storage        : {config.storage.db_path}")


async def _chat(config: AppConfig, args: argparse.Namespace) -> None:
    app = TodoAssistApp(config)
    await app.start()
    try:
        result = await app.assistant.chat(
            args.prompt,
            RequestContext(
                user_seq=args.user_seq,
                user_id=args.user_id,
                user_name=args.user_name,
                client_ip=args.ip,
            ),
        )
    finally:
        await app.stop()

    print(result.model_dump_json(indent=2, exclude_none=True))
    if not result.success:
        sys.exit(1)


async def _add(config: AppConfig, args: argparse.Namespace) -> None:
    app = TodoAssistApp(config)
    await app.start()
    try:
        result = await app.gateway.create_todo(
            args.user_seq, args.user_id, args.ip, args.content, args.date, args.note
        )
    finally:
        await app.stop()

    print(json.dumps(result, ensure_ascii=False, indent=2))
    if not result.get("success"):
        sys.exit(1)


async def _list(config: AppConfig, args: argparse.Namespace) -> None:
    app = TodoAssistApp(config)
    await app.start()
    try:
        result = await app.gateway.list_todos(args.user_seq, args.status, args.days)
    finally:
        await app.stop()

    print(json.dumps(result, ensure_ascii=False, indent=2))


async def _remove(config: AppConfig, args: argparse.Namespace) -> None:
    app = TodoAssistApp(config)
    await app.start()
    try:
        result = await app.gateway.delete_todo(args.user_seq, args.user_id, args.ip, args.todo_seq)
    finally:
        await app.stop()

    print(json.dumps(result, ensure_ascii=False, indent=2))
    if not result.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
