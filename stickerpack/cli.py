"""Command-line interface for the sticker pack tool."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from colorama import Fore, Style, init as colorama_init
from tqdm import tqdm

from .common.constants import (
    LEGACY_USERNAME_ITEM_ID,
    PASSWORD_ITEM_ID,
    STATIC_CONTENT_TYPE,
    USERNAME_ITEM_ID,
)
from .common.types import NormalizedSticker, PackInfo, StickerInput, UploadResult
from .config import Config, load_config
from .database import ItemStore
from .image_processor import process_sticker_file
from .uploader import StickerPackUploader
from .utils import (
    StickerPackError,
    StickerProcessingError,
    build_install_url,
    describe_error,
    format_bytes,
    setup_logging,
)
from .web_api import StickerServerClient


def _command_showcase() -> List[Tuple[str, str]]:
    return [
        ("login --username U --password P", "Store upload credentials"),
        ("logout", "Remove stored credentials"),
        ("check <image>...", "Validate and normalize images"),
        ("upload <image>... --title T --author A", "Encrypt and upload a pack"),
        ("help", "Show help and usage examples"),
    ]


def _print_command_help(title: str) -> None:
    print(f"{Fore.CYAN}Sticker Pack Creator{Style.RESET_ALL}")
    print(title)
    print("Usage: python main.py <command> [options]")
    print("\nAvailable commands:\n")
    for command, label in _command_showcase():
        print(f"  {command:<42} - {label}")
    print("\nExamples:")
    print("  python main.py check ./stickers/*.png --output ./normalized")
    print('  python main.py upload ./stickers/*.png --title "Cats" --author "Me" --emoji 🐱 😺')
    print("")


class _FriendlyArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        _print_command_help(f"{Fore.RED}Error:{Style.RESET_ALL} {message}")
        raise SystemExit(2)


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = _FriendlyArgumentParser(description="Sticker Pack Creator CLI")
    subparsers = parser.add_subparsers(dest="command")

    login_parser = subparsers.add_parser("login", help="Store upload credentials")
    login_parser.add_argument("--username", required=True, help="Account username (UUID)")
    login_parser.add_argument("--password", required=True, help="Account password")

    subparsers.add_parser("logout", help="Remove stored credentials")

    check_parser = subparsers.add_parser("check", help="Validate images")
    check_parser.add_argument("paths", nargs="+", help="Image files")
    check_parser.add_argument("--output", type=str, help="Write normalized stickers here")

    upload_parser = subparsers.add_parser("upload", help="Upload a sticker pack")
    upload_parser.add_argument("paths", nargs="+", help="Sticker image files, in pack order")
    upload_parser.add_argument("--title", required=True, help="Pack title")
    upload_parser.add_argument("--author", required=True, help="Pack author")
    upload_parser.add_argument("--cover", type=str, help="Cover image (default: first sticker)")
    upload_parser.add_argument(
        "--emoji", nargs="*", default=[], help="Emoji per sticker, in the same order"
    )

    subparsers.add_parser("help", help="Show help and usage examples")

    return parser.parse_args(argv)


def _output_name(sticker: NormalizedSticker, index: int) -> str:
    stem = Path(sticker.path).stem if sticker.path else f"sticker_{index}"
    suffix = ".webp" if sticker.content_type == STATIC_CONTENT_TYPE else ".png"
    return f"{stem}{suffix}"


def command_login(args: argparse.Namespace, config: Config) -> None:
    """
    Handle login command.
    """
    store = ItemStore(config.db_path)
    store.put_item(USERNAME_ITEM_ID, args.username)
    store.put_item(PASSWORD_ITEM_ID, args.password)
    print(f"{Fore.GREEN}✓ Credentials saved to {config.db_path}{Style.RESET_ALL}")


def command_logout(_: argparse.Namespace, config: Config) -> None:
    """
    Handle logout command.
    """
    store = ItemStore(config.db_path)
    for item_id in (USERNAME_ITEM_ID, LEGACY_USERNAME_ITEM_ID, PASSWORD_ITEM_ID):
        store.remove_item(item_id)
    print(f"{Fore.GREEN}✓ Credentials removed.{Style.RESET_ALL}")


async def _check(paths: Sequence[str], output: Optional[Path]) -> int:
    failures = 0
    for index, path in enumerate(paths):
        try:
            sticker = await process_sticker_file(path)
        except (StickerProcessingError, OSError) as exc:
            failures += 1
            print(f"{Fore.RED}✗ {path}: {describe_error(exc)}{Style.RESET_ALL}")
            continue
        print(
            f"{Fore.GREEN}✓ {path}{Style.RESET_ALL} "
            f"{sticker.meta.width}x{sticker.meta.height} -> {sticker.content_type} "
            f"({format_bytes(len(sticker.buffer))})"
        )
        if output:
            output.mkdir(parents=True, exist_ok=True)
            (output / _output_name(sticker, index)).write_bytes(sticker.buffer)
    return failures


def command_check(args: argparse.Namespace, _: Config) -> None:
    """
    Handle check command.
    """
    output = Path(args.output).expanduser() if args.output else None
    failures = asyncio.run(_check(args.paths, output))
    if failures:
        raise SystemExit(1)


async def _upload(args: argparse.Namespace, config: Config) -> UploadResult:
    stickers = [await process_sticker_file(path) for path in args.paths]
    cover = await process_sticker_file(args.cover) if args.cover else stickers[0]
    emojis: List[str] = list(args.emoji or [])
    inputs = [
        StickerInput(image_data=sticker, emoji=emojis[index] if index < len(emojis) else None)
        for index, sticker in enumerate(stickers)
    ]

    uploader = StickerPackUploader(
        store=ItemStore(config.db_path),
        service=StickerServerClient(
            config.server_url,
            config.cdn_url,
            concurrency=config.upload_concurrency,
            timeout=config.upload_timeout,
        ),
    )
    progress = tqdm(total=len(inputs) + 1, desc="Uploading", unit="sticker")

    def _progress(done: int, total: int) -> None:
        progress.n = done
        progress.total = total
        progress.refresh()

    try:
        return await uploader.encrypt_and_upload(
            PackInfo(title=args.title, author=args.author),
            inputs,
            cover,
            progress_callback=_progress,
        )
    finally:
        progress.close()


def command_upload(args: argparse.Namespace, config: Config) -> None:
    """
    Handle upload command.
    """
    result = asyncio.run(_upload(args, config))
    print(f"{Fore.GREEN}✅ Upload complete!{Style.RESET_ALL}")
    print(f"Pack ID:  {result.pack_id}")
    print(f"Pack key: {result.key}")
    print(f"Install:  {build_install_url(result.pack_id, result.key)}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    CLI entrypoint.
    """
    colorama_init()
    args = parse_arguments(argv)
    if args.command in (None, "help"):
        _print_command_help("Sticker pack preparation and upload.")
        return

    try:
        config = load_config()
        setup_logging(config.log_level)
        handlers = {
            "login": command_login,
            "logout": command_logout,
            "check": command_check,
            "upload": command_upload,
        }
        handlers[args.command](args, config)
    except StickerPackError as exc:
        print(f"{Fore.RED}Error ({exc.kind}):{Style.RESET_ALL} {describe_error(exc)}")
        sys.exit(1)
    except OSError as exc:
        print(f"{Fore.RED}Error:{Style.RESET_ALL} {exc}")
        sys.exit(1)
