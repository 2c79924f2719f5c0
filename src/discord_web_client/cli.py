"""
Command-line interface for the Discord web client.

A terminal stand-in for the browser UI. Each command bootstraps the session
from the stored credential and then drives the same client surface a page
would:
- login / logout / whoami: credential and session management
- guilds / channels / messages / send: browsing and posting
- voice-regions / join-voice: voice metadata
- config: configuration management
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .audit_logger import AuditLogger
from .client import ChatClient
from .config import (
    ApiConfig,
    ClientConfig,
    LoggingConfig,
    StorageConfig,
    load_config_from_env,
)
from .exceptions import DiscordClientError
from .i18n import describe_error, get_message
from .models import Channel, Guild


def load_config_from_file(config_path: Path) -> Optional[ClientConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        ClientConfig if successful, None otherwise
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        api_data = data.get("api", {})
        api = ApiConfig(
            base_url=api_data.get("base_url", ApiConfig.base_url),
            cdn_url=api_data.get("cdn_url", ApiConfig.cdn_url),
            timeout=float(api_data.get("timeout", 10.0)),
            message_limit=int(api_data.get("message_limit", 50)),
            auth_scheme=api_data.get("auth_scheme"),
        )

        storage_data = data.get("storage", {})
        storage = StorageConfig()
        if storage_data.get("credential_file"):
            storage.credential_file = Path(storage_data["credential_file"])
        if storage_data.get("storage_key"):
            storage.storage_key = storage_data["storage_key"]

        logging_data = data.get("logging", {})
        logging_config = LoggingConfig(
            level=logging_data.get("level", "info"),
            output_format=logging_data.get("output_format", "text"),
        )

        return ClientConfig(
            api=api,
            storage=storage,
            logging=logging_config,
            language=data.get("language", "en"),
            login_redirect_delay=float(data.get("login_redirect_delay", 2.0)),
        )

    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None


def save_config_to_file(config: ClientConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file. The credential is never part of it.

    Returns:
        True if successful, False otherwise
    """
    data = {
        "api": {
            "base_url": config.api.base_url,
            "cdn_url": config.api.cdn_url,
            "timeout": config.api.timeout,
            "message_limit": config.api.message_limit,
            "auth_scheme": config.api.auth_scheme,
        },
        "storage": {
            "credential_file": str(config.storage.credential_file),
            "storage_key": config.storage.storage_key,
        },
        "logging": {
            "level": config.logging.level,
            "output_format": config.logging.output_format,
        },
        "language": config.language,
        "login_redirect_delay": config.login_redirect_delay,
    }

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        return True
    except OSError as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False


def resolve_config(args: argparse.Namespace) -> Optional[ClientConfig]:
    """Config file if given, environment otherwise; --language wins over both."""
    if getattr(args, "config", None):
        config = load_config_from_file(Path(args.config))
        if config is None:
            return None
    else:
        config = load_config_from_env()

    if getattr(args, "language", None):
        config.language = args.language
    return config


def _find(items, ref: str, name_of):
    for item in items:
        if item.id == ref:
            return item
    for item in items:
        if name_of(item).lower() == ref.lower():
            return item
    return None


async def _start(client: ChatClient) -> bool:
    """Bootstrap; on failure show the reason, then the login hint after the redirect delay."""
    language = client.config.language
    state = await client.start()
    if state.is_authenticated:
        return True

    if state.reason:
        print(get_message(state.reason, language), file=sys.stderr)
        delay = client.login_redirect_delay
        if delay > 0:
            print(get_message("session.redirecting", language, seconds=delay), file=sys.stderr)
            await asyncio.sleep(delay)
    print(get_message("cli.not_logged_in", language), file=sys.stderr)
    return False


def _failed(client: ChatClient, operation: str) -> bool:
    """True if the banner holds an error from ``operation``; prints and dismisses it."""
    error = client.error
    if error is None or error.operation != operation:
        return False
    _print_banner(client)
    return True


def _print_banner(client: ChatClient) -> None:
    error = client.error
    if error is None:
        return
    language = client.config.language
    operation = get_message(f"operation.{error.operation}", language)
    print(f"{operation}: {describe_error(error, language)}", file=sys.stderr)
    client.dismiss_error()


async def _open_guild(client: ChatClient, guild_ref: str) -> Optional[Guild]:
    guild = _find(client.guilds, guild_ref, lambda g: g.display_name)
    if guild is None:
        print(f"Error: Unknown server: {guild_ref}", file=sys.stderr)
        return None
    await client.select_guild(guild.id)
    if _failed(client, "list_channels"):
        return None
    return guild


async def _open_channel(client: ChatClient, guild_ref: str, channel_ref: str) -> Optional[Channel]:
    if await _open_guild(client, guild_ref) is None:
        return None
    channel = _find(client.channels, channel_ref, lambda c: c.name)
    if channel is None:
        print(f"Error: Unknown channel: {channel_ref}", file=sys.stderr)
        return None
    await client.select_channel(channel.id)
    if _failed(client, "list_messages"):
        return None
    return channel


async def run_command(args: argparse.Namespace, client: ChatClient) -> int:
    """
    Execute one CLI command against an open client.

    Returns:
        Exit code
    """
    language = client.config.language
    command = args.command

    if command == "login":
        state = await client.login(args.token)
        if not state.is_authenticated:
            print(get_message(state.reason or "login.invalid_token", language), file=sys.stderr)
            return 1
        print(get_message("login.success", language, username=state.user.display_name))
        _print_banner(client)
        return 0

    if command == "logout":
        client.logout()
        print(get_message("cli.logged_out", language))
        return 0

    if not await _start(client):
        return 1

    if command == "whoami":
        user = client.user
        print(f"{user.display_name} ({user.username}#{user.discriminator})")
        print(f"  ID: {user.id}")
        if user.email:
            print(f"  Email: {user.email}")
        print(f"  Avatar: {user.avatar_url(client.config.api.cdn_url)}")
        return 0

    if command == "guilds":
        _print_banner(client)
        guilds = client.guilds
        print(get_message("cli.guilds_header", language, count=len(guilds)))
        for guild in guilds:
            print(f"  {guild.id}  {guild.display_name}")
        return 0

    if command == "channels":
        if await _open_guild(client, args.guild) is None:
            return 1
        channels = client.channels
        print(get_message("cli.channels_header", language, count=len(channels)))
        for channel in channels:
            marker = "#" if channel.is_text else "~"
            print(f"  {channel.id}  {marker}{channel.name} ({channel.kind.value})")
        return 0

    if command == "messages":
        channel = await _open_channel(client, args.guild, args.channel)
        if channel is None:
            return 1
        if channel.is_voice:
            print(get_message("cli.no_messages_voice", language))
            return 0
        messages = client.messages
        print(get_message("cli.messages_header", language, count=len(messages)))
        for message in messages:
            print(f"  [{message.timestamp}] {message.author_name}: {message.content}")
        return 0

    if command == "send":
        if await _open_channel(client, args.guild, args.channel) is None:
            return 1
        message = await client.send(args.text)
        if message is None:
            _print_banner(client)
            return 1
        print(get_message("cli.message_sent", language, message_id=message.id))
        return 0

    if command == "voice-regions":
        regions = await client.voice_regions()
        if _failed(client, "list_voice_regions"):
            return 1
        print(get_message("cli.voice_regions_header", language, count=len(regions)))
        for region in regions:
            flags = [name for name, on in (
                ("optimal", region.optimal),
                ("deprecated", region.deprecated),
                ("custom", region.custom),
            ) if on]
            suffix = f" [{', '.join(flags)}]" if flags else ""
            print(f"  {region.id}  {region.name}{suffix}")
        return 0

    if command == "join-voice":
        if await _open_guild(client, args.guild) is None:
            return 1
        channel = _find(client.channels, args.channel, lambda c: c.name)
        if channel is None:
            print(f"Error: Unknown channel: {args.channel}", file=sys.stderr)
            return 1
        if not await client.join_voice(channel.id):
            _print_banner(client)
            return 1
        print(get_message("cli.voice_joined", language, channel=channel.name))
        return 0

    return 1


async def _run(args: argparse.Namespace, config: ClientConfig) -> int:
    if getattr(args, "limit", None) is not None:
        config.api.message_limit = args.limit
    logger = None
    if args.verbose:
        logger = AuditLogger.from_config(config.logging)

    async with ChatClient(config, logger=logger) as client:
        try:
            return await run_command(args, client)
        except DiscordClientError as e:
            print(f"Error: {describe_error(e, config.language)}", file=sys.stderr)
            return 1


def cmd_client(args: argparse.Namespace) -> int:
    """Handle every command that talks to the API."""
    config = resolve_config(args)
    if config is None:
        print(f"Error: Could not load config from {args.config}", file=sys.stderr)
        return 1
    return asyncio.run(_run(args, config))


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else Path.home() / ".discord_web_client" / "config.json"

    if args.action == "show":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"No configuration found at: {config_path}")
            print("Use 'config init' to create a default configuration.")
            return 1

        print(f"Configuration from: {config_path}")
        print(f"  API: {config.api.base_url}")
        print(f"  Timeout: {config.api.timeout}s")
        print(f"  Message limit: {config.api.message_limit}")
        print(f"  Credential file: {config.storage.credential_file}")
        print(f"  Language: {config.language}")
        print(f"  Log level: {config.logging.level}")
        return 0

    if args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1

        config = ClientConfig(language=args.language or "en")
        if save_config_to_file(config, config_path):
            print(f"Configuration created at: {config_path}")
            return 0
        return 1

    return 1


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file (defaults to environment / .env)",
    )
    parser.add_argument(
        "--language", "-l",
        choices=["en", "de"],
        help="Output language",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.set_defaults(func=cmd_client)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="discord-web-client",
        description="Browse Discord servers, channels and messages from the terminal",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    login_parser = subparsers.add_parser("login", help="Validate and store a Discord token")
    login_parser.add_argument("token", help="Discord token")
    _add_common(login_parser)

    _add_common(subparsers.add_parser("logout", help="Forget the stored token"))
    _add_common(subparsers.add_parser("whoami", help="Show the logged-in user"))
    _add_common(subparsers.add_parser("guilds", help="List your servers"))

    channels_parser = subparsers.add_parser("channels", help="List text and voice channels of a server")
    channels_parser.add_argument("guild", help="Server ID or name")
    _add_common(channels_parser)

    messages_parser = subparsers.add_parser("messages", help="Show recent messages of a text channel")
    messages_parser.add_argument("guild", help="Server ID or name")
    messages_parser.add_argument("channel", help="Channel ID or name")
    messages_parser.add_argument(
        "--limit", "-n",
        type=int,
        help="Number of messages (1-100, default from config)",
    )
    _add_common(messages_parser)

    send_parser = subparsers.add_parser("send", help="Post a message to a text channel")
    send_parser.add_argument("guild", help="Server ID or name")
    send_parser.add_argument("channel", help="Channel ID or name")
    send_parser.add_argument("text", help="Message text")
    _add_common(send_parser)

    _add_common(subparsers.add_parser("voice-regions", help="List voice regions"))

    join_parser = subparsers.add_parser("join-voice", help="Move yourself into a voice channel")
    join_parser.add_argument("guild", help="Server ID or name")
    join_parser.add_argument("channel", help="Voice channel ID or name")
    _add_common(join_parser)

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument(
        "action",
        choices=["show", "init"],
        help="Configuration action",
    )
    config_parser.add_argument("--path", "-p", help="Path to configuration file")
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.add_argument(
        "--language", "-l",
        choices=["en", "de"],
        help="Default language for new configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
