"""Command line argument parser and option dataclasses."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, final

from musiclib_native.config.config import Config
from musiclib_native.config.settings import SUPPORTED_BACKENDS
from musiclib_native.platform.logging import setup_logger


@final
@dataclass(slots=True)
class ReadArgs:
    """Arguments for the ``read`` subcommand."""

    command: Literal["read"]
    paths: list[str]
    as_json: bool
    backend: str | None
    verbose: bool
    quiet: bool


@final
@dataclass(slots=True)
class RouteArgs:
    """Arguments for the ``route`` subcommand."""

    command: Literal["route"]
    url: str
    verbose: bool
    quiet: bool


CLIArgs = ReadArgs | RouteArgs


@final
class ArgumentParser:
    """Command line argument parser."""

    @staticmethod
    def create_parser() -> argparse.ArgumentParser:
        """Create argument parser.

        Returns:
            argparse.ArgumentParser: Configured argument parser.
        """
        parser = argparse.ArgumentParser(
            prog="musiclib-native",
            description="Inspect audio metadata and playback deep links the way the app bridge sees them.",
        )
        subparsers = parser.add_subparsers(dest="command", required=True)

        read_parser = subparsers.add_parser(
            "read",
            help="Resolve metadata for one or more local audio files",
        )
        _ = read_parser.add_argument(
            "paths",
            nargs="+",
            metavar="PATH",
            help="Local path or file:// URL of an audio file",
        )
        _ = read_parser.add_argument(
            "--json",
            dest="as_json",
            action="store_true",
            help="Print the channel payload as JSON",
        )
        _ = read_parser.add_argument(
            "--backend",
            choices=SUPPORTED_BACKENDS,
            help="Override the configured metadata backend",
        )
        ArgumentParser._add_verbosity(read_parser)

        route_parser = subparsers.add_parser(
            "route",
            help="Check whether a deep link would start playback",
        )
        _ = route_parser.add_argument("url", metavar="URL", help="Deep link to route")
        ArgumentParser._add_verbosity(route_parser)

        return parser

    @staticmethod
    def _add_verbosity(parser: argparse.ArgumentParser) -> None:
        group = parser.add_mutually_exclusive_group()
        _ = group.add_argument(
            "--verbose",
            action="store_true",
            help="Show detailed resolution information",
        )
        _ = group.add_argument(
            "--quiet",
            action="store_true",
            help="Suppress all output except errors",
        )

    @staticmethod
    def process_args(args_list: Sequence[str] | None = None) -> CLIArgs:
        """Parse arguments and configure logging for the chosen verbosity."""
        parsed = ArgumentParser.create_parser().parse_args(args_list)

        if parsed.quiet:
            log_level = logging.ERROR
        elif parsed.verbose:
            log_level = logging.DEBUG
        else:
            log_level = logging.WARNING

        configuration = Config.load()
        _ = setup_logger(log_file=configuration.log_file, console_level=log_level)

        if parsed.command == "read":
            return ReadArgs(
                command="read",
                paths=list(parsed.paths),
                as_json=bool(parsed.as_json),
                backend=parsed.backend,
                verbose=bool(parsed.verbose),
                quiet=bool(parsed.quiet),
            )
        return RouteArgs(
            command="route",
            url=parsed.url,
            verbose=bool(parsed.verbose),
            quiet=bool(parsed.quiet),
        )


__all__ = ["ArgumentParser", "CLIArgs", "ReadArgs", "RouteArgs"]
