"""Command line interface for musiclib-native."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from concurrent.futures import Future
from dataclasses import replace
from typing import Any, final

from musiclib_native.channel import NATIVE_METADATA_CHANNEL, READ_METHOD, NativeBridge
from musiclib_native.config.config import Config
from musiclib_native.platform.logging import logger
from musiclib_native.ui.cli.args import ArgumentParser, ReadArgs, RouteArgs
from musiclib_native.ui.cli.display import MetadataDisplay


@final
class RecordingSurface:
    """Playback surface that records item ids instead of starting playback."""

    def __init__(self) -> None:
        self.delivered: list[str] = []

    def invoke_method(self, method: str, arguments: object | None = None) -> object:
        if isinstance(arguments, dict):
            self.delivered.append(str(arguments.get("itemId")))
        done: Future[Any] = Future()
        done.set_result(None)
        return done


@final
class CommandProcessor:
    """Command line interface processor."""

    @staticmethod
    def process_command(args_list: Sequence[str] | None = None) -> int:
        """Process command line arguments and return an exit code."""
        try:
            args = ArgumentParser.process_args(args_list)
            if isinstance(args, ReadArgs):
                return CommandProcessor._read(args)
            return CommandProcessor._route(args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130
        except Exception as e:
            logger.error("An unexpected error occurred: %s", str(e))
            return 1

    @staticmethod
    def _bridge(backend: str | None = None) -> NativeBridge:
        configuration = Config.load()
        if backend is not None:
            configuration = replace(configuration, metadata_backend=backend)
        bridge = NativeBridge.from_config(configuration)
        bridge.start()
        return bridge

    @staticmethod
    def _read(args: ReadArgs) -> int:
        bridge = CommandProcessor._bridge(args.backend)
        display = MetadataDisplay()
        try:
            for path in args.paths:
                payload = bridge.messenger.call_native(
                    NATIVE_METADATA_CHANNEL, READ_METHOD, {"filePath": path}
                ).result()
                if not args.quiet:
                    display.show_payload(path, payload, as_json=args.as_json)
        finally:
            bridge.close()
        return 0

    @staticmethod
    def _route(args: RouteArgs) -> int:
        bridge = CommandProcessor._bridge()
        surface = RecordingSurface()
        bridge.attach_surface(surface)
        try:
            handled = bridge.open_url(args.url)
        finally:
            bridge.close()
        if not args.quiet:
            MetadataDisplay().show_route(args.url, handled, surface.delivered)
        return 0 if handled else 2


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point.

    Returns:
        int: Process exit code; ``route`` returns 2 for unhandled links.
    """
    return CommandProcessor.process_command(argv)


if __name__ == "__main__":
    sys.exit(main())
