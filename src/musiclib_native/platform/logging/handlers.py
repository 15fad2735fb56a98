"""Rich console handler for structured bridge events.

Where: platform/logging/handlers.py
What: Render ``bridge_event`` log records with icons and compact file paths.
Why: Keep resolver and router logs scannable without touching call sites.
"""

from __future__ import annotations

import logging
from pathlib import PurePath, PurePosixPath, PureWindowsPath
from typing import Any, ClassVar, override

from rich.console import ConsoleRenderable
from rich.logging import RichHandler
from rich.style import Style
from rich.text import Text


class BridgeRichHandler(RichHandler):
    """Rich handler that styles resolver/router events and file paths."""

    _EVENT_STYLES: ClassVar[dict[str, tuple[str, str]]] = {
        "metadata.resolve.success": ("🎧", "green"),
        "metadata.resolve.empty": ("ℹ️", "yellow"),
        "metadata.resolve.fault": ("⛔", "red"),
        "playback.route.dispatched": ("▶️", "cyan"),
        "playback.route.dropped": ("⏸️", "yellow"),
        "playback.route.unhandled": ("↪️", "yellow"),
        "channel.registered": ("🔌", "magenta"),
    }
    _EVENT_PREFIXES: ClassVar[dict[str, str]] = {
        "metadata.resolve.success": "Resolved ",
        "metadata.resolve.empty": "No metadata in ",
        "metadata.resolve.fault": "Unreadable ",
        "playback.route.dispatched": "Play ",
        "playback.route.dropped": "Dropped ",
        "playback.route.unhandled": "Not handled ",
        "channel.registered": "Registered channel ",
    }
    _PATH_SEGMENT_LIMIT: ClassVar[int] = 4

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs["show_time"] = False
        kwargs["show_path"] = False
        kwargs["rich_tracebacks"] = True
        kwargs["markup"] = False
        kwargs["omit_repeated_times"] = False
        super().__init__(*args, **kwargs)

    def _format_path(self, path: str) -> Text:
        """Format a path with colored separators and ellipsis truncation."""

        pure_path = self._to_pure_path(path)
        separator = "\\" if isinstance(pure_path, PureWindowsPath) else "/"
        anchor = pure_path.anchor
        body_parts = [part for part in pure_path.parts if part and part != anchor]

        truncated = len(body_parts) > self._PATH_SEGMENT_LIMIT
        if truncated:
            body_parts = body_parts[-self._PATH_SEGMENT_LIMIT:]

        display_string = ""
        if anchor and not truncated:
            display_string = anchor
        if truncated:
            display_string = "…" + separator
        display_string += separator.join(body_parts)
        return self._style_path_string(display_string or ".", separator)

    @staticmethod
    def _to_pure_path(raw_path: str) -> PurePath:
        """Return a platform-aware ``PurePath`` for the given raw string."""

        if "\\" in raw_path:
            return PureWindowsPath(raw_path)
        return PurePosixPath(raw_path)

    @staticmethod
    def _style_path_string(path_string: str, separator: str) -> Text:
        text = Text()
        for char in path_string:
            if char in {separator, "/", "…"}:
                _ = text.append(char, style=Style(color="magenta"))
            else:
                _ = text.append(char, style=Style(color="white"))
        return text

    def render_event(self, record: logging.LogRecord) -> Text | None:
        """Render a structured bridge event, or None for plain records."""

        event = getattr(record, "bridge_event", None)
        if not isinstance(event, str):
            return None

        icon, color = self._EVENT_STYLES.get(event, ("ℹ️", "blue"))
        text = Text()
        _ = text.append(f"{icon} ", style=Style(color=color, bold=True))

        body = Text(style=Style(color=color))
        _ = body.append(self._EVENT_PREFIXES.get(event, ""))

        if event.startswith("metadata."):
            source_path = getattr(record, "source_path", None)
            if source_path:
                _ = body.append_text(self._format_path(str(source_path)))
        elif event == "channel.registered":
            _ = body.append(str(getattr(record, "channel", "?")))
        else:
            item_id = getattr(record, "item_id", None)
            target = getattr(record, "target", None)
            _ = body.append(str(item_id if item_id is not None else target or ""))

        details: list[str] = []
        if event == "metadata.resolve.success":
            fields = getattr(record, "fields", None)
            if isinstance(fields, (list, tuple)) and fields:
                details.append(", ".join(str(name) for name in fields))
        elif event == "metadata.resolve.fault":
            stage = getattr(record, "stage", None)
            error_message = getattr(record, "error_message", None)
            details.append(": ".join(str(part) for part in (stage, error_message) if part))
        elif event.startswith("playback."):
            trigger = getattr(record, "trigger", None)
            if trigger:
                details.append(f"via {trigger}")
            reason = getattr(record, "reason", None)
            if reason:
                details.append(str(reason))

        elapsed_ms = getattr(record, "elapsed_ms", None)
        if isinstance(elapsed_ms, (int, float)):
            details.append(f"{elapsed_ms:.2f} ms")

        details = [detail for detail in details if detail]
        if details:
            _ = body.append(" (" + "; ".join(details) + ")")

        _ = text.append_text(body)
        return text

    @override
    def render_message(self, record: logging.LogRecord, message: str) -> ConsoleRenderable:
        """Render message with custom styling for bridge events."""

        event_text = self.render_event(record)
        if event_text is not None:
            return event_text
        return super().render_message(record, message)


__all__ = ["BridgeRichHandler"]
