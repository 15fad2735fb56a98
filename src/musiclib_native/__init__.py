"""musiclib-native: native metadata and playback bridge for a music library app."""

__version__ = "0.1.0"
