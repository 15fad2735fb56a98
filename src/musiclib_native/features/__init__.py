"""Feature packages: metadata resolution and playback routing."""
