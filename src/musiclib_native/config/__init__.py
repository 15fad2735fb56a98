"""Configuration package: paths, TOML-backed config and derived settings."""
