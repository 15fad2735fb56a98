"""Metadata resolution feature: ranked tag reconciliation over pluggable backends."""

from .adapters import create_metadata_source
from .usecases import MetadataResolver

__all__ = ["MetadataResolver", "create_metadata_source"]
