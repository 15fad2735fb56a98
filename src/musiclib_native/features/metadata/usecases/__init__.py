"""
Summary: Public surface for metadata resolution use cases.
Why: Provide a stable import path for the dispatcher and tests.
"""

from .ports import MetadataHandle, MetadataSource
from .resolver import MetadataResolver, ResolutionOutcome

__all__ = ["MetadataHandle", "MetadataResolver", "MetadataSource", "ResolutionOutcome"]
