"""
Summary: Domain types for metadata resolution.
Why: Keep tag candidates and faults independent of any backend library.
"""

from .fault import ResolutionFault
from .tag_candidate import SourceRank, TagCandidate, TagField

__all__ = ["ResolutionFault", "SourceRank", "TagCandidate", "TagField"]
