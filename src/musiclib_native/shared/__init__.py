# Where: musiclib_native.shared.__init__
# What: Provide a concise import surface for shared dataclasses.
# Why: Encourage consistent reuse of the record type across features.

"""Shared cross-cutting dataclasses exposed at the package level."""

from .metadata_record import MetadataRecord

__all__ = ["MetadataRecord"]
