"""Voice-assistant entitlement lookup.

Where: src/musiclib_native/features/playback/usecases/entitlement.py
What: Read the embedded provisioning profile and report the Siri capability flag.
Why: Only prompt for voice authorization when the build is entitled to it.
"""

from __future__ import annotations

import plistlib
from pathlib import Path
from typing import Final

from musiclib_native.platform.logging import logger

__all__ = ["VOICE_ENTITLEMENT_KEY", "has_voice_entitlement", "entitlements_from_profile"]

VOICE_ENTITLEMENT_KEY: Final[str] = "com.apple.developer.siri"

_PLIST_START: Final[bytes] = b"<plist"
_PLIST_END: Final[bytes] = b"</plist>"


def entitlements_from_profile(raw: bytes) -> dict[str, object] | None:
    """Return the ``Entitlements`` dictionary embedded in a signed profile.

    The profile is a CMS envelope around an XML plist; the plist is located
    by its opening and closing tags rather than by decoding the signature.
    """
    start = raw.find(_PLIST_START)
    if start < 0:
        return None
    end = raw.find(_PLIST_END, start)
    if end < 0:
        return None
    document = raw[start : end + len(_PLIST_END)]

    parsed = plistlib.loads(document, fmt=plistlib.FMT_XML)
    if not isinstance(parsed, dict):
        return None
    entitlements = parsed.get("Entitlements")
    return entitlements if isinstance(entitlements, dict) else None


def has_voice_entitlement(profile_path: Path | str | None) -> bool:
    """Whether the provisioning profile grants the voice-assistant capability.

    A boolean flag is honored as-is; any other value counts as present.
    Unreadable or malformed profiles count as not entitled.
    """
    if profile_path is None:
        return False
    try:
        raw = Path(profile_path).read_bytes()
        entitlements = entitlements_from_profile(raw)
    except Exception as exc:
        logger.debug("Cannot read provisioning profile %s: %s", profile_path, exc)
        return False

    if entitlements is None or VOICE_ENTITLEMENT_KEY not in entitlements:
        return False
    flag = entitlements[VOICE_ENTITLEMENT_KEY]
    if isinstance(flag, bool):
        return flag
    return True
