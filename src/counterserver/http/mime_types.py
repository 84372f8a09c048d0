"""
=============================================================================
CONTENT-TYPE INFERENCE FOR STATIC FILES
=============================================================================

Decides the Content-Type header for a file served from the static root.

=============================================================================
LOOKUP ORDER
=============================================================================

    ┌────────────────────────────────────────────────────────────────────┐
    │                                                                     │
    │   1. PLATFORM PROBE                                                │
    │      mimetypes.guess_type() consults the system MIME tables       │
    │      (/etc/mime.types and friends). A non-empty answer is used    │
    │      exactly as returned, with no charset added.                  │
    │                                                                     │
    │   2. FALLBACK TABLE                                                │
    │      Extension lookup, case-insensitive on the file name:         │
    │                                                                     │
    │      .html .htm  → text/html;charset=UTF-8                        │
    │      .css        → text/css;charset=UTF-8                         │
    │      .js         → application/javascript;charset=UTF-8           │
    │      .json       → application/json;charset=UTF-8                 │
    │      .png        → image/png                                      │
    │      .jpg .jpeg  → image/jpeg                                     │
    │      .svg        → image/svg+xml                                  │
    │                                                                     │
    │   3. DEFAULT                                                       │
    │      application/octet-stream                                     │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

Because the probe depends on the host, the same file can get a different
Content-Type on two machines. The probe is a parameter so callers (and
tests) can pin it down.

=============================================================================
"""

import mimetypes
from pathlib import Path
from typing import Callable, Optional


# Returns a MIME type for a path, or None when the platform has no answer.
Probe = Callable[[Path], Optional[str]]


# =============================================================================
# FALLBACK TABLE
# =============================================================================
#
# Only consulted when the probe comes back empty. Keys are lowercase
# extensions with the leading dot.
#
# =============================================================================

FALLBACK_TYPES = {
    ".html": "text/html;charset=UTF-8",
    ".htm": "text/html;charset=UTF-8",
    ".css": "text/css;charset=UTF-8",
    ".js": "application/javascript;charset=UTF-8",
    ".json": "application/json;charset=UTF-8",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".svg": "image/svg+xml",
}

# application/octet-stream = "I don't know what this is, treat as binary"
DEFAULT_MIME_TYPE = "application/octet-stream"


# =============================================================================
# PUBLIC FUNCTIONS
# =============================================================================

def platform_probe(path: Path) -> Optional[str]:
    """Ask the platform MIME registry about a path."""
    mime_type, _ = mimetypes.guess_type(str(path), strict=False)
    return mime_type or None


def no_probe(path: Path) -> Optional[str]:
    """A probe that never answers, forcing the fallback table."""
    return None


def get_fallback_type(path: str | Path) -> str:
    """
    Look up a file name in the fallback table.

    Examples:
        >>> get_fallback_type("STYLE.CSS")
        'text/css;charset=UTF-8'

        >>> get_fallback_type("archive.tar")
        'application/octet-stream'
    """
    if isinstance(path, str):
        path = Path(path)

    extension = path.suffix.lower()  # .PNG → .png
    return FALLBACK_TYPES.get(extension, DEFAULT_MIME_TYPE)


def guess_content_type(path: str | Path, probe: Probe = platform_probe) -> str:
    """
    Get the Content-Type header value for a file.

    Args:
        path: File path or name with extension
        probe: Platform lookup tried before the fallback table

    Returns:
        Content-Type header value
    """
    if isinstance(path, str):
        path = Path(path)

    probed = probe(path)
    if probed:
        return probed

    return get_fallback_type(path)
