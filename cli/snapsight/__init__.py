"""SnapSight client.

Captures a screenshot (or loads an image file or the clipboard), sends it to
the SnapSight relay for a vision-model description, renders the markdown,
and asks the relay to read the description aloud.
"""

from __future__ import annotations

from .cli import app

__all__ = ["app"]
