"""Filesystem collaborators: validation and payload packaging of policy directories."""

from __future__ import annotations

from .payload import PolicyPayloadBuilder
from .validator import DEFINITION_FILE, METADATA_FILE, PolicyDirectoryValidator

__all__ = [
    "DEFINITION_FILE",
    "METADATA_FILE",
    "PolicyDirectoryValidator",
    "PolicyPayloadBuilder",
]
