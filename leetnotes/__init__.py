"""LeetNotes - AI study notes for solved coding problems, appended to Google Docs"""

from __future__ import annotations

__version__ = "1.0.0"
