"""Job Copilot — resume parsing, AI job discovery and application tracking."""
from __future__ import annotations

__version__ = "0.1.0"
