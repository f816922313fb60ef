"""Filesystem locations used by the entry points."""

from __future__ import annotations

from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

# Optional .env with TACTICS_* overrides.
ENV_FILE = PROJECT_ROOT / ".env"

# Opt-in outputs; nothing is written unless a CLI flag asks for it.
STORAGE_DIR = PROJECT_ROOT / "storage"
LOG_DIR = STORAGE_DIR / "logs"
TRACE_DIR = STORAGE_DIR / "traces"
