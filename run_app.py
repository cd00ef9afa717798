#!/usr/bin/env python3
"""Entry point: check configuration, then launch the Streamlit UI.

    python run_app.py
"""
from __future__ import annotations

import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from jobcopilot.config import API_KEY_VAR, load_settings
from jobcopilot.errors import ConfigError
from jobcopilot.log import get_logger

log = get_logger(__name__)


def main() -> int:
    try:
        load_settings()
    except ConfigError as exc:
        print()
        print(f"  Cannot start: {exc}")
        print(f"  Add {API_KEY_VAR}=... to .env or export it, then run again.")
        print()
        return 1

    log.info("Launching Streamlit UI")
    return subprocess.run(
        [sys.executable, "-m", "streamlit", "run", str(ROOT / "app.py"), *sys.argv[1:]],
        cwd=ROOT,
    ).returncode


if __name__ == "__main__":
    raise SystemExit(main())
