"""CLI launcher for sboxlab.

Usage:
    python scripts/sbox_tool.py sbox --preset K44
    python scripts/sbox_tool.py metrics --preset KAES --workers 4
    python scripts/sbox_tool.py report --preset K44 --save

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import sys
from pathlib import Path

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from sboxlab.cli import main


if __name__ == "__main__":
    sys.exit(main())
