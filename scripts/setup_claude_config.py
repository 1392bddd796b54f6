#!/usr/bin/env python3
"""imageprobe Claude Code MCP Configuration Script"""

import json
import sys
from pathlib import Path
from typing import Optional

SERVER_KEY = "imageprobe"

IMAGEPROBE_TOOLS = [
    "mcp__imageprobe__list-images",
    "mcp__imageprobe__capture-console-logs",
    "mcp__imageprobe__run-local-server",
]


def _load_json(path: Path) -> dict:
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    return {}


def _write_json(path: Path, data: dict):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def server_entry() -> dict:
    # Use sys.executable to get the actual Python path currently running
    return {
        "command": sys.executable,
        "args": ["-m", "imageprobe.mcp.server"],
        "env": {}
    }


def main(home: Optional[Path] = None) -> int:
    home = home or Path.home()

    # Claude Code may read mcpServers from either location depending on version

    # 1. ~/.claude.json (legacy location)
    config_path = home / ".claude.json"
    config = _load_json(config_path)
    config.setdefault("mcpServers", {})[SERVER_KEY] = server_entry()
    _write_json(config_path, config)

    # 2. ~/.claude/settings.json (primary location)
    settings_path = home / ".claude" / "settings.json"
    settings = _load_json(settings_path)
    settings.setdefault("mcpServers", {})[SERVER_KEY] = server_entry()

    allow = settings.setdefault("permissions", {}).setdefault("allow", [])
    existing = set(allow)
    for tool in IMAGEPROBE_TOOLS:
        if tool not in existing:
            allow.append(tool)

    _write_json(settings_path, settings)

    print("  [OK] Claude Code MCP configured")
    print(f"  [OK] Added {len(IMAGEPROBE_TOOLS)} imageprobe tool permissions")
    return 0


if __name__ == "__main__":
    sys.exit(main())
