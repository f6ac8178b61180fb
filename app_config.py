"""
Application configuration settings
Do not modify these values once your application has been distributed to users.
This file centralises brand, paths, formats, and runtime defaults.
"""

from __future__ import annotations
import os
import platform
from pathlib import Path

# ───────────────────────────────────────────────────────────────────────────────
# Core identity
# ───────────────────────────────────────────────────────────────────────────────
APP_NAME = "Spritr"

# Application version in format x.y.z
APP_VERSION = "0.1.0"

COMPANY_NAME = "Digi Monsters"

# Reverse-DNS App ID (used in diagnostics)
APP_ID = "uk.digimonsters.spritr"

# Organization identifiers (for folders, banners)
ORG_NAME = "Digi Monsters"       # human readable
ORG_DIRNAME = "DigiMonsters"     # filesystem safe (no spaces)
ORG_DOMAIN = "digimonsters.uk"

# Code & distribution naming
REPO_NAME = "dm_spritr"
PACKAGE_NAME = "spritr"          # Python import package
DIST_NAME = "dm-spritr"

REPO_URL = "https://github.com/thedigimonsters/dm_spritr"
ISSUE_URL = f"{REPO_URL}/issues"

TAGLINE = "Stack sprite parts, watch them walk."

# Build metadata (optional, stamped by CI)
BUILD_COMMIT = os.getenv("SPRITR_BUILD_COMMIT", "")[:7]
BUILD_CHANNEL = os.getenv("SPRITR_BUILD_CHANNEL", "dev")  # dev/beta/stable


def version_string() -> str:
    """Human-friendly version string for banners and logs."""
    meta = f"+{BUILD_COMMIT}" if BUILD_COMMIT else ""
    chan = f" ({BUILD_CHANNEL})" if BUILD_CHANNEL and BUILD_CHANNEL != "stable" else ""
    return f"{APP_VERSION}{meta}{chan}"


# ───────────────────────────────────────────────────────────────────────────────
# Supported formats
# ───────────────────────────────────────────────────────────────────────────────
IMAGE_EXTS = {
    ".png", ".gif", ".bmp", ".jpg", ".jpeg", ".webp"
}
EXPORT_FORMAT = "png"
EXPORT_FALLBACK_NAME = "sample"


# ───────────────────────────────────────────────────────────────────────────────
# User data locations (logs, exports)
# ───────────────────────────────────────────────────────────────────────────────
def _appdata_base() -> Path:
    system = platform.system()
    if system == "Windows":
        base = os.getenv("APPDATA") or (Path.home() / "AppData" / "Roaming")
    elif system == "Darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
    return Path(base) / ORG_DIRNAME / APP_NAME


APPDATA_DIR = _appdata_base()
LOG_DIR = APPDATA_DIR / "logs"
DEFAULT_EXPORT_DIR = Path.home() / "SpritrExports"


def ensure_app_dirs() -> None:
    """Create required folders if they don't exist."""
    for p in (APPDATA_DIR, LOG_DIR):
        p.mkdir(parents=True, exist_ok=True)


# ───────────────────────────────────────────────────────────────────────────────
# CLI hints
# ───────────────────────────────────────────────────────────────────────────────
CLI_NAME = "spritr"
CLI_EXAMPLES = (
    'spritr compose --layer base=body.png --layer hairs=hair_01.png --name hero\n'
    'spritr compose --layer base=body.png --layer hats=cap.png --randomize --seed 7\n'
    'spritr frames --columns 4 --rows 2\n'
)

# ───────────────────────────────────────────────────────────────────────────────
# Defaults (read by spritr.core.config; safe to change before shipping)
# ───────────────────────────────────────────────────────────────────────────────
DEFAULTS = {
    "sprite": {
        "fps": 3,
        "scale": 3,           # display zoom only, never reaches the compositor
        "cell_size": 20,      # px per sheet cell (square)
        "sprite_name": EXPORT_FALLBACK_NAME,
    },
    # Declaration order is the randomize order; nullable slots may end up empty.
    "categories": [
        {"name": "base", "nullable": False},
        {"name": "torsos", "nullable": False},
        {"name": "feet", "nullable": False},
        {"name": "hands", "nullable": False},
        {"name": "heads", "nullable": False},
        {"name": "eyes", "nullable": False},
        {"name": "hairs", "nullable": True},
        {"name": "hats", "nullable": True},
    ],
    "export": {
        "format": EXPORT_FORMAT,
        "fallback_name": EXPORT_FALLBACK_NAME,
        "directory": str(DEFAULT_EXPORT_DIR),
    },
    "compositor": {
        "decode_workers": 4,
    },
}


def banner() -> str:
    return (
        f"{APP_NAME} {version_string()}  •  {APP_ID}\n"
        f"Vendor: {COMPANY_NAME}  •  Repo: {REPO_URL}\n"
        f"Data: {APPDATA_DIR}"
    )


if __name__ == "__main__":
    ensure_app_dirs()
    print(banner())
    print("Exports:", DEFAULT_EXPORT_DIR)
