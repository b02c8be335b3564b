"""Config file discovery and overlay root resolution.

The TOML config file is optional: ``--config`` wins, then the
``DTBO_CONFIG_FILE`` env var, then ``/etc/dtbo-config.toml``.

The overlay root follows the configfs conventions: an explicit
``CONFIG_DTBO_PATH`` override, else the first existing conventional
mount point, else the sysfs location used as-is.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "dtbo-config.toml"
CONFIG_ENV_VAR = "DTBO_CONFIG_FILE"
SYSTEM_CONFIG = Path("/etc") / CONFIG_FILENAME

ROOT_ENV_VAR = "CONFIG_DTBO_PATH"

# Probed in order; the last entry is the fallback even if absent.
OVERLAY_ROOT_CANDIDATES: tuple[Path, ...] = (
    Path("/config/device-tree/overlays"),
    Path("/sys/kernel/config/device-tree/overlays"),
)


def find_config(explicit: str | Path | None = None) -> Path | None:
    """Locate the TOML config file, or None if there is none.

    An explicit path or ``DTBO_CONFIG_FILE`` that does not exist yields
    None rather than falling through to the system file.
    """
    if explicit:
        p = Path(explicit)
        return p if p.is_file() else None

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    if SYSTEM_CONFIG.is_file():
        return SYSTEM_CONFIG
    return None


def resolve_overlay_root(
    override: Path | None = None,
    candidates: tuple[Path, ...] | None = None,
) -> Path:
    """Return the overlay configuration root directory.

    Nothing here requires the result to exist; slot operations check
    that lazily.
    """
    if override is not None and str(override):
        return override
    candidates = candidates or OVERLAY_ROOT_CANDIDATES
    for candidate in candidates:
        if candidate.is_dir():
            return candidate
    return candidates[-1]
