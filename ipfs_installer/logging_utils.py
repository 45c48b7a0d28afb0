from __future__ import annotations

import logging
from pathlib import Path

from .lib.env import DEFAULT_LOG_PATH

FALLBACK_LOG_NAME = "ipfs-installer.log"

# requests/urllib3 log every connection at DEBUG
_NOISY_LOGGERS = ("urllib3",)


def _open_log(log_path: str) -> tuple[logging.FileHandler, str]:
    try:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path), log_path
    except OSError:
        fallback = str(Path.cwd() / FALLBACK_LOG_NAME)
        return logging.FileHandler(fallback), fallback


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging for a provisioning run.

    The log file gets everything down to DEBUG, including the captured output
    of every command; the console only shows `level` and above. When the
    requested path is not writable (not root yet, read-only /var/log) the log
    goes to ipfs-installer.log in the working directory instead.

    Returns the actual file path being used.
    """

    root = logging.getLogger()

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(root, "_ipfs_installer_configured", False):
        return getattr(root, "_ipfs_installer_log_path", log_path)

    root.setLevel(logging.DEBUG)
    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler, chosen_path = _open_log(log_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        root.addHandler(console)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    setattr(root, "_ipfs_installer_configured", True)
    setattr(root, "_ipfs_installer_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
