import os
import sys
import logging
import subprocess
from pathlib import Path

from .exceptions import LaunchError


def open_with_default_app(path: Path):
    """
    Opens `path` with the OS default application.
    Only success or failure of the launch is observed.
    """
    target = str(path)
    logging.debug(f"Launching default application for {target}")

    if sys.platform == "win32":
        try:
            os.startfile(target)  # type: ignore[attr-defined]
        except OSError as e:
            raise LaunchError(f"Cannot open {target}: {e}") from e
        return

    cmd = ["open", target] if sys.platform == "darwin" else ["xdg-open", target]
    try:
        subprocess.run(cmd, check=True, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError) as e:
        raise LaunchError(f"Cannot open {target} with {cmd[0]}: {e}") from e
