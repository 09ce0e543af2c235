"""Platform-specific user notices."""

from __future__ import annotations

import contextlib
import logging
import subprocess
import sys

logger = logging.getLogger(__name__)

APP_TITLE = "Sticker Pack Creator"


def show_message_box(kind: str, message: str) -> None:
    """
    Show a blocking message box, falling back to stderr.

    Args:
        kind: "warning", "error" or "info".
        message: Text to display.
    """
    logger.warning("%s: %s", kind, message)
    if sys.platform == "darwin":
        shown = _show_macos_dialog(kind, message)
    elif sys.platform.startswith("win"):
        shown = _show_windows_dialog(kind, message)
    elif sys.platform.startswith("linux"):
        shown = _show_linux_dialog(kind, message)
    else:
        shown = False
    if not shown:
        print(f"[{kind.upper()}] {message}", file=sys.stderr)


def _run(args: list[str]) -> bool:
    with contextlib.suppress(OSError):
        result = subprocess.run(
            args,
            check=False,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        return result.returncode == 0
    return False


def _show_macos_dialog(kind: str, message: str) -> bool:
    icon = {"error": "stop", "info": "note"}.get(kind, "caution")
    return _run(
        [
            "osascript",
            "-e",
            f'display dialog "{_escape_applescript(message)}" '
            f'with title "{APP_TITLE}" buttons {{"OK"}} '
            f"default button 1 with icon {icon}",
        ]
    )


def _escape_applescript(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _show_windows_dialog(kind: str, message: str) -> bool:
    icon = {"error": "Error", "info": "Information"}.get(kind, "Warning")
    script = (
        "Add-Type -AssemblyName PresentationFramework; "
        f'[System.Windows.MessageBox]::Show("{_escape_powershell(message)}", '
        f'"{APP_TITLE}", "OK", "{icon}") > $null'
    )
    return _run(["powershell", "-NoProfile", "-NonInteractive", "-Command", script])


def _escape_powershell(value: str) -> str:
    return value.replace("`", "``").replace('"', '`"')


def _show_linux_dialog(kind: str, message: str) -> bool:
    flag = {"error": "--error", "info": "--info"}.get(kind, "--warning")
    return _run(["zenity", flag, f"--title={APP_TITLE}", f"--text={message}"])
