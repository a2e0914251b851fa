"""
Output rendering and formatting for the upgrade notice.
"""

from __future__ import annotations

import os

from wcwidth import wcswidth

from .common import strip_ansi

# Environment options
USE_COLOR = os.environ.get("CLI_NOTIFY_COLOR", "1") == "1"

# ANSI color codes
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
MAGENTA = "\033[35m"
BOLD = "\033[1m"
DIM = "\033[2m"
RESET = "\033[0m"

# Rounded box drawing characters
BOX_TOP_LEFT = "╭"
BOX_TOP_RIGHT = "╮"
BOX_BOTTOM_LEFT = "╰"
BOX_BOTTOM_RIGHT = "╯"
BOX_HORIZONTAL = "─"
BOX_VERTICAL = "│"


def colorize(text: str, color: str, use_color: bool | None = None) -> str:
    """Apply color to text.

    Args:
        text: Text to colorize
        color: ANSI color code
        use_color: Override the CLI_NOTIFY_COLOR setting

    Returns:
        Colored text or plain text if colors disabled
    """
    enabled = USE_COLOR if use_color is None else use_color
    if not enabled or not text:
        return text
    return f"{color}{text}{RESET}"


def display_width(text: str) -> int:
    """Terminal cell width of text, ignoring ANSI escapes."""
    plain = strip_ansi(text)
    width = wcswidth(plain)
    # wcswidth returns -1 for non-printable characters
    return width if width >= 0 else len(plain)


def _center(line: str, width: int) -> str:
    gap = width - display_width(line)
    left = gap // 2
    return " " * left + line + " " * (gap - left)


def boxed(text: str, padding: int = 1, border_color: str = GREEN, use_color: bool | None = None) -> str:
    """Draw a rounded, dimmed border around centered text.

    Args:
        text: Possibly multi-line, possibly colored content
        padding: Blank lines above/below and spaces (x3) left/right of the content
        border_color: ANSI color for the border
        use_color: Override the CLI_NOTIFY_COLOR setting

    Returns:
        The boxed text, lines joined with newlines
    """
    lines = text.split("\n")
    content_width = max(display_width(line) for line in lines)
    horizontal_pad = padding * 3
    inner_width = content_width + 2 * horizontal_pad

    def border(s: str) -> str:
        return colorize(colorize(s, border_color, use_color), DIM, use_color)

    blank = border(BOX_VERTICAL) + " " * inner_width + border(BOX_VERTICAL)
    rows = [border(BOX_TOP_LEFT + BOX_HORIZONTAL * inner_width + BOX_TOP_RIGHT)]
    rows.extend([blank] * padding)
    for line in lines:
        body = " " * horizontal_pad + _center(line, content_width) + " " * horizontal_pad
        rows.append(border(BOX_VERTICAL) + body + border(BOX_VERTICAL))
    rows.extend([blank] * padding)
    rows.append(border(BOX_BOTTOM_LEFT + BOX_HORIZONTAL * inner_width + BOX_BOTTOM_RIGHT))
    return "\n".join(rows)


def render_title(command_name: str, current_version: str, use_color: bool | None = None) -> str:
    """Render the base "<command> CLI v<version>" title line."""
    return colorize(colorize(f"{command_name} CLI v{current_version}", BLUE, use_color), BOLD, use_color)


def render_upgrade_message(
    current_version: str,
    latest_version: str,
    command_line: str | None = None,
    use_color: bool | None = None,
) -> str:
    """Render the upgrade notice body.

    Args:
        current_version: Running version
        latest_version: Newer published version
        command_line: Full upgrade command (e.g., "npm i -g my-cli"), if known
        use_color: Override the CLI_NOTIFY_COLOR setting

    Returns:
        One or two lines of notice text
    """
    message = (
        f"New version available {colorize(current_version, MAGENTA, use_color)}"
        f" → {colorize(latest_version, GREEN, use_color)}"
    )
    if command_line:
        message += f"\nRun {colorize(command_line, YELLOW, use_color)} to update!"
    return message
