"""Render an operation sequence as iTerm2 AppleScript."""

from collections.abc import Sequence

from it2open.errors import TemplateError
from it2open.script import Delay, FocusNext, NewTab, Operation, SplitHorizontal, SplitVertical, WriteText

INDENT = "  "

_KEYSTROKES: dict[type, str] = {
    SplitVertical: 'keystroke "d" using command down',
    SplitHorizontal: 'keystroke "d" using {command down, shift down}',
    FocusNext: 'keystroke "]" using command down',
}

_NEW_TAB = [
    "if (count of windows) is 0 then",
    f"{INDENT}create window with default profile",
    "else",
    f"{INDENT}tell current window to create tab with default profile",
    "end if",
]


def quote(text: str) -> str:
    """Quote text as an AppleScript string literal.

    Args:
        text: A single line of text.

    Returns:
        The text in double quotes with backslashes and quotes escaped.

    Raises:
        TemplateError: If the text contains a line break.
    """
    if "\n" in text or "\r" in text:
        raise TemplateError(f"cannot type a multi-line command: {text!r}")
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_seconds(seconds: float) -> str:
    """Format a delay without exponent notation, e.g. 0.25 or 1."""
    return f"{seconds:.6f}".rstrip("0").rstrip(".")


def render_operation(operation: Operation) -> list[str]:
    """Render a single operation as AppleScript lines.

    Args:
        operation: The operation to render.

    Returns:
        Unindented script lines.

    Raises:
        TemplateError: If the operation is not supported.
    """
    if isinstance(operation, NewTab):
        return list(_NEW_TAB)
    if isinstance(operation, Delay):
        return [f"delay {format_seconds(operation.seconds)}"]
    if isinstance(operation, WriteText):
        return [f"tell current session of current window to write text {quote(operation.text)}"]
    keystroke = _KEYSTROKES.get(type(operation))
    if keystroke is None:
        raise TemplateError(f"unsupported operation: {operation!r}")
    return [f'tell application "System Events" to {keystroke}']


def render_applescript(operations: Sequence[Operation]) -> str:
    """Render operations as a complete AppleScript program.

    Args:
        operations: Operations in execution order.

    Returns:
        Script text ending with a newline.
    """
    lines = ['tell application "iTerm2"', f"{INDENT}activate"]
    for operation in operations:
        lines.extend(f"{INDENT}{line}" for line in render_operation(operation))
    lines.append("end tell")
    return "\n".join(lines) + "\n"
