"""Error taxonomy for the command shell.

Everything a user can provoke from the prompt is an ``MCervError``; the
dispatcher turns those into a printed message and keeps the loop alive.
"""

from __future__ import annotations

PARSE_ERROR = "parse_error"
UNKNOWN_COMMAND = "unknown_command"
NO_HANDLER = "no_handler"
HANDLER_ERROR = "handler_error"
UNEXPECTED_ERROR = "unexpected_error"


class MCervError(Exception):
    code = "error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = str(message or "").strip() or self.code


class ParseError(MCervError):
    """Raised by the tokenizer for input a shell could not split."""

    code = PARSE_ERROR
    UNTERMINATED_QUOTE = "unterminated_quote"
    DANGLING_ESCAPE = "dangling_escape"

    def __init__(self, kind: str, message: str = "failed to parse command") -> None:
        super().__init__(message)
        self.kind = kind


class DispatchError(MCervError):
    code = "dispatch_error"


class UnknownCommandError(DispatchError):
    code = UNKNOWN_COMMAND

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown command: {name}")
        self.name = name


class NoHandlerError(DispatchError):
    """The command exists but needs a sub-command."""

    code = NO_HANDLER

    def __init__(self, name: str, subcommands: tuple[str, ...] = ()) -> None:
        message = f"Command does not have a handler: {name} needs a sub-command"
        if subcommands:
            message += f" ({', '.join(subcommands)})"
        super().__init__(message)
        self.name = name
        self.subcommands = subcommands


class HandlerError(MCervError):
    code = HANDLER_ERROR


class OptionValueError(HandlerError):
    def __init__(self, option: str) -> None:
        super().__init__(f"Missing value for option --{option}")
        self.option = option


def format_error(message: str, *, code: str = "error") -> str:
    text = str(message or "").strip()
    if not text:
        text = code or "error"
    if text.upper().startswith("ERR:"):
        return text
    return f"ERR: {text}"


__all__ = [
    "PARSE_ERROR",
    "UNKNOWN_COMMAND",
    "NO_HANDLER",
    "HANDLER_ERROR",
    "UNEXPECTED_ERROR",
    "MCervError",
    "ParseError",
    "DispatchError",
    "UnknownCommandError",
    "NoHandlerError",
    "HandlerError",
    "OptionValueError",
    "format_error",
]
