"""
Arbor faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain so logs and searches stay predictable.
- CommandException / CommandWarning: base types carrying a message plus read-only
  options, able to render themselves through rich (plain, colorful or fancy).
- Concrete faults, one per failure kind of resolution and parsing.

Propagation
- Faults are raised where they are detected and propagate to whoever called
  Command.resolve()/Command.parse(). Nothing is recovered internally.
- arbor.invoke() is the bundled catcher: it reports the fault through the
  command's Host and terminates with status 1.

Options carried by faults (all optional)
- code: FaultCode, title: short headline, hint: one actionable sentence,
  prog: program name for the header, input: the offending token or flag,
  index: 1-based position in the argument vector, colorful/fancy: rendering mode.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (2110x): UNKNOWN_SUBCOMMAND
    - tokens (2111x): UNEXPECTED_ARGUMENT, UNKNOWN_ARGUMENT
    - values (2112x): MISSING_VALUE, INVALID_VALUE, MISSING_REQUIRED_ARGUMENT
    - warnings (22xxx): SHADOWED_NAME

    gaps between codes leave room for additions without reshuffling.
    """
    # --- routing errors ---
    UNKNOWN_SUBCOMMAND        = 21101

    # --- token errors ---
    UNEXPECTED_ARGUMENT       = 21111
    UNKNOWN_ARGUMENT          = 21112

    # --- value errors ---
    MISSING_VALUE             = 21121
    INVALID_VALUE             = 21122
    MISSING_REQUIRED_ARGUMENT = 21123

    # --- warnings ---
    SHADOWED_NAME             = 22101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels; otherwise the numeric value
        is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette):
    main = __import__("__main__")
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = fault.options.get("colorful", False)
    fancy = fault.options.get("fancy", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style] if colorful else "")

    prog = getattr(main, "__prog__", fault.options.get("prog", "arbor"))
    code = fault.options.get("code")
    title = fault.options.get("title")

    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        *((" — ", text(code.normalize(), "code")) if code is not None else ()),
        " | ",
        text(title.title() if title else type(fault).__name__, "title"),
        " ]"
    )
    message = text(fault.message, "message")
    body = [message]
    if hint := fault.options.get("hint"):
        body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if fancy:
        return Panel(Group(*body), title=header, title_align="left")
    return Group(header, *body)


class CommandException(Exception):
    """
    base class for every resolution/parsing failure.

    the message is human-readable and names the offending identifier; options
    hold structured context (see module docstring) and are read-only.
    """
    __palette__ = {
        "prog-name": "bold #E6E6F0",  # near-white program name
        "code": "bold #00E5FF",  # neon cyan fault code
        "title": "bold #FF4DA6",  # pinky title
        "message": "#C8C8D0",  # soft light gray
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    }

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        self.message = message if message is not Unset else ""
        super().__init__(self.message)
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        return _render(self, self.__palette__)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownSubcommandError(CommandException): ...
class UnexpectedArgumentError(CommandException): ...
class UnknownArgumentError(CommandException): ...
class MissingValueError(CommandException): ...
class InvalidValueError(CommandException): ...
class MissingRequiredArgumentError(CommandException): ...


class CommandWarning(Warning):
    """
    base class for non-fatal advisories (emitted through warnings.warn).
    """
    __palette__ = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #FFB400",  # amber for warnings
        "title": "bold #FFC2E0",
        "message": "#D6D6DE",
        "hint-arrow": "#B8EFAF dim",
        "hint": "italic #B8EFAF",
    }

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        self.message = message if message is not Unset else ""
        super().__init__(self.message)
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        return _render(self, self.__palette__)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ShadowedNameWarning(CommandWarning): ...


__all__ = (
    "FaultCode",
    "CommandException",
    "UnknownSubcommandError",
    "UnexpectedArgumentError",
    "UnknownArgumentError",
    "MissingValueError",
    "InvalidValueError",
    "MissingRequiredArgumentError",
    "CommandWarning",
    "ShadowedNameWarning",
)
