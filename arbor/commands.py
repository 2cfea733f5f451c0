"""
Arbor command layer: build command trees, resolve subcommands, parse flags.

What this module provides
- Command: a node in a command tree. Each node owns a name, a description, an
  ordered list of Definitions, an ordered mapping of child Commands and, once
  parsed, a mapping of flag name -> collected raw string values.
- invoke(command, prompt): convenience runner that resolves a prompt and turns
  faults into a rendered report plus exit status 1.

Pipeline
- resolve(args): walk into children while the leading token names one, then
  hand the remaining tokens to the selected node's parse().
- parse(args): consume flags left to right with an explicit cursor (a single
  flag may absorb a variable number of following tokens), validate every value,
  then fill defaults and enforce required flags.
- helptext(): deterministic usage/subcommands/options layout.

Quick start
    from arbor import Command, Definition, invoke

    tool = Command("tool", "does things")
    serve = tool.command("serve", "run the server")
    serve.define("port", type=int, required=True, descr="port to listen on")
    serve.define("verbose", "v", bool)

    if __name__ == "__main__":
        selected = invoke(tool)           # e.g. tool serve --port=8080 -v
        print(selected.getint("port"), selected.getbool("verbose"))

Design notes
- Help is a terminal action: the node's help is emitted and the Host terminates
  with status 0. Nothing after the help token is inspected.
- Faults (arbor.faults) propagate to the caller; the messages name the offending
  token and its ordinal position in the original argument vector.
- A token equal to a child name is always a subcommand, even when a flag is
  spelled the same way (a ShadowedNameWarning is emitted at build time).
"""
import difflib
import math
import shlex
import sys
import warnings
from collections import defaultdict
from collections.abc import Iterable
from types import MappingProxyType

from rich.text import Text

from .definitions import Definition, FlagType
from .faults import *
from .hosts import Host
from .utils import *


_HELP = ("help", "h")


def _flaglike(token):
    return token.startswith("-")


def _split(value):
    # comma-separated groups: trimmed, empty segments dropped
    return [segment for segment in map(str.strip, value.split(",")) if segment]


def _spellings(definition):
    spellings = {definition.name, "--" + definition.name}
    if definition.short is not Unset:
        spellings |= {definition.short, "-" + definition.short}
    return spellings


class Command:
    """
    Node of a command tree.

    Responsibilities
    - Composition: owns its Definitions (define) and its children (command).
    - Resolution: resolve() locates the node that should parse the flags.
    - Parsing: parse() fills values from a token sequence.
    - Rendering: helptext() builds the help; the Host prints it.
    - Access: get/getall/getint/getfloat/getbool read parsed values, never raise.

    Lifecycle
    - Built once by the embedding application, then resolve() runs once per
      invocation. values is replaced on every parse(); there is no reset.

    Parameters
    - name: str, command name (also the subcommand token for children).
    - descr: str, one-line description shown in the parent's help.
    - defs: iterable of Definition, registered in order.
    - host: Host used for help output and termination (a default Host otherwise).
    """

    def __init__(self, name, descr=Unset, /, defs=(), *, host=Unset):
        if not isinstance(name, str):
            raise TypeError("Command 'name' must be a string")
        if not name or any(char.isspace() for char in name):
            raise ValueError(f"Command 'name' {name!r} must be a non-empty word")

        if descr is not Unset:
            if not isinstance(descr, str):
                raise TypeError("Command 'descr' must be a string")
            if not (descr := descr.strip()):
                raise ValueError("Command 'descr' must be a non-empty string")

        if not isinstance(host, Host | Unset):
            raise TypeError("Command 'host' must be a Host")
        if not isinstance(defs, Iterable):
            raise TypeError("Command 'defs' must be an iterable of definitions")

        self._name = name
        self._descr = descr
        self._defs = []
        self._children = {}
        self._values = {}
        self._host = host if host is not Unset else Host()

        for definition in defs:
            self.define(definition)

    @property
    def name(self):
        return self._name

    @property
    def descr(self):
        return coalesce(self._descr)

    @property
    def defs(self):
        """Definitions in registration (and help) order."""
        return tuple(self._defs)

    @property
    def children(self):
        """Read-only mapping of subcommand name -> Command, in insertion order."""
        return MappingProxyType(self._children)

    @property
    def values(self):
        """
        Read-only mapping of definition name -> list of collected raw strings.

        Only flags that occurred (or were filled by a default) have a key.
        """
        return MappingProxyType({name: list(values) for name, values in self._values.items()})

    @property
    def host(self):
        return self._host

    def define(self, definition, /, *args, **kwargs):
        """
        Register a Definition on this command and return it.

        Accepts either a ready Definition or the arguments to build one:
            cmd.define(Definition("port", "p", int))
            cmd.define("port", "p", int)

        Raises ValueError when the long or short name is already taken here, or
        when a definition other than 'help' claims a help spelling ('help', 'h').
        """
        if not isinstance(definition, Definition):
            definition = Definition(definition, *args, **kwargs)
        elif args or kwargs:
            raise TypeError("define() takes no extra arguments with a ready definition")

        if definition.name != "help" and {definition.name, definition.short} & set(_HELP):
            raise ValueError(f"Command {self._name!r} reserves '-h' and '--help' for help")

        for other in self._defs:
            if other.name == definition.name:
                raise ValueError(f"Command {self._name!r} already defines '--{definition.name}'")
            if definition.short is not Unset and other.short == definition.short:
                raise ValueError(f"Command {self._name!r} already defines '-{definition.short}'")

        for name in self._children:
            if name in _spellings(definition):
                self._shadowed(name, definition)

        self._defs.append(definition)
        return definition

    def command(self, name, descr=Unset, /, defs=()):
        """
        Create a child command mounted under this one and return it.

        The child shares this command's Host. Raises ValueError when the name
        is already used by another child.
        """
        if name in self._children:
            raise ValueError(f"Command {self._name!r} already has a subcommand named {name!r}")

        child = type(self)(name, descr, defs, host=self._host)

        for definition in self._defs:
            if name in _spellings(definition):
                self._shadowed(name, definition)

        self._children[name] = child
        return child

    def _shadowed(self, name, definition):
        warnings.warn(ShadowedNameWarning(
            "subcommand %r of %r shares its spelling with flag '--%s'; "
            "the subcommand wins when the token comes first" % (name, self._name, definition.name),
            title="shadowed name",
            code=FaultCode.SHADOWED_NAME,
            prog=self._name,
            input=name,
            hint="rename the subcommand or the flag to keep them apart",
        ), stacklevel=3)

    def _lookup(self):
        lookup = {}
        for definition in self._defs:
            lookup[definition.name] = definition
            if definition.short is not Unset:
                lookup[definition.short] = definition
        return lookup

    @staticmethod
    def _tokenize(args, caller):
        if isinstance(args, str) or not isinstance(args, Iterable):
            raise TypeError(f"{caller}() argument must be a sequence of strings")
        tokens = list(args)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError(f"{caller}() argument must be a sequence of strings")
        return tokens

    def resolve(self, args=(), /):
        """
        Select the command node that should parse `args`, parse, and return it.

        Steps, checked in this order on the first token:
        1. '--help' or '-h' → emit this node's help and terminate with status 0.
        2. a child name → recurse into that child with the remaining tokens.
        3. flag-like (starts with '-') → parse here with all tokens.
        4. this node has children → UnknownSubcommandError.
        5. otherwise → parse here with all tokens.
        """
        return self._resolve(self._tokenize(args, "resolve"), 1, (self._name,))

    def _resolve(self, tokens, index, route):
        if tokens:
            head = tokens[0]
            if head in ("--help", "-h"):
                self._helper()
                return self
            if head in self._children:
                child = self._children[head]
                return child._resolve(tokens[1:], index + 1, route + (child.name,))
            if not _flaglike(head) and self._children:
                suggestions = difflib.get_close_matches(head, self._children.keys(), 5)
                try:
                    hint = "did you mean %r? you can also run '%s --help' to see available subcommands" % (
                        suggestions[0], " ".join(route)
                    )
                except IndexError:
                    hint = "run '%s --help' to see available subcommands" % " ".join(route)
                raise UnknownSubcommandError(
                    "unknown subcommand %r at %s position" % (head, ordinal(index)),
                    title="unknown subcommand",
                    code=FaultCode.UNKNOWN_SUBCOMMAND,
                    prog=route[0],
                    input=head,
                    index=index,
                    suggestions=suggestions,
                    hint=hint,
                )
        self._parse(tokens, index, route)
        return self

    def parse(self, args=(), /):
        """
        Parse flag tokens against this node's Definitions into values.

        Each flag token is '-key', '--key', '-key=value' or '--key=value'.
        - inline values are split on commas (trimmed, empties dropped).
        - boolean flags without an inline value record "true".
        - other flags take the next token (or, when multiple, every following
          token up to the next flag-like one), each comma-split as well.
        - an inline value may split to nothing ('--out='); the flag is then
          present with no values.
        - values accumulate across occurrences of the same flag.
        After the scan, absent flags get their default or, when required and
        without a default, fail with MissingRequiredArgumentError.

        Returns this command.
        """
        self._parse(self._tokenize(args, "parse"), 1, (self._name,))
        return self

    def _parse(self, tokens, index, route):
        lookup = self._lookup()
        values = self._values = {}

        cursor = 0
        while cursor < len(tokens):
            token = tokens[cursor]
            position = index + cursor

            if not _flaglike(token):
                raise UnexpectedArgumentError(
                    "unexpected argument %r at %s position" % (token, ordinal(position)),
                    title="unexpected argument",
                    code=FaultCode.UNEXPECTED_ARGUMENT,
                    prog=route[0],
                    input=token,
                    index=position,
                    hint="remove this extra value or run '%s --help' to see the expected usage" % " ".join(route),
                )

            key, separator, inline = (token[2:] if token.startswith("--") else token[1:]).partition("=")
            if not separator:
                inline = None

            if key in _HELP:
                self._helper()
                return

            try:
                definition = lookup[key]
            except KeyError:
                spellings = {
                    spelling: ("--" if spelling == known.name else "-") + spelling
                    for spelling, known in lookup.items()
                }
                suggestions = difflib.get_close_matches(key, spellings.keys(), 5)
                try:
                    hint = "did you mean %r? you can also run '%s --help' to see all options" % (
                        spellings[suggestions[0]], " ".join(route)
                    )
                except IndexError:
                    hint = "try '%s --help' to see all available options" % " ".join(route)
                raise UnknownArgumentError(
                    "unknown argument %r at %s position" % (token.partition("=")[0], ordinal(position)),
                    title="unknown argument",
                    code=FaultCode.UNKNOWN_ARGUMENT,
                    prog=route[0],
                    input=token,
                    index=position,
                    suggestions=suggestions,
                    hint=hint,
                ) from None

            flag = "--" + definition.name
            consumed = 0
            if inline is not None:
                raw = _split(inline)
            elif definition.type is FlagType.BOOL:
                raw = ["true"]
            else:
                # lookahead: one token group, or every following value when multiple
                raw = []
                while cursor + consumed + 1 < len(tokens) and not _flaglike(tokens[cursor + consumed + 1]):
                    raw.extend(_split(tokens[cursor + consumed + 1]))
                    consumed += 1
                    if not definition.multiple:
                        break
                if not consumed:
                    raise MissingValueError(
                        "missing value for argument %r at %s position" % (flag, ordinal(position)),
                        title="missing value",
                        code=FaultCode.MISSING_VALUE,
                        prog=route[0],
                        input=flag,
                        index=position,
                        hint="pass a value after a space or inline (for example: %s=<%s>)" % (flag, definition.type),
                    )

            for value in raw:
                if not definition.validate(value):
                    raise InvalidValueError(
                        "invalid value %r for argument %r of type %s at %s position" % (
                            value, flag, definition.type, ordinal(position)
                        ),
                        title="invalid value",
                        code=FaultCode.INVALID_VALUE,
                        prog=route[0],
                        input=flag,
                        value=value,
                        index=position,
                        hint="%s expects %s" % (flag, {
                            FlagType.BOOL: "'true' or 'false'",
                            FlagType.INT: "a whole number",
                            FlagType.FLOAT: "a number",
                            FlagType.STRING: "text",
                        }[definition.type]),
                    )

            values.setdefault(definition.name, []).extend(raw)

            cursor += 1 + consumed

        for definition in self._defs:
            if definition.name in values:
                continue
            if definition.default is not Unset:
                values[definition.name] = [definition.default]
            elif definition.required:
                raise MissingRequiredArgumentError(
                    "missing required argument '--%s'" % definition.name,
                    title="missing required argument",
                    code=FaultCode.MISSING_REQUIRED_ARGUMENT,
                    prog=route[0],
                    input="--" + definition.name,
                    hint="add '--%s <%s>' or run '%s --help' to see the expected usage" % (
                        definition.name, definition.type, " ".join(route)
                    ),
                )

    def helptext(self):
        """
        Build the help text for this node.

        Layout
            Usage: <name> [<subcommand>] [[options]]

            Subcommands:
              <child> - <descr>

            Options:
              -s, --long <type>  <descr> (default: X) (required) (multiple allowed)
              -h, --help         Show this help message and exit

        Sections are present only when there is something to list; option rows
        are aligned on the widest flag signature.
        """
        usage = [self._name]
        if self._children:
            usage.append("<subcommand>")
        if self._defs:
            usage.append("[options]")
        lines = ["Usage: " + " ".join(usage)]

        if self._children:
            lines.extend(("", "Subcommands:"))
            for name, child in self._children.items():
                lines.append("  " + name + (" - " + child.descr if child.descr else ""))

        if self._defs:
            rows = [(definition.signature, definition.details) for definition in self._defs]
            if all(definition.name != "help" for definition in self._defs):
                rows.append(("-h, --help", "Show this help message and exit"))
            width = max(len(signature) for signature, _ in rows)
            lines.extend(("", "Options:"))
            for signature, details in rows:
                lines.append(("  " + signature.ljust(width) + "  " + details).rstrip())

        return "\n".join(lines)

    def _helper(self):
        """
        Emit this node's help through the Host and terminate with status 0.

        Palette keys (override through a __styles__ mapping in __main__)
        - section-label, program-name, children, flag-name, metavar
        Styling is applied only when the Host is colorful.
        """
        text = self.helptext()
        if self._host.colorful:
            styles = defaultdict(str, {
                "section-label": "bold #FFFFFF",  # Usage/Subcommands/Options
                "program-name": "bold #FF4D94",  # magenta-pink brand pop
                "children": "bold #36C5F0",  # sky-blue subcommands
                "flag-name": "bold #00E6FF",  # cyan flags
                "metavar": "bold #FFD600",  # amber type hints
            } | getattr(__import__("__main__"), "__styles__", {}))
            text = Text(text)
            text.highlight_regex(r"(?m)^(Usage|Subcommands|Options):", styles["section-label"])
            text.highlight_regex(r"(?m)(?<=^Usage: )\S+", styles["program-name"])
            text.highlight_regex(r"(?m)(?<=^  )[^\s-]\S*", styles["children"])
            text.highlight_regex(r"(?m)(?<=^  )(-[^\s,]+, )?--[^\s=]+", styles["flag-name"])
            text.highlight_regex(r"<(int|float|string|subcommand)>|\[options\]", styles["metavar"])
        self._host.emit(text)
        self._host.terminate(0)

    def get(self, name, /):
        """First collected value for `name`, or None."""
        try:
            return self._values[name][0]
        except (KeyError, IndexError):
            return None

    def getall(self, name, /):
        """All collected values for `name` in order (a fresh list), or []."""
        return list(self._values.get(name, ()))

    def getint(self, name, /):
        """First value as int; None when missing, decimal or unparsable."""
        value = self.get(name)
        if value is None or "." in value:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    def getfloat(self, name, /):
        """First value as float; None when missing, unparsable or NaN."""
        value = self.get(name)
        if value is None:
            return None
        try:
            value = float(value)
        except ValueError:
            return None
        return None if math.isnan(value) else value

    def getbool(self, name, /):
        """True when the flag is present with no value, or its first value is "true"."""
        try:
            values = self._values[name]
        except KeyError:
            return False
        return not values or values[0] in ("", "true")

    def __repr__(self):
        return f"{type(self).__name__}({self._name!r}, defs={len(self._defs)}, children={list(self._children)!r})"

    def __rich_repr__(self):
        yield "name", self._name
        yield "descr", self.descr
        yield "defs", self.defs
        yield "children", list(self._children)


def invoke(command, prompt=Unset, /):
    """
    Resolve a prompt against a command tree, reporting faults through its Host.

    Parameters
    - command: the root Command.
    - prompt:
      • Unset: read sys.argv[1:].
      • str: shell-like string, split with shlex.split.
      • Iterable[str]: pre-tokenized arguments.

    Returns the resolved Command. On a CommandException the fault is reported
    through command.host and the host terminates with status 1.
    """
    if not isinstance(command, Command):
        raise TypeError("invoke() first argument must be a command")

    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("invoke() argument must be a string or an iterable of strings")
    else:
        raise TypeError("invoke() argument must be a string or an iterable of strings")

    try:
        return command.resolve(tokens)
    except CommandException as fault:
        command.host.report(fault)
        command.host.terminate(1)


__all__ = (
    "Command",
    "invoke",
)
