r"""
Arbor flag definitions and value validation.

Overview
- FlagType: closed enumeration of value types (bool, int, float, string). Every
  piece of type-dependent behavior (validation, help type-hints) is an exhaustive
  match over it.
- Definition: immutable description of one recognised flag: long name, optional
  short alias, type, description, required/default/multiple attributes.

Metadata (sanitized on construction)
- name: str, non-empty, starts with a letter or digit; single '-', '_' or '.'
  separators are allowed between word characters (no leading dashes, no '=',
  ',' or whitespace anywhere).
- short: Unset | str, same spelling rules as name.
- type: FlagType | "bool" | "int" | "float" | "string" | "str" | bool | int | float | str.
- descr: Unset | str, trimmed, rejected when empty.
- required / multiple: bool.
- default: Unset | str, must pass the definition's own validator.

Quick example:
    >>> port = Definition("port", "p", int, "port to listen on", default="8080")
    >>> port.validate("80"), port.validate("8.0")
    (True, False)
    >>> port.signature
    '-p, --port <int>'
"""
import math
import re
from enum import StrEnum

from .utils import *


class FlagType(StrEnum):
    """
    value type of a flag.

    members carry their display name, which doubles as the help type-hint label.
    """
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"

    @classmethod
    def _missing_(cls, value):
        # builtin classes and the "str" spelling map onto members
        if value == "str":
            return cls.STRING
        for builtin, member in ((bool, cls.BOOL), (int, cls.INT), (float, cls.FLOAT), (str, cls.STRING)):
            if value is builtin:
                return member
        return None

    @property
    def hint(self):
        """help type-hint: empty for booleans, '<type>' otherwise."""
        match self:
            case FlagType.BOOL:
                return ""
            case FlagType.INT | FlagType.FLOAT | FlagType.STRING:
                return "<%s>" % self.value


_SPELLING = re.compile(r"[^\W_](?:[-_.]?\w)*")


def _sanitize_name(field, value, *, optional=False):
    if optional and value is Unset:
        return value
    if not isinstance(value, str):
        raise TypeError(f"Definition {field!r} must be a string")
    if not _SPELLING.fullmatch(value):
        raise ValueError(f"Definition {field!r} {value!r} is not a valid flag name")
    return value


class Definition(StorageGuard):
    """
    Immutable description of one recognised flag.

    Fields are published as read-only properties over guarded backing storage;
    there is no way to mutate a Definition after construction.

    Parameters
    - name: long identifier, used as "--name" and as the key of parsed values.
    - short: optional alias, used as "-short".
    - type: value type (see FlagType); defaults to string.
    - descr: help text.
    - required: parsing fails when the flag never occurs and has no default.
    - default: raw string recorded when the flag never occurs.
    - multiple: occurrences and comma-separated lists accumulate.
    """
    __fields__ = (
        "name",
        "short",
        "type",
        "descr",
        "required",
        "default",
        "multiple",
    )

    name = view("name")
    short = view("short")
    type = view("type")
    descr = view("descr")
    required = view("required")
    default = view("default")
    multiple = view("multiple")

    def __new__(
            cls,
            name,
            /,
            short=Unset,
            type=FlagType.STRING,
            descr=Unset,
            *,
            required=False,
            default=Unset,
            multiple=False
    ):
        name = _sanitize_name("name", name)
        short = _sanitize_name("short", short, optional=True)

        try:
            type = FlagType(type)
        except ValueError:
            raise TypeError(f"Definition 'type' must be one of {', '.join(FlagType)}, not {type!r}") from None

        if descr is not Unset:
            if not isinstance(descr, str):
                raise TypeError("Definition 'descr' must be a string")
            if not (descr := descr.strip()):
                raise ValueError("Definition 'descr' must be a non-empty string")

        if not isinstance(required, bool):
            raise TypeError("Definition 'required' must be a boolean")
        if not isinstance(multiple, bool):
            raise TypeError("Definition 'multiple' must be a boolean")

        if default is not Unset:
            if not isinstance(default, str):
                raise TypeError("Definition 'default' must be a raw string")

        with super().__new__(cls) as self:
            setattr(self, "-name", name)
            setattr(self, "-short", short)
            setattr(self, "-type", type)
            setattr(self, "-descr", descr)
            setattr(self, "-required", required)
            setattr(self, "-default", default)
            setattr(self, "-multiple", multiple)

        if default is not Unset and not self.validate(default):
            raise ValueError(f"Definition default {default!r} is not a valid {type} value")
        return self

    def validate(self, value, /):
        """
        Tell whether a raw string is acceptable for this definition's type.

        Pure and total: returns a plain boolean, never raises.
        - int: parses as an integer and contains no '.'.
        - float: parses as a float that is not NaN.
        - bool: None (absent), "", "true" or "false".
        - string: anything.
        """
        match self.type:
            case FlagType.BOOL:
                return value in (None, "", "true", "false")
            case FlagType.INT:
                if not isinstance(value, str) or "." in value:
                    return False
                try:
                    int(value)
                except ValueError:
                    return False
                return True
            case FlagType.FLOAT:
                if not isinstance(value, str):
                    return False
                try:
                    return not math.isnan(float(value))
                except ValueError:
                    return False
            case FlagType.STRING:
                return True

    @property
    def signature(self):
        """help signature: '-s, --long <hint>' or '--long <hint>'."""
        names = "--" + self.name if self.short is Unset else "-%s, --%s" % (self.short, self.name)
        return " ".join(part for part in (names, self.type.hint) if part)

    @property
    def details(self):
        """help description column: descr plus default/required/multiple notes."""
        notes = [coalesce(self.descr, "")]
        if self.default is not Unset:
            notes.append("(default: %s)" % self.default)
        if self.required:
            notes.append("(required)")
        if self.multiple:
            notes.append("(multiple allowed)")
        return " ".join(note for note in notes if note)

    def __repr__(self):
        fields = ", ".join(
            "%s=%r" % (field, getattr(self, field))
            for field in self.__fields__
            if getattr(self, field) is not Unset
        )
        return f"{type(self).__name__}({fields})"

    def __rich_repr__(self):
        for field in self.__fields__:
            if (value := getattr(self, field)) is not Unset:
                yield field, value


__all__ = (
    "FlagType",
    "Definition",
)
