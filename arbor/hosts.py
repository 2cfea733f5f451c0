"""
arbor.hosts
~~~~~~~~~~~

Process-facing collaborator used by commands.

Resolution and parsing never print or exit on their own: the two effects they
need (emitting help text and terminating the process) go through a Host. The
default Host writes through rich consoles and terminates with sys.exit, which
raises SystemExit; tests either catch that or hand commands a Host whose
consoles record into a buffer.

Rendering modes
- plain (default): text only, no ANSI styling.
- colorful: help and faults are styled with the palette (overridable through a
  __styles__ mapping in __main__).
- fancy: faults are wrapped in a titled rich Panel.
"""
import sys

from rich.console import Console
from rich.text import Text

from .utils import *


class Host:
    """
    Emit text and terminate on behalf of a command tree.

    Parameters
    - colorful: bool, style help and fault output.
    - fancy: bool, render faults inside a panel.
    - stdout / stderr: rich Console instances; default to the process streams.
    """

    def __init__(self, *, colorful=False, fancy=False, stdout=Unset, stderr=Unset):
        if not isinstance(colorful, bool):
            raise TypeError("Host 'colorful' must be a boolean")
        if not isinstance(fancy, bool):
            raise TypeError("Host 'fancy' must be a boolean")
        self.colorful = colorful
        self.fancy = fancy
        self.stdout = stdout if stdout is not Unset else Console(highlight=False)
        self.stderr = stderr if stderr is not Unset else Console(stderr=True, highlight=False)

    def emit(self, renderable, /):
        """Write help (a str or rich Text) to stdout, without markup or re-wrapping."""
        if isinstance(renderable, str):
            renderable = Text(renderable)
        self.stdout.print(renderable, soft_wrap=True)

    def report(self, fault, /):
        """Write a rendered fault to stderr using this host's rendering mode."""
        self.stderr.print(fault.__replace__(colorful=self.colorful, fancy=self.fancy))

    def terminate(self, status=0, /):
        """End the process with the given status (raises SystemExit)."""
        sys.exit(status)

    def __repr__(self):
        return f"{type(self).__name__}(colorful={self.colorful!r}, fancy={self.fancy!r})"


__all__ = ("Host",)
