"""
Help rendering tests (layout, alignment, synthesized help row).

Scope
- Validate the usage line for every combination of children and definitions.
- Validate section order and option alignment on the widest signature.
- Validate the synthesized help row and explicit help definitions.

Conventions
- Test method names follow CamelCase per project convention.
- Expected layouts are written out in full.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from arbor import Command, Definition, Host


def _host():
    return Host(stdout=Console(file=io.StringIO(), width=200, color_system=None))


class TestHelpText(TestCase):
    """Behavioral tests for Command.helptext."""

    def testFullLayout(self):
        tool = Command("tool", host=_host(), defs=[
            Definition("port", "p", int, "Port to listen on", default="80"),
            Definition("tags", required=True, multiple=True),
            Definition("verbose", "v", bool, "Chatty output"),
        ])
        tool.command("build", "Build the project")
        tool.command("clean")
        self.assertEqual(tool.helptext(), "\n".join((
            "Usage: tool <subcommand> [options]",
            "",
            "Subcommands:",
            "  build - Build the project",
            "  clean",
            "",
            "Options:",
            "  -p, --port <int>  Port to listen on (default: 80)",
            "  --tags <string>   (required) (multiple allowed)",
            "  -v, --verbose     Chatty output",
            "  -h, --help        Show this help message and exit",
        )))

    def testBareCommand(self):
        self.assertEqual(Command("bare", host=_host()).helptext(), "Usage: bare")

    def testChildrenOnly(self):
        tool = Command("tool", host=_host())
        tool.command("serve", "run the server")
        self.assertEqual(tool.helptext(), "\n".join((
            "Usage: tool <subcommand>",
            "",
            "Subcommands:",
            "  serve - run the server",
        )))

    def testDefinitionsOnly(self):
        tool = Command("tool", host=_host(), defs=[Definition("ratio", type=float)])
        self.assertEqual(tool.helptext(), "\n".join((
            "Usage: tool [options]",
            "",
            "Options:",
            "  --ratio <float>",
            "  -h, --help       Show this help message and exit",
        )))

    def testExplicitHelpDefinitionWithShort(self):
        tool = Command("tool", host=_host(), defs=[
            Definition("help", "h", bool, "Print usage"),
            Definition("host", descr="Server address"),
        ])
        self.assertEqual(tool.helptext(), "\n".join((
            "Usage: tool [options]",
            "",
            "Options:",
            "  -h, --help       Print usage",
            "  --host <string>  Server address",
        )))

    def testExplicitHelpDefinitionReplacesRow(self):
        tool = Command("tool", host=_host(), defs=[
            Definition("help", type=bool, descr="Print usage"),
            Definition("name", "n"),
        ])
        self.assertEqual(tool.helptext(), "\n".join((
            "Usage: tool [options]",
            "",
            "Options:",
            "  --help               Print usage",
            "  -n, --name <string>",
        )))

    def testChildHelpUsesChildName(self):
        tool = Command("tool", host=_host())
        serve = tool.command("serve")
        serve.define("port", type=int)
        self.assertTrue(serve.helptext().startswith("Usage: serve [options]"))

    def testHelpTextIsDeterministic(self):
        tool = Command("tool", host=_host(), defs=[Definition("name", "n")])
        tool.command("a", "first")
        self.assertEqual(tool.helptext(), tool.helptext())


class TestHelpEmission(TestCase):
    """Behavioral tests for help emitted during resolution."""

    def testEmittedTextMatchesHelpText(self):
        host = _host()
        tool = Command("tool", host=host, defs=[Definition("name", "n", descr="who")])
        with self.assertRaises(SystemExit) as context:
            tool.resolve(["-h"])
        self.assertEqual(context.exception.code, 0)
        self.assertEqual(host.stdout.file.getvalue(), tool.helptext() + "\n")

    def testMarkupIsNotInterpreted(self):
        host = _host()
        tool = Command("tool", host=host, defs=[Definition("name", descr="[bold]raw[/bold]")])
        with self.assertRaises(SystemExit):
            tool.resolve(["--help"])
        self.assertIn("[bold]raw[/bold]", host.stdout.file.getvalue())


if __name__ == "__main__":
    unittest.main()
