"""
Commands module behavioral tests (App declaration, settings, help).

Scope
- Validate metadata sanitization and alias uniqueness.
- Validate subcommand declaration and ownership.
- Validate settings toggles and read-only accessors.
- Validate that parsing leaves the App untouched and can run concurrently.
- Validate rich-rendered help content.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest import TestCase

from arsenal import App, OptionBuilder, Settings, validators


class TestAppDeclaration(TestCase):
    """Behavioral tests for App configuration."""

    def setUp(self):
        self.app = App("tool", "does things")

    def testMetadata(self):
        self.assertEqual(self.app.name(), "tool")
        self.assertEqual(self.app.description(), "does things")
        self.assertIs(self.app.version("1.2.0"), self.app)
        self.assertEqual(self.app.version(), "1.2.0")
        self.assertIs(self.app.footer("see the manual"), self.app)
        self.assertEqual(self.app.footer(), "see the manual")

    def testNameSanitization(self):
        with self.assertRaises(ValueError):
            App("   ")
        with self.assertRaises(ValueError):
            App("-tool")
        with self.assertRaises(TypeError):
            App(3)
        self.assertEqual(App(" tool ").name(), "tool")

    def testAddOptionReturnsBuilder(self):
        builder = self.app.add_option("o,output", "where to write")
        self.assertIsInstance(builder, OptionBuilder)
        self.assertEqual(list(self.app.options), ["output"])
        self.assertEqual(self.app.options["output"].description, "where to write")

    def testAliasCollisionsRejected(self):
        self.app.add_option("v,verbose")
        with self.assertRaises(ValueError):
            self.app.add_flag("v")
        with self.assertRaises(ValueError):
            self.app.add_flag("x,verbose")
        with self.assertRaises(ValueError):
            self.app.add_option("verbose")

    def testOptionsAreReadOnly(self):
        self.app.add_flag("verbose")
        with self.assertRaises(TypeError):
            self.app.options["other"] = self.app.options["verbose"]  # type: ignore[index]

    def testResolve(self):
        self.app.add_option("o,output")
        self.assertEqual(self.app.resolve("o").name, "output")
        self.assertEqual(self.app.resolve("output", long=True).name, "output")
        self.assertEqual(self.app.resolve("output").name, "output")
        self.assertIsNone(self.app.resolve("o", long=True))
        self.assertEqual(self.app.aliases(), ["-o", "--output"])

    def testSubcommands(self):
        build = self.app.add_subcommand("build", "compile things")
        self.assertIsInstance(build, App)
        self.assertIs(self.app.subcommands["build"], build)
        self.assertIs(build.parent, self.app)
        self.assertEqual(build.path, ("tool", "build"))
        with self.assertRaises(ValueError):
            self.app.add_subcommand("build")

    def testSettings(self):
        self.assertEqual(self.app.settings, Settings(allow_unknown_options=False, enable_posix_grouping=True))
        self.app.allow_unknown_options().enable_posix_grouping(False)
        self.assertEqual(self.app.settings, Settings(True, False))

    def testRepr(self):
        self.app.add_flag("verbose")
        self.assertEqual(repr(self.app), "app(name='tool', description='does things', options=['verbose'])")


class TestAppParsing(TestCase):
    """Parsing is a pure function of the App and its input."""

    def setUp(self):
        self.app = App("tool")
        self.app.add_option("p,port").type(int).check(validators.range(1, 65535))
        self.app.add_flag("v,verbose")

    def testParsingDoesNotMutate(self):
        before = dict(self.app.options)
        self.app.parse(["--port", "80", "-v", "--bogus"], environ={})
        self.assertEqual(dict(self.app.options), before)

    def testConcurrentParses(self):
        def run(index):
            return self.app.parse(["--port", str(index + 1)], environ={}).get("port")

        with ThreadPoolExecutor(max_workers=8) as executor:
            self.assertEqual(list(executor.map(run, range(64))), [index + 1 for index in range(64)])


class TestAppHelp(TestCase):
    """Behavioral tests for help rendering."""

    def setUp(self):
        self.app = App("tool", "does things").version("1.2.0").footer("see the manual")
        self.app.add_option("p,port", "port to bind").type(int).default_value(8080).group("network")
        self.app.add_option("files", "inputs").expected(1, 0)
        self.app.add_option("token", "api token").required().env("TOOL_TOKEN")
        self.app.add_flag("v,verbose", "chatty output")
        self.app.add_flag("old", "legacy switch").deprecated().suggest("--verbose")
        self.app.add_subcommand("build", "compile things")

    def testHelpContent(self):
        text = self.app.help()
        for fragment in (
                "tool 1.2.0",
                "does things",
                "usage: tool [options] <command> ...",
                "network:",
                "-p, --port <int>",
                "default: 8080",
                "--files <string>...",
                "required",
                "env: TOOL_TOKEN",
                "-v, --verbose",
                "deprecated, use --verbose",
                "build",
                "compile things",
                "see the manual",
        ):
            self.assertIn(fragment, text)

    def testHelpIsPlainText(self):
        self.assertNotIn("\x1b[", self.app.help())

    def testSubcommandHelpShowsPath(self):
        self.assertIn("usage: tool build", self.app.subcommands["build"].help())


if __name__ == "__main__":
    unittest.main()
