"""
Results and faults behavioral tests.

Scope
- Validate the ParseResult query surface and its contract violations.
- Validate error formatting, grouping (ParseFailure) and rich rendering.
- Validate triggering of errors and deprecation warnings.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from arsenal import (
    ContractViolation,
    DeprecatedOptionWarning,
    ParseError,
    ParseErrorType,
    ParseFailure,
    ParseResult,
    UnknownValueError,
    Value,
    WrongValueTypeError,
    trigger,
)


def unknown(name):
    return ParseError(ParseErrorType.UNKNOWN_OPTION, "unknown option %r" % name, name)


class TestParseResult(TestCase):
    """Behavioral tests for ParseResult."""

    def setUp(self):
        self.success = ParseResult({"port": Value.of(80), "files": Value.of(["a"])}, declared=["port", "name", "files"])
        self.failure = ParseResult(errors=[unknown("--x"), unknown("--y")])

    def testSuccessQueries(self):
        self.assertTrue(self.success.success())
        self.assertFalse(self.success.failed())
        self.assertEqual(self.success.error_count(), 0)
        self.assertTrue(self.success)

    def testFailureQueries(self):
        self.assertTrue(self.failure.failed())
        self.assertEqual(self.failure.error_count(), 2)
        self.assertFalse(self.failure)

    def testGet(self):
        self.assertEqual(self.success.get("port"), 80)
        self.assertEqual(self.success.get("port", int), 80)
        self.assertEqual(self.success.get("files", list), ["a"])

    def testGetUnknownName(self):
        with self.assertRaises(UnknownValueError) as context:
            self.success.get("name")
        self.assertIsInstance(context.exception, KeyError)
        self.assertIsInstance(context.exception, ContractViolation)

    def testGetWrongType(self):
        with self.assertRaises(WrongValueTypeError) as context:
            self.success.get("port", str)
        self.assertIsInstance(context.exception, TypeError)

    def testTryGet(self):
        self.assertEqual(self.success.try_get("port", int), 80)
        self.assertIsNone(self.success.try_get("port", float))
        self.assertIsNone(self.success.try_get("name"))

    def testHas(self):
        self.assertTrue(self.success.has("port"))
        self.assertFalse(self.success.has("name"))
        with self.assertRaises(UnknownValueError):
            self.success.has("never-declared")

    def testErrorMessage(self):
        self.assertEqual(
            self.failure.error_message(),
            "unknown_option: unknown option '--x' [argument: --x]\n"
            "unknown_option: unknown option '--y' [argument: --y]",
        )

    def testRaiseForErrors(self):
        self.assertIs(self.success.raise_for_errors(), self.success)
        with self.assertRaises(ParseFailure) as context:
            self.failure.raise_for_errors()
        self.assertEqual(context.exception.exceptions, (unknown("--x"), unknown("--y")))

    def testImmutable(self):
        with self.assertRaises(AttributeError):
            self.success.extra = 1
        with self.assertRaises(TypeError):
            self.success.values()["port"] = Value.of(1)  # type: ignore[index]

    def testValuesMustBeValues(self):
        with self.assertRaises(TypeError):
            ParseResult({"port": 80})
        with self.assertRaises(TypeError):
            ParseResult(errors=["bad"])

    def testEqualityIgnoresNotes(self):
        note = DeprecatedOptionWarning("gone", "old")
        self.assertEqual(ParseResult(notes=[note]), ParseResult())

    def testReport(self):
        console = Console(file=io.StringIO(), width=120, color_system=None)
        self.failure.report(console)
        output = console.file.getvalue()
        self.assertIn("2 error(s)", output)
        self.assertIn("unknown option '--x'", output)

    def testRepr(self):
        self.assertTrue(repr(self.success).startswith("parse-result("))


class TestFaults(TestCase):
    """Behavioral tests for ParseError, ParseFailure and warnings."""

    def testToStringWithoutArgument(self):
        error = ParseError(ParseErrorType.MISSING_REQUIRED, "option '--token' is required", option_name="token")
        self.assertEqual(str(error), "missing_required: option '--token' is required")

    def testErrorsAreValues(self):
        self.assertEqual(unknown("--x"), unknown("--x"))
        self.assertEqual(len({unknown("--x"), unknown("--x")}), 1)
        self.assertEqual(unknown("--x").__replace__(argument="--z").argument, "--z")

    def testTypeMustBeAParseErrorType(self):
        with self.assertRaises(TypeError):
            ParseError("unknown_option", "nope")

    def testCodesAreStable(self):
        self.assertEqual(ParseErrorType.UNKNOWN_OPTION.normalize(), "11111")
        self.assertEqual(str(ParseErrorType.TYPE_MISMATCH), "type_mismatch")

    def testTriggerRaisesErrors(self):
        with self.assertRaises(ParseError):
            trigger(unknown("--x"))

    def testTriggerWarnsDeprecations(self):
        with self.assertWarns(DeprecatedOptionWarning):
            trigger(DeprecatedOptionWarning("gone", "old", "--new"))

    def testTriggerNeedsProtocol(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))

    def testFailureIsAnExceptionGroup(self):
        failure = ParseFailure([unknown("--x")])
        self.assertIsInstance(failure, ExceptionGroup)
        match, rest = failure.split(lambda error: getattr(error, "argument", None) == "--x")
        self.assertIsInstance(match, ParseFailure)
        self.assertIsNone(rest)


if __name__ == "__main__":
    unittest.main()
