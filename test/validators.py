"""
Validators module behavioral tests.

Scope
- Validate range, pattern, choice and custom rules over raw text.
- Validate construction-time sanitization of each rule.
- Validate the factory helpers.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from arsenal import validators
from arsenal import Validator, RangeValidator, PatternValidator, ChoiceValidator, CustomValidator


class TestRangeValidator(TestCase):
    """Behavioral tests for RangeValidator."""

    def testRejectsOutOfRange(self):
        valid, message = validators.range(1, 10).validate("11")
        self.assertFalse(valid)
        self.assertEqual(message, "value '11' is not within [1, 10]")

    def testAcceptsInRangeAndBounds(self):
        rule = validators.range(1, 10)
        for text in ("5", "1", "10"):
            self.assertEqual(rule.validate(text), (True, ""))

    def testRejectsNonNumbers(self):
        valid, message = validators.range(1, 10).validate("ten")
        self.assertFalse(valid)
        self.assertIn("not a number", message)

    def testFloatBounds(self):
        rule = validators.range(0.0, 1.0)
        self.assertTrue(rule("0.5"))
        self.assertFalse(rule("1.5"))

    def testInvertedBoundsRejected(self):
        with self.assertRaises(ValueError):
            RangeValidator(10, 1)

    def testBoolBoundsRejected(self):
        with self.assertRaises(TypeError):
            RangeValidator(False, 1)


class TestPatternValidator(TestCase):
    """Behavioral tests for PatternValidator."""

    def testFullMatchRequired(self):
        rule = validators.pattern(r"[a-z]+")
        self.assertTrue(rule("abc"))
        self.assertFalse(rule("abc1"))

    def testDescriptionUsedInMessage(self):
        rule = validators.pattern(r"\d{4}", "a four digit year")
        self.assertEqual(rule.validate("99"), (False, "value '99' does not match a four digit year"))

    def testInvalidPatternRejected(self):
        with self.assertRaises(ValueError):
            PatternValidator("[unclosed")


class TestChoiceValidator(TestCase):
    """Behavioral tests for ChoiceValidator."""

    def testRejectsOutsiders(self):
        rule = validators.choice(["a", "b"])
        valid, message = rule.validate("c")
        self.assertFalse(valid)
        self.assertEqual(message, "value 'c' is not one of 'a', 'b'")
        self.assertTrue(rule("a"))

    def testChoicesKeepOrder(self):
        self.assertEqual(ChoiceValidator(["b", "a"]).choices, ("b", "a"))

    def testEmptyChoicesRejected(self):
        with self.assertRaises(ValueError):
            ChoiceValidator([])

    def testDuplicateChoicesRejected(self):
        with self.assertRaises(ValueError):
            ChoiceValidator(["a", "a"])

    def testStringChoicesRejected(self):
        with self.assertRaises(TypeError):
            ChoiceValidator("ab")


class TestCustomValidator(TestCase):
    """Behavioral tests for CustomValidator."""

    def testPredicate(self):
        rule = validators.custom(str.isupper, "must be upper case")
        self.assertTrue(rule("ABC"))
        self.assertEqual(rule.validate("abc"), (False, "must be upper case"))

    def testDefaultMessageNamesPredicate(self):
        def even(text):
            return int(text) % 2 == 0

        self.assertEqual(CustomValidator(even).validate("3"), (False, "value '3' was rejected by even"))

    def testPredicateErrorsPropagate(self):
        rule = validators.custom(lambda text: 1 / 0)
        with self.assertRaises(ZeroDivisionError):
            rule.validate("x")

    def testNonCallableRejected(self):
        with self.assertRaises(TypeError):
            CustomValidator("nope")


class TestValidatorCapability(TestCase):
    """The base capability cannot be instantiated and every rule implements it."""

    def testAbstractBase(self):
        with self.assertRaises(TypeError):
            Validator()

    def testAllRulesAreValidators(self):
        rules = (
            validators.range(0, 1),
            validators.pattern("x"),
            validators.choice(["x"]),
            validators.custom(bool),
        )
        for rule in rules:
            self.assertIsInstance(rule, Validator)
            self.assertIsInstance(rule.description, str)


if __name__ == "__main__":
    unittest.main()
