"""
Arsenal validators: pass/fail checks over a single raw value.

Overview
- Validator: base capability. validate(text) -> (ok, message) and a human description.
- RangeValidator: inclusive numeric range (int or float bounds).
- PatternValidator: full-match against a regular expression.
- ChoiceValidator: membership in an ordered set of allowed strings.
- CustomValidator: wraps a user predicate.

Factories
- range(min, max), pattern(regex, description=""), choice(choices), custom(predicate, description="")

Validators always receive text: values that came from defaults or the
environment are rendered through Value.text() first, so a validator behaves
the same whatever produced the value.

Quick example:
    >>> range(1, 10).validate("11")
    (False, "value '11' is not within [1, 10]")
    >>> choice(["a", "b"]).validate("a")
    (True, '')
"""
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable


class Validator(ABC):
    """
    Base capability for validation rules.

    Subclasses implement validate() and description; the pair (ok, message) keeps
    failure messages with the rule that produced them.
    """
    __slots__ = ()

    @abstractmethod
    def validate(self, text, /):
        """
        Check a raw value.

        Returns
        - (True, "") when the value is acceptable.
        - (False, message) otherwise.
        """

    @property
    @abstractmethod
    def description(self):
        """
        Human-readable description of the rule.
        """

    def __call__(self, text, /):
        return self.validate(text)[0]

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, self.description)


class RangeValidator(Validator):
    __slots__ = ("_min", "_max")

    def __init__(self, min, max, /):
        for bound in (min, max):
            if isinstance(bound, bool) or not isinstance(bound, int | float):
                raise TypeError("range bounds must be numbers")
        if min > max:
            raise ValueError("range minimum cannot be greater than its maximum")
        self._min = min
        self._max = max

    @property
    def min(self):
        return self._min

    @property
    def max(self):
        return self._max

    def validate(self, text, /):
        try:
            number = float(text) if isinstance(self._min, float) or isinstance(self._max, float) else int(text, 10)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return False, "value %r is not a number" % text
        if self._min <= number <= self._max:
            return True, ""
        return False, "value %r is not within [%s, %s]" % (text, self._min, self._max)

    @property
    def description(self):
        return "a number within [%s, %s]" % (self._min, self._max)


class PatternValidator(Validator):
    __slots__ = ("_pattern", "_description")

    def __init__(self, pattern, description="", /):
        if not isinstance(pattern, str):
            raise TypeError("pattern must be a string")
        try:
            self._pattern = re.compile(pattern)
        except re.error as error:
            raise ValueError("invalid pattern %r: %s" % (pattern, error)) from None
        self._description = description.strip() if isinstance(description, str) else ""

    @property
    def pattern(self):
        return self._pattern.pattern

    def validate(self, text, /):
        if self._pattern.fullmatch(text):
            return True, ""
        return False, "value %r does not match %s" % (text, self.description)

    @property
    def description(self):
        return self._description or "pattern %r" % self._pattern.pattern


class ChoiceValidator(Validator):
    __slots__ = ("_choices",)

    def __init__(self, choices, /):
        if isinstance(choices, str) or not isinstance(choices, Iterable):
            raise TypeError("choices must be an iterable of strings")
        sanitized = []
        for choice in choices:
            if not isinstance(choice, str):
                raise TypeError("choices must be strings")
            if choice in sanitized:
                raise ValueError("choices cannot contain duplicates")
            sanitized.append(choice)
        if not sanitized:
            raise ValueError("choices cannot be empty")
        self._choices = tuple(sanitized)

    @property
    def choices(self):
        return self._choices

    def validate(self, text, /):
        if text in self._choices:
            return True, ""
        return False, "value %r is not one of %s" % (text, ", ".join(map(repr, self._choices)))

    @property
    def description(self):
        return "one of %s" % ", ".join(self._choices)


class CustomValidator(Validator):
    __slots__ = ("_predicate", "_description")

    def __init__(self, predicate, description="", /):
        if not callable(predicate):
            raise TypeError("custom validator predicate must be callable")
        self._predicate = predicate
        self._description = description.strip() if isinstance(description, str) else ""

    def validate(self, text, /):
        # exceptions from the predicate propagate; the validation pass reports them
        if self._predicate(text):
            return True, ""
        if self._description:
            return False, self._description
        return False, "value %r was rejected by %s" % (text, getattr(self._predicate, "__name__", "a custom check"))

    @property
    def description(self):
        return self._description or "custom check"


def range(min, max, /):
    """
    Inclusive numeric range validator.
    """
    return RangeValidator(min, max)


def pattern(pattern, description="", /):
    """
    Regular-expression validator (the whole value must match).
    """
    return PatternValidator(pattern, description)


def choice(choices, /):
    """
    Allowed-values validator.
    """
    return ChoiceValidator(choices)


def custom(predicate, description="", /):
    """
    Predicate validator; description doubles as the failure message.
    """
    return CustomValidator(predicate, description)


# factories are not star-exported; use arsenal.validators.range and friends
__all__ = (
    "Validator",
    "RangeValidator",
    "PatternValidator",
    "ChoiceValidator",
    "CustomValidator",
)
