"""
Arsenal parse results: the immutable outcome of App.parse().

Snapshot
- values: read-only mapping option name → Value
- errors: tuple of ParseError in discovery order
- subcommand: outermost dispatched subcommand name (or None)
- remaining_args: arguments after "--" (plus preserved unknown options)
- positionals: inert positionals of commands without subcommands
- notes: deprecation notes (DeprecatedOptionWarning), never errors
- path: every dispatched subcommand name, outermost first

Query surface
- success()/failed()/error_count()/bool(result)
- get(name, type) returns the plain python payload or raises a ContractViolation:
  • UnknownValueError (a KeyError) when nothing is stored under name,
  • WrongValueTypeError (a TypeError) when type does not match the stored kind.
- try_get(name, type) returns None instead of raising.
- has(name) tells whether a value is stored; asking about a name that was never
  declared along the parsed command path raises UnknownValueError.
- raise_for_errors() raises a grouped ParseFailure when the parse failed.
"""
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .faults import ParseError, ParseFailure, UnknownValueError, WrongValueTypeError, console
from .utils import *
from .values import Kind, Value


class ParseResult:
    """
    Immutable parse outcome; success() is the single source of truth for success.
    """
    __slots__ = ("_values", "_errors", "_subcommand", "_remaining", "_positionals", "_notes", "_declared", "_path")

    def __init__(
            self,
            values=(),
            errors=(),
            subcommand=None,
            remaining_args=(),
            *,
            positionals=(),
            notes=(),
            declared=(),
            path=(),
    ):
        values = dict(values)
        for name, value in values.items():
            if not isinstance(value, Value):
                raise TypeError("result value for %r must be a Value" % name)
        errors = tuple(errors)
        if not all(isinstance(error, ParseError) for error in errors):
            raise TypeError("result errors must be ParseError instances")
        object.__setattr__(self, "_values", MappingProxyType(values))
        object.__setattr__(self, "_errors", errors)
        object.__setattr__(self, "_subcommand", subcommand)
        object.__setattr__(self, "_remaining", tuple(remaining_args))
        object.__setattr__(self, "_positionals", tuple(positionals))
        object.__setattr__(self, "_notes", tuple(notes))
        object.__setattr__(self, "_declared", frozenset(declared).union(values))
        object.__setattr__(self, "_path", tuple(path))

    def __setattr__(self, name, value, /):
        raise AttributeError("parse results are immutable")

    def success(self):
        return not self._errors

    def failed(self):
        return bool(self._errors)

    def error_count(self):
        return len(self._errors)

    def __bool__(self):
        return self.success()

    def errors(self):
        return self._errors

    def values(self):
        return self._values

    def subcommand(self):
        return self._subcommand

    def remaining_args(self):
        return self._remaining

    def positionals(self):
        return self._positionals

    def notes(self):
        return self._notes

    def path(self):
        """
        Names of every dispatched subcommand, outermost first.
        """
        return self._path

    def declared(self):
        return self._declared

    def has(self, name, /):
        if name in self._values:
            return True
        if name not in self._declared:
            raise UnknownValueError("no option named %r was declared" % name)
        return False

    def get(self, name, type=Unset, /):
        """
        Plain python payload stored under name.

        Parameters
        - name: option name (long alias, or short alias for short-only options).
        - type: optional expected type (str, bool, int, float, list or a Kind).

        Raises
        - UnknownValueError: no value stored under name.
        - WrongValueTypeError: the stored kind is not the requested one.
        """
        try:
            value = self._values[name]
        except KeyError:
            raise UnknownValueError("no value for option %r" % name) from None
        if type is not Unset and not value.matches(type):
            raise WrongValueTypeError("option %r holds a %s value, not %s" % (
                name, value.kind.label, Kind.of(type).label
            ))
        return value.data

    def try_get(self, name, type=Unset, /):
        value = self._values.get(name)
        if value is None:
            return None
        if type is not Unset and not value.matches(type):
            return None
        return value.data

    def error_message(self):
        return "\n".join(error.to_string() for error in self._errors)

    def raise_for_errors(self):
        if self._errors:
            raise ParseFailure(self._errors)
        return self

    def report(self, console=console):
        """
        Print errors and deprecation notes through rich (stderr by default).
        """
        for note in self._notes:
            console.print(note)
        if self._errors:
            console.print(ParseFailure(self._errors))

    def __eq__(self, other, /):
        if not isinstance(other, ParseResult):
            return NotImplemented
        return (
            dict(self._values) == dict(other._values) and
            self._errors == other._errors and
            self._subcommand == other._subcommand and
            self._remaining == other._remaining and
            self._positionals == other._positionals
        )

    __hash__ = None

    def __repr__(self):
        return "parse-result(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "values", {name: value.data for name, value in self._values.items()}
        yield "errors", [error.to_string() for error in self._errors]
        yield "subcommand", self._subcommand
        yield "remaining_args", list(self._remaining)

    def __rich__(self):
        if self.success():
            return Text("ok (%d value(s))" % len(self._values), style="bold green")
        return Group(*self._errors)


__all__ = (
    "ParseResult",
)
