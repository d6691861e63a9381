"""
Arsenal faults (errors and warnings) and rendering.

Scope
- ParseErrorType: canonical, stable numeric identifiers for every parse-time issue.
  Codes are grouped by domain to keep copy consistent and make logs/searches predictable.
- ParseError: value-like exception describing one parse-time issue. Parse errors are
  collected (never raised mid-parse) and handed back through ParseResult.errors().
- ParseFailure: ExceptionGroup bundling every error of a failed parse, raised on demand
  by ParseResult.raise_for_errors().
- DeprecatedOptionWarning: informational note emitted when a deprecated option is used.
- ContractViolation (+ UnknownValueError, WrongValueTypeError): programmer misuse of the
  query API; these are raised immediately and never appear in errors().
- trigger(): central entry point to surface a fault (raise errors, warn warnings).

UX goals
- Lowercased, short messages with the offending argument quoted.
- Rendering through rich with host-overridable styles (__styles__ in __main__).
- Host-overridable code labels (__codes__ in __main__), see ParseErrorType.normalize().
"""
import inspect
import warnings
from collections import defaultdict
from enum import IntEnum

from rich.console import Console, Group
from rich.text import Text

console = Console(stderr=True)


def _styles(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


class ParseErrorType(IntEnum):
    """
    canonical parse error codes (stable identifiers).

    grouping (by high-level domain)
    - options (1111x)
      • UNKNOWN_OPTION, DUPLICATE_OPTION, INVALID_FORMAT, MISSING_VALUE, EXTRA_VALUE
    - values (1112x)
      • TYPE_MISMATCH, VALIDATION_FAILED, MISSING_REQUIRED
    - routing (1110x)
      • SUBCOMMAND_ERROR
    - delegated (1113x)
      • INTERNAL_ERROR (user callbacks or validators that raised)

    rationale
    - codes are discoverable (searchable in logs and docs) and normalized to a string
      via normalize() so hosts can remap them if desired (e.g., to shorter labels).
    - str(code) is the lowercase label (e.g. "unknown_option") used in messages.
    """
    # --- routing errors (1110x) ---
    SUBCOMMAND_ERROR  = 11101

    # --- option errors (1111x) ---
    UNKNOWN_OPTION    = 11111
    INVALID_FORMAT    = 11112
    DUPLICATE_OPTION  = 11113
    MISSING_VALUE     = 11114
    EXTRA_VALUE       = 11115

    # --- value errors (1112x) ---
    TYPE_MISMATCH     = 11121
    VALIDATION_FAILED = 11122
    MISSING_REQUIRED  = 11123

    # --- delegated errors (1113x) ---
    INTERNAL_ERROR    = 11131

    @property
    def label(self):
        return self.name.lower()

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))

    def __str__(self):
        return self.label


class ParseError(Exception):
    """
    One parse-time problem.

    Fields
    - type: ParseErrorType
    - message: human-readable, lowercased sentence
    - argument: the offending command-line text (if any)
    - option_name: the declared option concerned (if any); always the bare name,
      even for errors discovered inside a subcommand

    ParseError behaves as a value: two errors with the same fields compare equal,
    and copies are made with __replace__(**changes).
    """

    def __init__(self, type, message, argument=None, option_name=None):
        if not isinstance(type, ParseErrorType):
            raise TypeError("parse error type must be a ParseErrorType")
        if not isinstance(message, str):
            raise TypeError("parse error message must be a string")
        super().__init__(type, message, argument, option_name)
        self.type = type
        self.message = message
        self.argument = argument
        self.option_name = option_name

    def to_string(self):
        text = "%s: %s" % (self.type.label, self.message)
        if self.argument is not None:
            text += " [argument: %s]" % self.argument
        return text

    def __str__(self):
        return self.to_string()

    def __repr__(self):
        return "parse-error(type=%s, message=%r, argument=%r, option_name=%r)" % (
            self.type.name, self.message, self.argument, self.option_name
        )

    def __eq__(self, other, /):
        if not isinstance(other, ParseError):
            return NotImplemented
        return (self.type, self.message, self.argument, self.option_name) == (
            other.type, other.message, other.argument, other.option_name
        )

    def __hash__(self):
        return hash((self.type, self.message, self.argument, self.option_name))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fields = {
            "type": self.type,
            "message": self.message,
            "argument": self.argument,
            "option_name": self.option_name,
        }
        return type(self)(**(fields | overrides))

    def __rich__(self):
        styles = _styles({
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title
            "error-message": "#C8C8D0",  # soft light gray message
            "argument": "italic #9CE19C",  # gentle green argument
        })
        parts = [
            ("[", ""),
            (self.type.normalize(), styles["code"]),
            (" | ", ""),
            (self.type.label.replace("_", " "), styles["error-title"]),
            ("] ", ""),
            (self.message, styles["error-message"]),
        ]
        if self.argument is not None:
            parts.append((" → %s" % self.argument, styles["argument"]))
        return Text.assemble(*parts)

    def __trigger__(self):
        raise self from None


class ParseFailure(ExceptionGroup):
    """
    All errors of a failed parse, raised by ParseResult.raise_for_errors().
    """

    def __new__(cls, errors, /):
        return super().__new__(cls, "bad parse", tuple(errors))

    def __init__(self, errors, /):
        super().__init__("bad parse", tuple(errors))

    def derive(self, excs, /):
        return ParseFailure(excs)

    def __rich__(self):
        styles = _styles({
            "title": "bold #FF4DA6",  # friendly pinky group title
        })
        header = Text.assemble(("[ ", ""), ("%d error(s)" % len(self.exceptions), styles["title"]), (" ]", ""))
        return Group(header, *self.exceptions)

    def __trigger__(self):
        raise self from None


class DeprecatedOptionWarning(Warning):
    """
    Informational note for a deprecated option; never counts as a parse error.
    """

    def __init__(self, message, option_name, alternative=None):
        super().__init__(message)
        self.message = message
        self.option_name = option_name
        self.alternative = alternative

    def __str__(self):
        if self.alternative:
            return "%s (use %s instead)" % (self.message, self.alternative)
        return self.message

    def __eq__(self, other, /):
        if not isinstance(other, DeprecatedOptionWarning):
            return NotImplemented
        return (self.message, self.option_name, self.alternative) == (
            other.message, other.option_name, other.alternative
        )

    def __hash__(self):
        return hash((self.message, self.option_name, self.alternative))

    def __rich__(self):
        styles = _styles({
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint": "italic #B8EFAF",  # softer green hint text
        })
        parts = [("[deprecated] ", styles["warning-title"]), (self.message, styles["warning-message"])]
        if self.alternative:
            parts.append((" → use %s instead" % self.alternative, styles["hint"]))
        return Text.assemble(*parts)

    def __trigger__(self):
        warnings.warn(self, stacklevel=len(inspect.stack()))


class ContractViolation(Exception):
    """
    Misuse of the result query API (a programmer error, not a parse error).
    """

    def __str__(self):
        return str(self.args[0]) if self.args else ""


class UnknownValueError(ContractViolation, KeyError):
    """
    Raised when a value is requested for a name that holds none (or was never declared).
    """


class WrongValueTypeError(ContractViolation, TypeError):
    """
    Raised when a value is requested with a type that does not match its kind.
    """


def trigger(fault, /):
    """
    surface a fault.

    contract
    - fault must provide a __trigger__ method.
    - errors raise; warnings are emitted through the warnings module.
    """
    if not hasattr(fault, "__trigger__") or not callable(fault.__trigger__):
        raise TypeError("trigger() argument must have a __trigger__ method")
    fault.__trigger__()


__all__ = (
    "ParseErrorType",
    "ParseError",
    "ParseFailure",
    "DeprecatedOptionWarning",
    "ContractViolation",
    "UnknownValueError",
    "WrongValueTypeError",
    "trigger",
)
