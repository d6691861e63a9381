"""
Arsenal parsing engine: tokens in, ParseResult out.

Pipeline (per command level)
- matching: pull classified tokens from the Tokenizer, resolve aliases through the
  App, consume and coerce values, record occurrences. Problems are recorded as
  ParseError and matching goes on with the next token (accumulate, never abort).
- resolution: apply each option's duplicate policy once, then run callbacks once
  per resolved value.
- dispatch: when a positional named like a subcommand was met, the rest of the raw
  arguments is parsed by the child App with a fresh context.
- validation: environment fallback, defaults, required checks and validators, in
  declaration order.
- assembly: errors keep discovery order (parent matching, child, parent validation);
  child values given on the command line or through the environment are layered
  over parent values, child defaults and implicit false flags only fill gaps.

Only "--" and subcommand dispatch stop the token loop early.

All mutable state lives in a ParseContext owned by a single parse() call, so an App
can be parsed any number of times, from any number of threads.
"""
import difflib
import logging
import os
from collections import defaultdict
from typing import NamedTuple

from .faults import ParseError, ParseErrorType, DeprecatedOptionWarning, trigger
from .options import DuplicatePolicy
from .results import ParseResult
from .tokens import Tokenizer, TokenKind
from .values import Kind, Value, CoercionError

logger = logging.getLogger(__name__)


class Occurrence(NamedTuple):
    """
    One matched appearance of an option: its coerced value and the token that
    named it.
    """
    value: Value
    raw: str


class ParseContext:
    """
    Per-call mutable state of one command level (internal).
    """

    def __init__(self, app, args, environ, /):
        self.app = app
        self.environ = environ
        self.tokens = Tokenizer(
            args,
            grouping=app.settings.enable_posix_grouping,
            resolve=app.resolve,
        )
        self.occurrences = defaultdict(list)
        self.seen = set()
        self.provided = set()
        self.values = {}
        self.errors = []
        self.notes = []
        self.positionals = []
        self.remaining = []
        self.dispatch = None

    def fault(self, type, message, /, argument=None, option_name=None):
        self.errors.append(ParseError(type, message, argument, option_name))


def parse(app, args, environ=None, /):
    """
    Run the whole pipeline for app over args and return a ParseResult.
    """
    result, _ = _parse(app, args, os.environ if environ is None else environ)
    return result


def _parse(app, args, environ, /):
    """
    Parse one command level; also returns the names whose values came from the
    command line or the environment, along the whole dispatched path.
    """
    context = ParseContext(app, args, environ)

    _match(context)
    _resolve(context)

    child = None
    if context.dispatch is not None:
        command, tail = context.dispatch
        logger.debug("%s: dispatching to subcommand %r", app.name(), command.name())
        child = nested, _ = _parse(command, tail, context.environ)
        context.errors.extend(nested.errors())

    _validate(context)
    return _assemble(context, child)


def _match(context):
    app = context.app
    for token in context.tokens:
        if token.kind in (TokenKind.LONG, TokenKind.SHORT):
            logger.debug("%s: %s token %r", app.name(), token.kind.value, token.name)
        else:
            logger.debug("%s: %s token", app.name(), token.kind.value)
        match token.kind:
            case TokenKind.SEPARATOR:
                context.remaining.extend(context.tokens.drain())
            case TokenKind.POSITIONAL:
                if _positional(context, token.raw):
                    break
            case TokenKind.INVALID if app.settings.allow_unknown_options:
                _unknown(context, token)
            case TokenKind.INVALID:
                context.fault(
                    ParseErrorType.INVALID_FORMAT,
                    "malformed option %r" % token.raw,
                    argument=token.raw,
                )
            case TokenKind.UNKNOWN:
                # clusters that do not expand may still spell a single-dash long alias
                spec = app.resolve(token.name, long=True)
                if spec is None:
                    _unknown(context, token)
                else:
                    _option(context, spec, token)
            case TokenKind.LONG | TokenKind.SHORT:
                spec = app.resolve(token.name, long=token.kind is TokenKind.LONG)
                if spec is None:
                    _unknown(context, token)
                else:
                    _option(context, spec, token)


def _positional(context, text):
    """
    Handle a positional token; returns True when it dispatched to a subcommand.
    """
    app = context.app
    if not app.subcommands:
        context.positionals.append(text)
        return False
    if (command := app.subcommands.get(text)) is not None:
        context.dispatch = (command, context.tokens.drain())
        return True
    if app.settings.allow_unknown_options:
        context.remaining.append(text)
        return False
    suggestions = difflib.get_close_matches(text, app.subcommands.keys(), 1)
    message = "unknown subcommand %r" % text
    if suggestions:
        message += " (did you mean %r?)" % suggestions[0]
    context.fault(ParseErrorType.SUBCOMMAND_ERROR, message, argument=text)
    return False


def _unknown(context, token):
    app = context.app
    if app.settings.allow_unknown_options:
        context.remaining.append(token.raw)
        follower = context.tokens.peek()
        if (
                token.value is None and
                follower is not None and
                not follower.startswith("-") and
                follower not in app.subcommands
        ):
            context.remaining.append(context.tokens.take())
        return
    spelled = token.raw.partition("=")[0]
    suggestions = difflib.get_close_matches(spelled, app.aliases(), 1)
    message = "unknown option %r" % spelled
    if suggestions:
        message += " (did you mean %r?)" % suggestions[0]
    context.fault(ParseErrorType.UNKNOWN_OPTION, message, argument=token.raw)


def _eligible(context, text):
    """
    Whether a raw argument may be consumed as an option value.
    """
    if text is None or text == "--":
        return False
    app = context.app
    if text.startswith("--"):
        return app.resolve(text[2:].partition("=")[0], long=True) is None
    if text.startswith("-") and len(text) > 1:
        body = text[1:].partition("=")[0]
        return app.resolve(body[:1]) is None and app.resolve(body) is None
    return True


def _option(context, spec, token):
    name = spec.name
    context.seen.add(name)

    if spec.deprecated and not any(note.option_name == name for note in context.notes):
        note = DeprecatedOptionWarning(spec.deprecated.message, name, spec.deprecated.alternative)
        context.notes.append(note)
        try:
            trigger(note)
        except DeprecatedOptionWarning:
            # escalated by a warnings filter; the note stays in the result
            logger.debug("%s: deprecation warning for %r escalated by filters", context.app.name(), name)

    if spec.is_flag:
        if token.value is not None:
            context.fault(
                ParseErrorType.EXTRA_VALUE,
                "flag %r does not take a value" % token.raw.partition("=")[0],
                argument=token.raw,
                option_name=name,
            )
            return
        _record(context, spec, Occurrence(Value(Kind.BOOL, True), token.raw))
        return

    cardinality = spec.cardinality
    texts = [] if token.value is None else [token.value]
    while (cardinality.max is None or len(texts) < cardinality.max) and _eligible(context, context.tokens.peek()):
        texts.append(context.tokens.take())

    if len(texts) < cardinality.min:
        context.fault(
            ParseErrorType.MISSING_VALUE,
            "option %r expects %s value(s), got %d" % (token.raw.partition("=")[0], cardinality, len(texts)),
            argument=token.raw,
            option_name=name,
        )
        return

    value = _coerce(context, spec, texts, token.raw)
    if value is not None:
        _record(context, spec, Occurrence(value, token.raw))


def _coerce(context, spec, texts, argument, /):
    """
    Coerce raw texts into the option's kind; records TYPE_MISMATCH and returns None
    on failure. List elements are kept in the canonical text of their element kind.
    """
    try:
        if spec.kind is Kind.LIST:
            return Value(Kind.LIST, [Value.coerce(spec.element, text).text()[0] for text in texts])
        return Value.coerce(spec.kind, texts[0])
    except CoercionError as error:
        context.fault(
            ParseErrorType.TYPE_MISMATCH,
            "option %r expects %s values, got %r" % (spec.name, error.kind.label, error.text),
            argument=argument,
            option_name=spec.name,
        )
        return None


def _record(context, spec, occurrence):
    previous = context.occurrences[spec.name]
    if previous and spec.duplicate_policy is DuplicatePolicy.ERROR:
        context.fault(
            ParseErrorType.DUPLICATE_OPTION,
            "option %r was already provided" % spec.name,
            argument=occurrence.raw,
            option_name=spec.name,
        )
        return
    previous.append(occurrence)


def _resolve(context):
    """
    Apply duplicate policies and run callbacks once per resolved value.
    """
    for name, occurrences in context.occurrences.items():
        spec = context.app.options[name]
        match spec.duplicate_policy:
            case DuplicatePolicy.LAST_WINS:
                value = occurrences[-1].value
            case DuplicatePolicy.ACCUMULATE if len(occurrences) > 1:
                value = Value(Kind.LIST, [text for occurrence in occurrences for text in occurrence.value.text()])
            case _:
                value = occurrences[0].value
        if len(occurrences) > 1:
            logger.debug("%s: resolved %d occurrences of %r (%s)", context.app.name(), len(occurrences), name, spec.duplicate_policy.value)
        context.values[name] = value
        context.provided.add(name)
        _call(context, spec, value)


def _call(context, spec, value):
    if spec.callback is None:
        return
    try:
        spec.callback(value)
    except Exception as exception:
        context.fault(
            ParseErrorType.INTERNAL_ERROR,
            "callback for option %r failed: %s" % (spec.name, exception),
            option_name=spec.name,
        )


def _split(spec, text):
    if not spec.cardinality.is_multiple:
        return [text]
    return [item.strip() for item in text.split(",") if item.strip()]


def _environ(context, spec):
    """
    Install a value from the option's environment variable; returns True when one
    was present (even if it failed to coerce).
    """
    text = context.environ.get(spec.env)
    if text is None:
        return False
    texts = _split(spec, text)
    cardinality = spec.cardinality
    if not spec.is_flag and len(texts) < max(cardinality.min, 1):
        context.fault(
            ParseErrorType.MISSING_VALUE,
            "environment variable %r provides no value for option %r" % (spec.env, spec.name),
            argument=text,
            option_name=spec.name,
        )
        return True
    if cardinality.max is not None and not spec.is_flag and len(texts) > cardinality.max:
        context.fault(
            ParseErrorType.EXTRA_VALUE,
            "environment variable %r provides too many values for option %r" % (spec.env, spec.name),
            argument=text,
            option_name=spec.name,
        )
        return True
    if (value := _coerce(context, spec, texts, text)) is not None:
        context.values[spec.name] = value
        context.provided.add(spec.name)
        _call(context, spec, value)
    return True


def _validate(context):
    for name, spec in context.app.options.items():
        if name not in context.seen and not (spec.env and _environ(context, spec)):
            if spec.default is not None:
                context.values[name] = spec.default
            elif spec.is_flag and not spec.required:
                # absent flags read as false; nothing to validate
                context.values[name] = Value(Kind.BOOL, False)
                continue
            elif spec.required:
                context.fault(
                    ParseErrorType.MISSING_REQUIRED,
                    "option %r is required" % " / ".join(spec.aliases),
                    option_name=name,
                )
                continue
            else:
                continue

        if name in context.values:
            _check(context, spec, context.values[name].text())


def _check(context, spec, texts):
    """
    Run validators in order; the first failure stops further checks of this option.
    """
    for text in texts:
        for validator in spec.validators:
            try:
                valid, message = validator.validate(text)
            except Exception as exception:
                context.fault(
                    ParseErrorType.INTERNAL_ERROR,
                    "validator %s for option %r failed: %s" % (validator.description, spec.name, exception),
                    argument=text,
                    option_name=spec.name,
                )
                return
            if not valid:
                context.fault(
                    ParseErrorType.VALIDATION_FAILED,
                    message,
                    argument=text,
                    option_name=spec.name,
                )
                return


def _assemble(context, child):
    app = context.app
    values = dict(context.values)
    remaining = list(context.remaining)
    positionals = list(context.positionals)
    notes = list(context.notes)
    declared = set(app.options)
    provided = set(context.provided)
    subcommand = None
    path = ()

    if child is not None:
        nested, given = child
        command, _ = context.dispatch
        for name, value in nested.values().items():
            if name in given or name not in values:
                values[name] = value
        provided |= given
        remaining += nested.remaining_args()
        positionals += nested.positionals()
        notes += nested.notes()
        declared |= nested.declared()
        subcommand = command.name()
        path = (subcommand,) + nested.path()

    result = ParseResult(
        values,
        context.errors,
        subcommand,
        remaining,
        positionals=positionals,
        notes=notes,
        declared=declared,
        path=path,
    )
    return result, provided


__all__ = (
    "ParseContext",
    "Occurrence",
    "parse",
)
