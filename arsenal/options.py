r"""
Arsenal option specifications and the fluent option builder.

Overview
- Cardinality(min, max): how many value tokens an option consumes (max None = unlimited).
  • exactly(0) is a flag, exactly(1) a single-value option, anything else multi-value.
- DuplicatePolicy: what a second occurrence does (ERROR, LAST_WINS, ACCUMULATE).
- Deprecation(message, alternative): deprecation metadata.
- OptionSpec: immutable declaration of one option or flag.
- OptionBuilder: fluent configuration handle returned by App.add_option/add_flag.

Metadata (sanitized on construction)
- names: "s,long", "long" or "s"; a one-character part is the short alias.
  Each alias must match r"[^\W_](-?[^\W_]+)*" (unicode letters and digits allowed).
- kind: flags are BOOL; single-value options take their declared type (STRING by
  default); multi-value options are LIST and keep the declared type as 'element'.
- default: a Value whose kind is the option kind (LIST defaults are lists of strings).
- required + default are mutually exclusive (rejected with TypeError).
- env/group: non-empty strings after trimming.
- callback: callable invoked with the resolved Value.

Builder model
- Every builder setter builds a fresh OptionSpec (specs are never mutated) and
  installs it into the owning App under the same name, replacing the previous one.

Quick example:
    >>> app = App("tool")
    >>> app.add_option("t,threads", "worker count").type(int).default_value(4).check(range(1, 64))
    ...
"""
import re
from collections.abc import Iterable
from enum import Enum
from typing import NamedTuple

from .utils import *
from .validators import Validator, CustomValidator
from .values import Kind, Value

_ALIAS = re.compile(r"[^\W_](-?[^\W_]+)*")


class Cardinality(NamedTuple):
    """
    Inclusive bounds on the number of value tokens an option consumes.
    """
    min: int
    max: int | None

    @classmethod
    def exactly(cls, count, /):
        if isinstance(count, bool) or not isinstance(count, int):
            raise TypeError("expected count must be an integer")
        if count < 0:
            raise ValueError("expected count cannot be negative")
        return cls(count, count)

    @classmethod
    def range(cls, min, max, /):
        """
        min..max values; a max of 0 means unlimited.
        """
        for bound in (min, max):
            if isinstance(bound, bool) or not isinstance(bound, int):
                raise TypeError("expected bounds must be integers")
            if bound < 0:
                raise ValueError("expected bounds cannot be negative")
        if max == 0:
            return cls(min, None)
        if min > max:
            raise ValueError("expected minimum cannot be greater than its maximum")
        return cls(min, max)

    @classmethod
    def flag(cls):
        return cls(0, 0)

    @property
    def is_flag(self):
        return self.max == 0

    @property
    def is_scalar(self):
        return self.min == 1 and self.max == 1

    @property
    def is_multiple(self):
        return not self.is_flag and not self.is_scalar

    def __str__(self):
        if self.max is None:
            return "%d+" % self.min
        if self.min == self.max:
            return str(self.min)
        return "%d..%d" % (self.min, self.max)


class DuplicatePolicy(Enum):
    ERROR = "error"
    LAST_WINS = "last_wins"
    ACCUMULATE = "accumulate"


class Deprecation(NamedTuple):
    message: str
    alternative: str | None = None


def parse_names(names, /):
    """
    Split an option spec string into (short, long).

    Accepted forms
    - "v,verbose" → ("v", "verbose")
    - "verbose"   → (None, "verbose")
    - "v"         → ("v", None)

    Raises
    - TypeError: names is not a string.
    - ValueError: empty, malformed or ambiguous spec.
    """
    if not isinstance(names, str):
        raise TypeError("option names must be a string")
    short = long = None
    parts = [part.strip().lstrip("-") for part in names.split(",")]
    if not names.strip() or len(parts) > 2:
        raise ValueError("option names must look like 'short,long' or 'long' (got %r)" % names)
    for part in parts:
        if not part:
            raise ValueError("option names cannot contain empty aliases (got %r)" % names)
        if not _ALIAS.fullmatch(part):
            raise ValueError("option alias %r is not a valid shell-style name" % part)
        if len(part) == 1:
            if short is not None:
                raise ValueError("option names cannot declare two short aliases (got %r)" % names)
            short = part
        else:
            if long is not None:
                raise ValueError("option names cannot declare two long aliases (got %r)" % names)
            long = part
    return short, long


class OptionSpec:
    """
    Immutable declaration of one option or flag.

    Identity
    - short/long aliases (at least one); 'name' is the long alias when present, the
      short alias otherwise, and is the key under which values are reported.

    Attributes are exposed through read-only properties (see __introspectable__);
    use __replace__(**changes) to derive a modified copy, which re-runs every check.
    """

    __introspectable__ = (
        "short",
        "long",
        "description",
        "type",
        "cardinality",
        "required",
        "default",
        "validators",
        "env",
        "duplicate_policy",
        "deprecated",
        "group",
        "callback",
    )

    short = mirror("short")
    long = mirror("long")
    description = mirror("description")
    type = mirror("type")
    cardinality = mirror("cardinality")
    required = mirror("required")
    default = mirror("default")
    validators = mirror("validators")
    env = mirror("env")
    duplicate_policy = mirror("duplicate_policy")
    deprecated = mirror("deprecated")
    group = mirror("group")
    callback = mirror("callback")

    def __init__(
            self,
            short=None,
            long=None,
            /,
            description="",
            type=Kind.STRING,
            cardinality=Cardinality(1, 1),
            required=False,
            default=None,
            validators=(),
            env=None,
            duplicate_policy=DuplicatePolicy.ERROR,
            deprecated=None,
            group=None,
            callback=None,
    ):
        if short is None and long is None:
            raise TypeError("option must specify at least one alias")
        if not isinstance(description, str):
            raise TypeError("option 'description' must be a string")
        if not isinstance(cardinality, Cardinality):
            raise TypeError("option 'cardinality' must be a Cardinality")
        if not isinstance(duplicate_policy, DuplicatePolicy):
            raise TypeError("option 'duplicate_policy' must be a DuplicatePolicy")

        type = Kind.of(type)
        if cardinality.is_flag and type is not Kind.BOOL:
            raise TypeError("flag %r cannot be typed %s" % (long or short, type.label))
        if type is Kind.LIST and not cardinality.is_multiple:
            raise TypeError("option %r must expect several values to be typed list" % (long or short))

        if default is not None:
            default = Value.of(default)
        if default is not None and required:
            raise TypeError("required option %r cannot have a default value" % (long or short))

        validators = tuple(validators)
        if not all(isinstance(validator, Validator) for validator in validators):
            raise TypeError("option 'validators' must be Validator instances")

        for field, object in (("env", env), ("group", group)):
            if object is not None and (not isinstance(object, str) or not object.strip()):
                raise ValueError("option %r must be a non-empty string" % field)

        if deprecated is not None and not isinstance(deprecated, Deprecation):
            raise TypeError("option 'deprecated' must be a Deprecation")
        if callback is not None and not callable(callback):
            raise TypeError("option 'callback' must be callable")

        self._short = short
        self._long = long
        self._description = description.strip()
        self._type = type
        self._cardinality = cardinality
        self._required = bool(required)
        self._default = default
        self._validators = validators
        self._env = env.strip() if env else None
        self._duplicate_policy = duplicate_policy
        self._deprecated = deprecated
        self._group = group.strip() if group else None
        self._callback = callback

        # integral defaults are accepted for float options
        if default is not None and default.kind is Kind.INT and self.kind is Kind.FLOAT:
            self._default = default = Value(Kind.FLOAT, float(default.data))
        if default is not None and default.kind is not self.kind:
            raise TypeError("default %r does not fit option %r of kind %s" % (
                default.data, self.name, self.kind.label
            ))

    @property
    def name(self):
        return self._long or self._short

    @property
    def kind(self):
        """
        Kind of every value stored under this option's name.
        """
        if self._cardinality.is_multiple:
            return Kind.LIST
        return self._type

    @property
    def element(self):
        """
        Kind each raw token is coerced to (the element kind for multi-value options).
        """
        if self._type is Kind.LIST:
            return Kind.STRING
        return self._type

    @property
    def is_flag(self):
        return self._cardinality.is_flag

    @property
    def aliases(self):
        aliases = []
        if self._short:
            aliases.append("-" + self._short)
        if self._long:
            aliases.append("--" + self._long)
        return tuple(aliases)

    def __replace__(self, *unused, **changes):
        assert not unused, "positional arguments are not allowed"
        fields = {name: getattr(self, "_" + name) for name in type(self).__introspectable__[2:]}
        return type(self)(self._short, self._long, **(fields | changes))

    def __repr__(self):
        return "option-spec(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "name", self.name
        yield "aliases", self.aliases
        yield "kind", self.kind.name
        yield "cardinality", str(self._cardinality)
        if self._required:
            yield "required", True
        if self._default is not None:
            yield "default", self._default.data
        if self._env:
            yield "env", self._env
        if self._deprecated:
            yield "deprecated", self._deprecated.message


class OptionBuilder:
    """
    Fluent configuration handle for one option of an App.

    The builder owns nothing: it holds the App and the option name, and each setter
    installs a fresh OptionSpec into the App (App._install). Chaining is the intended
    usage:

        app.add_option("p,port").type(int).default_value(8080).check(range(1, 65535))
    """
    __slots__ = ("_app", "_name")

    def __init__(self, app, name, /):
        self._app = app
        self._name = name

    @property
    def spec(self):
        return self._app.options[self._name]

    def _update(self, **changes):
        self._app._install(self.spec.__replace__(**changes))
        return self

    def required(self, required=True, /):
        return self._update(required=bool(required))

    def default_value(self, value, /):
        if value is None:
            raise TypeError("default value cannot be None")
        return self._update(default=value)

    def check(self, validator, message="", /):
        """
        Add a validation constraint: a Validator or a predicate over the raw text.
        """
        if not isinstance(validator, Validator):
            if not callable(validator):
                raise TypeError("check() argument must be a Validator or a callable")
            validator = CustomValidator(validator, message)
        return self._update(validators=self.spec.validators + (validator,))

    def env(self, name, /):
        return self._update(env=name)

    def expected(self, min, max=Unset, /):
        """
        expected(n) → exactly n values; expected(min, max) → a range (max 0 = unlimited).
        """
        if max is Unset:
            cardinality = Cardinality.exactly(min)
        else:
            cardinality = Cardinality.range(min, max)
        changes = {"cardinality": cardinality}
        if cardinality.is_flag:
            if self.spec.type not in (Kind.BOOL, Kind.STRING):
                raise TypeError("option %r typed %s cannot become a flag" % (self._name, self.spec.type.label))
            changes["type"] = Kind.BOOL
        elif self.spec.is_flag:
            changes["type"] = Kind.STRING
        return self._update(**changes)

    def callback(self, callback, /):
        return self._update(callback=callback)

    def group(self, group, /):
        return self._update(group=group)

    def deprecated(self, message="", /):
        if not isinstance(message, str):
            raise TypeError("deprecation message must be a string")
        message = message.strip() or "option %r is deprecated" % self._name
        alternative = self.spec.deprecated.alternative if self.spec.deprecated else None
        return self._update(deprecated=Deprecation(message, alternative))

    def suggest(self, alternative, /):
        if not isinstance(alternative, str) or not alternative.strip():
            raise ValueError("suggested alternative must be a non-empty string")
        if not self.spec.deprecated:
            raise TypeError("suggest() requires the option to be deprecated first")
        return self._update(deprecated=self.spec.deprecated._replace(alternative=alternative.strip()))

    def type(self, type, /):
        return self._update(type=Kind.of(type))

    def duplicate_policy(self, policy, /):
        if isinstance(policy, str):
            policy = DuplicatePolicy(policy)
        return self._update(duplicate_policy=policy)

    def __repr__(self):
        return "option-builder(%r)" % self._name


__all__ = (
    "Cardinality",
    "DuplicatePolicy",
    "Deprecation",
    "OptionSpec",
    "OptionBuilder",
    "parse_names",
)
