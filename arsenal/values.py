"""
Arsenal values: the closed set of payloads an option can hold.

Overview
- Kind: the tag of a value (STRING, BOOL, INT, FLOAT, LIST).
- Value: immutable tagged variant; the payload always matches the tag.
- CoercionError: raised when text cannot be turned into the requested kind.

Coercion rules
- STRING: identity.
- BOOL:   true/false, yes/no, on/off, 1/0 (case-insensitive).
- INT:    decimal with optional sign; 0x/0o/0b prefixes are honoured.
- FLOAT:  Python float syntax.
- LIST:   a single text becomes a one-element list.

Quick example:
    >>> Value.coerce(Kind.INT, "0x10")
    value(kind=INT, data=16)
    >>> Value.coerce(Kind.BOOL, "yes").data
    True
"""
import re
from enum import IntEnum


class CoercionError(ValueError):
    """
    Raised when a raw text cannot be converted into the requested kind.
    """

    def __init__(self, kind, text, /):
        super().__init__("cannot convert %r to %s" % (text, kind.label))
        self.kind = kind
        self.text = text


class Kind(IntEnum):
    """
    tags of the value sum type.

    the python payload type of each tag:
    - STRING → str
    - BOOL   → bool
    - INT    → int
    - FLOAT  → float
    - LIST   → list[str]
    """
    STRING = 1
    BOOL = 2
    INT = 3
    FLOAT = 4
    LIST = 5

    @property
    def label(self):
        return self.name.lower()

    @property
    def pytype(self):
        return _PYTYPES[self]

    @classmethod
    def of(cls, object, /):
        """
        resolve a python type (str, bool, int, float, list) or a Kind into a Kind.
        """
        if isinstance(object, Kind):
            return object
        for kind, pytype in _PYTYPES.items():
            if object is pytype:
                return kind
        raise TypeError("unsupported value type %r (expected str, bool, int, float or list)" % (object,))

    def __str__(self):
        return self.label


_PYTYPES = {
    Kind.STRING: str,
    Kind.BOOL: bool,
    Kind.INT: int,
    Kind.FLOAT: float,
    Kind.LIST: list,
}

_TRUTHS = {"true": True, "yes": True, "on": True, "1": True, "false": False, "no": False, "off": False, "0": False}

_PREFIXED = re.compile(r"[+-]?0[xXoObB][0-9a-fA-F_]+")


def _conforms(kind, data):
    match kind:
        case Kind.STRING:
            return isinstance(data, str)
        case Kind.BOOL:
            return isinstance(data, bool)
        case Kind.INT:
            return isinstance(data, int) and not isinstance(data, bool)
        case Kind.FLOAT:
            return isinstance(data, float)
        case Kind.LIST:
            return isinstance(data, (list, tuple)) and all(isinstance(item, str) for item in data)


class Value:
    """
    Immutable tagged value.

    Invariant
    - data always has the Python type of kind (see Kind); LIST payloads are kept as a
      tuple of strings internally and handed out as a fresh list.

    Construction
    - Value(kind, data): explicit; raises TypeError when data does not conform.
    - Value.of(object): infer the kind from a Python object.
    - Value.coerce(kind, text): convert raw command-line text.
    """
    __slots__ = ("_kind", "_data")

    def __init__(self, kind, data, /):
        if not isinstance(kind, Kind):
            raise TypeError("value kind must be a Kind")
        if not _conforms(kind, data):
            raise TypeError("%s value cannot hold %r" % (kind.label, data))
        object.__setattr__(self, "_kind", kind)
        object.__setattr__(self, "_data", tuple(data) if kind is Kind.LIST else data)

    def __setattr__(self, name, value, /):
        raise AttributeError("value objects are immutable")

    @property
    def kind(self):
        return self._kind

    @property
    def data(self):
        if self._kind is Kind.LIST:
            return list(self._data)
        return self._data

    @classmethod
    def of(cls, object, /):
        """
        Build a Value from a Python object, inferring its kind.

        bool is checked before int because bool is an int subclass.
        """
        if isinstance(object, Value):
            return object
        if isinstance(object, bool):
            return cls(Kind.BOOL, object)
        if isinstance(object, int):
            return cls(Kind.INT, object)
        if isinstance(object, float):
            return cls(Kind.FLOAT, object)
        if isinstance(object, str):
            return cls(Kind.STRING, object)
        if isinstance(object, (list, tuple)):
            return cls(Kind.LIST, object)
        raise TypeError("cannot build a value from %r" % (object,))

    @classmethod
    def coerce(cls, kind, text, /):
        """
        Convert raw text into a Value of the given kind.

        Raises
        - CoercionError: text is not a valid literal for kind.
        """
        if not isinstance(text, str):
            raise TypeError("coerce() text must be a string")
        match kind:
            case Kind.STRING:
                return cls(kind, text)
            case Kind.BOOL:
                try:
                    return cls(kind, _TRUTHS[text.strip().lower()])
                except KeyError:
                    raise CoercionError(kind, text) from None
            case Kind.INT:
                try:
                    if _PREFIXED.fullmatch(stripped := text.strip()):
                        return cls(kind, int(stripped, 0))
                    return cls(kind, int(stripped, 10))
                except ValueError:
                    raise CoercionError(kind, text) from None
            case Kind.FLOAT:
                try:
                    return cls(kind, float(text))
                except ValueError:
                    raise CoercionError(kind, text) from None
            case Kind.LIST:
                return cls(kind, [text])
            case _:
                raise TypeError("coerce() kind must be a Kind")

    def text(self):
        """
        Textual form(s) of the payload, one entry per element.

        Validators operate on these strings, whatever produced the value
        (command line, environment or default).
        """
        match self._kind:
            case Kind.LIST:
                return list(self._data)
            case Kind.BOOL:
                return ["true" if self._data else "false"]
            case Kind.STRING:
                return [self._data]
            case Kind.INT | Kind.FLOAT:
                return [repr(self._data)]

    def matches(self, pytype, /):
        """
        Whether this value can be read as the given python type (or Kind).
        """
        return self._kind is Kind.of(pytype)

    def __eq__(self, other, /):
        if not isinstance(other, Value):
            return NotImplemented
        return self._kind is other._kind and self._data == other._data

    def __hash__(self):
        return hash((self._kind, self._data))

    def __reduce__(self):
        return type(self), (self._kind, self._data)

    def __repr__(self):
        return "value(kind=%s, data=%r)" % (self._kind.name, self.data)

    def __rich_repr__(self):
        yield "kind", self._kind.name
        yield "data", self.data


__all__ = (
    "Kind",
    "Value",
    "CoercionError",
)
