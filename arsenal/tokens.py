"""
Arsenal tokenizer: classify raw arguments of one command level.

Classification (priority order)
1. "--"                → SEPARATOR; iteration stops, the tail is available via drain().
2. "--name=value"      → LONG with an attached value (possibly empty).
3. "--name"            → LONG without value (the matcher looks for following values).
4. "-abc" (grouping)   → cluster expansion: flags split off one by one; the first
                          value-taking alias takes the rest of the cluster as its value.
                          If any walked character is unknown the whole cluster becomes a
                          single UNKNOWN token.
5. "-x", "-x=value"    → SHORT (with grouping disabled "-abc" is SHORT named "abc").
6. anything else       → POSITIONAL (a lone "-" included).

Malformed long spellings ("---x", "--=x", "--a b") yield INVALID tokens that keep any
attached value.

The tokenizer is lazy: only tokens pulled through iteration are classified. The
matcher pulls option values straight from the same raw queue with peek()/take(), so
text consumed as a value is never classified.
"""
import re
from collections import deque
from enum import Enum
from typing import NamedTuple

_ALIAS = re.compile(r"[^\W_](-?[^\W_]+)*")


class TokenKind(Enum):
    LONG = "long"
    SHORT = "short"
    POSITIONAL = "positional"
    SEPARATOR = "separator"
    UNKNOWN = "unknown"
    INVALID = "invalid"


class Token(NamedTuple):
    kind: TokenKind
    name: str | None
    value: str | None
    raw: str


class Tokenizer:
    """
    Lazy token stream over the raw arguments of one command level.

    Parameters
    - args: iterable of raw strings.
    - grouping: enable POSIX short-option clusters.
    - resolve: callable(short_alias) -> OptionSpec | None used to expand clusters.
    """

    def __init__(self, args, /, *, grouping=True, resolve=None):
        self._args = deque(args)
        self._pending = deque()
        self._grouping = grouping
        self._resolve = resolve or (lambda alias: None)
        self._stopped = False

    def __iter__(self):
        return self

    def __next__(self):
        if self._pending:
            return self._pending.popleft()
        if self._stopped or not self._args:
            raise StopIteration
        self._pending.extend(self._classify(self._args.popleft()))
        return self._pending.popleft()

    def peek(self):
        """
        Next unclassified raw argument, or None when exhausted or stopped.
        """
        if self._stopped or self._pending or not self._args:
            return None
        return self._args[0]

    def take(self):
        return self._args.popleft()

    def drain(self):
        """
        Hand out every raw argument not consumed yet and stop the stream.
        """
        remaining = list(self._args)
        self._args.clear()
        self._stopped = True
        return remaining

    def _classify(self, raw):
        if raw == "--":
            self._stopped = True
            return [Token(TokenKind.SEPARATOR, None, None, raw)]

        if raw.startswith("--"):
            name, separator, value = raw[2:].partition("=")
            if not _ALIAS.fullmatch(name):
                return [Token(TokenKind.INVALID, name, value if separator else None, raw)]
            return [Token(TokenKind.LONG, name, value if separator else None, raw)]

        if raw.startswith("-") and len(raw) > 1:
            body = raw[1:]
            if "=" in body:
                name, _, value = body.partition("=")
                if not _ALIAS.fullmatch(name):
                    return [Token(TokenKind.INVALID, name, value, raw)]
                return [Token(TokenKind.SHORT, name, value, raw)]
            if len(body) > 1 and self._grouping:
                return self._expand(body, raw)
            return [Token(TokenKind.SHORT, body, None, raw)]

        return [Token(TokenKind.POSITIONAL, None, None, raw)]

    def _expand(self, body, raw):
        tokens = []
        for index, alias in enumerate(body):
            spec = self._resolve(alias)
            if spec is None:
                return [Token(TokenKind.UNKNOWN, body, None, raw)]
            if spec.is_flag:
                tokens.append(Token(TokenKind.SHORT, alias, None, raw))
                continue
            # the first value-taking alias swallows the rest of the cluster
            tokens.append(Token(TokenKind.SHORT, alias, body[index + 1:] or None, raw))
            break
        return tokens


def tokenize(args, /, *, grouping=True, resolve=None):
    """
    Classify a whole argument list eagerly (stops at "--").
    """
    return list(Tokenizer(args, grouping=grouping, resolve=resolve))


__all__ = (
    "TokenKind",
    "Token",
    "Tokenizer",
    "tokenize",
)
