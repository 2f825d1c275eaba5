r"""
Argosy specification grammars and descriptors.

Overview
- Descriptors
  • Argument: positional argument descriptor (name, required, value, descr).
  • Option: named option descriptor (names, mode, metavar, envvar, value, descr).
  • ValueMode: whether an option takes no value, an optional value, or a required value.

- Parsers (pure, deterministic; safe to call at definition-build time)
  • parse_argument(spec): "NAME" (required) or "[NAME]" (optional).
  • parse_option(spec): "-g, --galaxy-quest", "--output=FILE", "--color[=WHEN]".

Argument grammar
    spec := '[' ident ']' | ident
    tokens: IDENT (maximal run of non-whitespace, non-bracket chars), LBRACK, RBRACK.
    whitespace anywhere is a lexical error.

Option grammar
    spec      := name (',' name)* valuepart?
    name      := '--' longident | '-' shortchar
    valuepart := '=' ident | '[' '=' ident ']'
    tokens: LONGOPT, SHORTOPT, COMMA, EQUALS, LBRACK, RBRACK, IDENT.
    whitespace between tokens is skipped (so "-g, --galaxy-quest" reads naturally).
    - long identifiers: r"[A-Za-z0-9][A-Za-z0-9_-]+" (two or more characters).
    - short names: exactly one r"[A-Za-z0-9]" character.
    - names are kept in the order written; the first one is the primary display name.

Failures
- Every failure raises a SpecificationError subclass (see argosy.faults) carrying
  the full "spec" and the "offset" of the offending token. The first error wins.

Quick example:
    >>> parse_argument("[MEMENTO]")
    argument(name='MEMENTO', required=False, value=None, descr=None)
    >>> parse_option("-g, --galaxy-quest=ALAN_RICKMAN").names
    ('g', 'galaxy-quest')
"""
import functools
import operator
import re
from enum import IntEnum
from typing import NamedTuple

from rich.text import Text

from .faults import *
from .utils import *
from .values import Value


class ValueMode(IntEnum):
    """How an option consumes a value."""
    NONE = 0
    OPTIONAL = 1
    REQUIRED = 2


class DescriptorType(type):
    """
    Metaclass that turns descriptor classes into immutable, introspectable value objects.

    Responsibilities
    - Expose every field listed in __introspectable__ as a read-only property via mirror().
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.
    - Provide value equality/hashing over the introspectable fields, so parsing the
      same specification twice yields equal descriptors.
    - Provide __replace__ so copy.replace(descriptor, value=...) works.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__eq__")
        def __eq__(self, other):
            if type(other) is not type(self):
                return NotImplemented
            return all(getattr(self, name) == getattr(other, name) for name in type(self).__introspectable__)
        self.__eq__ = __eq__

        @rename("__hash__")
        def __hash__(self):
            # value cells hash by identity, rich Text by its plain string
            return hash(tuple(
                id(object) if isinstance(object, Value) else str(object) if isinstance(object, Text) else object
                for object in map(functools.partial(getattr, self), type(self).__introspectable__)
            ))
        self.__hash__ = __hash__

        @rename("__replace__")
        def __replace__(self, /, **changes):
            unknown = changes.keys() - set(type(self).__introspectable__)
            if unknown:
                raise TypeError(f"{type(self).__typename__} has no field(s) {", ".join(sorted(unknown))}")
            fields = {name: getattr(self, name) for name in type(self).__introspectable__} | changes
            return type(self)._build(**fields)
        self.__replace__ = __replace__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate metadata shared by all descriptors.

    - value: None (not yet attached to storage) or a Value cell.
    - descr: Unset | None | str | Text; strings are trimmed and must stay non-empty.
      Unset becomes None.
    """
    if not isinstance(value := metadata["value"], Value | None):
        raise TypeError(f"{cls.__typename__} 'value' must be a value cell")

    if not isinstance(descr := metadata["descr"], str | Text | Unset | None):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


class Argument(metaclass=DescriptorType):
    """
    Positional argument descriptor.

    Fields
    - name: the identifier from the specification (never empty, no whitespace).
    - required: True for "NAME", False for "[NAME]".
    - value: the value cell this argument binds into (None until attached).
    - descr: short description for help output, or None.
    """

    __introspectable__ = (
        "name",
        "required",
        "value",
        "descr",
    )

    def __new__(cls, name, /, required=True, value=None, descr=Unset):
        return cls._build(name=name, required=required, value=value, descr=descr)

    @classmethod
    def _build(cls, **metadata):
        if not isinstance(name := metadata["name"], str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not name or re.search(r"[\s\[\]]", name):
            raise ValueError(f"{cls.__typename__} 'name' must be a non-empty identifier without whitespace or brackets")
        metadata["required"] = bool(metadata["required"])
        _sanitize_metadata(cls, metadata)
        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self


class Option(metaclass=DescriptorType):
    """
    Named option descriptor.

    Fields
    - names: bare names in declaration order (no dashes); one-character names are
      short names, longer ones are long names. The first name is the primary one.
    - mode: ValueMode.NONE / OPTIONAL / REQUIRED.
    - metavar: display name of the value ("FILE" in "--output=FILE"), None without a value part.
    - envvar: environment variable that may provide the value, or None.
    - value: the value cell this option binds into (None until attached).
    - descr: short description for help output, or None.
    """

    __introspectable__ = (
        "names",
        "mode",
        "metavar",
        "envvar",
        "value",
        "descr",
    )

    def __new__(cls, *names, mode=ValueMode.NONE, metavar=Unset, envvar=Unset, value=None, descr=Unset):
        return cls._build(names=names, mode=mode, metavar=metavar, envvar=envvar, value=value, descr=descr)

    @classmethod
    def _build(cls, **metadata):
        if not (names := metadata["names"]):
            raise TypeError(f"{cls.__typename__} must specify at least one name")
        for name in names:
            if not isinstance(name, str):
                raise TypeError(f"{cls.__typename__} names must be strings")
            elif not (re.fullmatch(_SHORT, name) or re.fullmatch(_LONG, name)):
                raise ValueError(f"{cls.__typename__} name {name!r} is not a valid short or long option name")
        if len(set(names)) != len(names):
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
        metadata["names"] = tuple(names)

        metadata["mode"] = ValueMode(metadata["mode"])

        for field in ("metavar", "envvar"):
            if not isinstance(object := metadata[field], str | Unset | None):
                raise TypeError(f"{cls.__typename__} '{field}' must be a string")
            elif isinstance(object, str) and not object:
                raise ValueError(f"{cls.__typename__} '{field}' cannot be empty")
            metadata[field] = coalesce(object)

        _sanitize_metadata(cls, metadata)
        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def primary(self):
        return self.names[0]

    @property
    def shorts(self):
        return tuple(name for name in self.names if len(name) == 1)

    @property
    def longs(self):
        return tuple(name for name in self.names if len(name) > 1)


_SHORT = r"[A-Za-z0-9]"
_LONG = r"[A-Za-z0-9][A-Za-z0-9_-]+"
_IDENT = re.compile(r"[^\s\[\]]+")
_WORD = re.compile(r"[^\s,=\[\]]*")

# Token kinds
IDENT = "IDENT"
LBRACK = "LBRACK"
RBRACK = "RBRACK"
LONGOPT = "LONGOPT"
SHORTOPT = "SHORTOPT"
COMMA = "COMMA"
EQUALS = "EQUALS"
EOF = "EOF"


class Token(NamedTuple):
    kind: str
    text: str
    offset: int


def _lex_argument(spec):
    """Yield argument-grammar tokens, raising on the first whitespace character."""
    index = 0
    while index < len(spec):
        char = spec[index]
        if char.isspace():
            raise UnexpectedWhitespaceError(
                "unexpected whitespace at offset %d in argument specification %r" % (index, spec),
                spec=spec,
                offset=index,
            )
        if char == "[":
            yield Token(LBRACK, char, index)
            index += 1
        elif char == "]":
            yield Token(RBRACK, char, index)
            index += 1
        else:
            match = _IDENT.match(spec, index)
            yield Token(IDENT, match[0], index)
            index = match.end()
    yield Token(EOF, "", len(spec))


def _lex_option(spec):
    """Yield option-grammar tokens; whitespace between tokens is skipped."""
    index = 0
    while index < len(spec):
        char = spec[index]
        if char.isspace():
            index += 1
        elif spec.startswith("--", index):
            match = _WORD.match(spec, index + 2)
            yield Token(LONGOPT, match[0], index)
            index = match.end()
        elif char == "-":
            match = _WORD.match(spec, index + 1)
            yield Token(SHORTOPT, match[0], index)
            index = match.end()
        elif char in ",=[]":
            yield Token({",": COMMA, "=": EQUALS, "[": LBRACK, "]": RBRACK}[char], char, index)
            index += 1
        else:
            match = _WORD.match(spec, index)
            yield Token(IDENT, match[0], index)
            index = match.end()
    yield Token(EOF, "", len(spec))


class _Parser:
    """one-token lookahead over a lazily lexed specification."""

    def __init__(self, spec, lexer):
        self.spec = spec
        self._tokens = lexer(spec)
        self._current = next(self._tokens)

    def peek(self):
        return self._current

    def advance(self):
        token = self._current
        if token.kind != EOF:
            self._current = next(self._tokens)
        return token

    def fail(self, error, message, token):
        raise error(message + " in specification %r" % self.spec, spec=self.spec, offset=token.offset)

    def expect_end(self):
        if (token := self.peek()).kind != EOF:
            self.fail(UnexpectedTrailingInputError, "unexpected %r at offset %d" % (token.text, token.offset), token)


def parse_argument(spec, /):
    """
    Parse an argument specification into an Argument descriptor.

    - "NAME"   → Argument("NAME", required=True)
    - "[NAME]" → Argument("NAME", required=False)

    Raises
    - MissingIdentifierError: empty specification (or one starting with ']').
    - EmptyIdentifierError: "[]" or "[".
    - UnterminatedBracketError: "[NAME" without the closing bracket.
    - UnexpectedWhitespaceError: any whitespace, e.g. "GALAXY QUEST".
    - UnexpectedTrailingInputError: anything after a complete specification.
    """
    if not isinstance(spec, str):
        raise TypeError("parse_argument() argument must be a string")

    parser = _Parser(spec, _lex_argument)
    token = parser.peek()

    if token.kind == LBRACK:
        parser.advance()
        if (token := parser.advance()).kind != IDENT:
            parser.fail(EmptyIdentifierError, "expected an identifier at offset %d" % token.offset, token)
        name = token.text
        if (token := parser.advance()).kind != RBRACK:
            parser.fail(UnterminatedBracketError, "expected ']' at offset %d" % token.offset, token)
        parser.expect_end()
        return Argument(name, required=False)

    if token.kind == IDENT:
        parser.advance()
        parser.expect_end()
        return Argument(token.text, required=True)

    parser.fail(MissingIdentifierError, "expected an identifier at offset %d" % token.offset, token)


def _parse_name(parser):
    token = parser.advance()
    if token.kind == LONGOPT:
        if not re.fullmatch(_LONG, token.text):
            parser.fail(InvalidOptionNameError, "invalid long option name %r" % ("--" + token.text), token)
        return token.text
    if token.kind == SHORTOPT:
        if not re.fullmatch(_SHORT + "+", token.text):
            parser.fail(InvalidOptionNameError, "invalid short option name %r" % ("-" + token.text), token)
        if len(token.text) > 1:
            parser.fail(ShortNameTooLongError, "short option name %r is longer than one character" % ("-" + token.text), token)
        return token.text
    parser.fail(MissingDashPrefixError, "expected an option name starting with '-' or '--' at offset %d" % token.offset, token)


def parse_option(spec, /):
    """
    Parse an option specification into an Option descriptor.

    - "-g, --galaxy-quest"   → names ('g', 'galaxy-quest'), mode NONE
    - "--foo=BAR"            → mode REQUIRED, metavar 'BAR'
    - "--foo[=BAR]"          → mode OPTIONAL, metavar 'BAR'

    Raises
    - MissingDashPrefixError: no leading name ("abc", "", "-a, b").
    - InvalidOptionNameError: "--$$$", "-$", "--a".
    - ShortNameTooLongError: "-abc".
    - EmptyValueNameError: "--foo=", "--foo[=]".
    - ExpectedEqualsError: "--foo[]", "--foo[".
    - UnterminatedBracketError: "--foo[=BAR".
    - UnexpectedTrailingInputError: "--foo=BAR]", "-a -b".
    """
    if not isinstance(spec, str):
        raise TypeError("parse_option() argument must be a string")

    parser = _Parser(spec, _lex_option)
    names = []
    while True:
        token = parser.peek()
        if (name := _parse_name(parser)) in names:
            parser.fail(InvalidOptionNameError, "option name %r is repeated" % name, token)
        names.append(name)
        if parser.peek().kind != COMMA:
            break
        parser.advance()

    token = parser.advance()
    if token.kind == EOF:
        return Option(*names)

    if token.kind == EQUALS:
        if (token := parser.advance()).kind != IDENT:
            parser.fail(EmptyValueNameError, "expected a value name after '=' at offset %d" % token.offset, token)
        parser.expect_end()
        return Option(*names, mode=ValueMode.REQUIRED, metavar=token.text)

    if token.kind == LBRACK:
        if (token := parser.advance()).kind != EQUALS:
            parser.fail(ExpectedEqualsError, "expected '=' after '[' at offset %d" % token.offset, token)
        if (token := parser.advance()).kind != IDENT:
            parser.fail(EmptyValueNameError, "expected a value name after '[=' at offset %d" % token.offset, token)
        metavar = token.text
        if (token := parser.advance()).kind != RBRACK:
            parser.fail(UnterminatedBracketError, "expected ']' at offset %d" % token.offset, token)
        parser.expect_end()
        return Option(*names, mode=ValueMode.OPTIONAL, metavar=metavar)

    parser.fail(UnexpectedTrailingInputError, "unexpected %r at offset %d" % (token.text, token.offset), token)


__all__ = (
    # Descriptors
    "ValueMode",
    "Argument",
    "Option",

    # Parsers
    "parse_argument",
    "parse_option",
)

# Keep the metaclass out of star-imports; it is an implementation detail.
del DescriptorType
