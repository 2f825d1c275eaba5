"""
Argosy faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every issue the library
  can report (specification, definition and binding errors, warnings). Codes
  are grouped by domain to keep copy consistent and make logs/searches predictable.
- ArgosyError / ArgosyWarning: base types that carry message + options and know
  how to render themselves in a friendly, lowercased, and actionable way.
- trigger(): entry point for the external collaborator to surface a fault
  (respecting shell/deferred/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Contract with the core
- specification, definition, parsing and mapping only *raise* these faults (or
  warn, for warnings). They never print, log or exit. Whether a fault is
  rendered, raised or turned into an exit status is decided by whoever calls
  trigger().

Error taxonomy
- specification errors (build-time, one per malformed spec string):
  carry "spec" (the full string) and "offset" (index of the offending character).
- definition errors (registration-time): carry the offending "name".
- binding errors (invocation-time): carry "label" (the command label), "name"
  (argument/option name), "value" (raw text, where relevant) and "cause"
  (the exception raised by the value cell, also chained as __cause__).
"""
import copy
import inspect
import os.path
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the library (stable identifiers).

    grouping (by high-level domain)
    - specification (21xxx)
      • MISSING_IDENTIFIER, EMPTY_IDENTIFIER, UNEXPECTED_WHITESPACE,
        UNTERMINATED_BRACKET, INVALID_OPTION_NAME, SHORT_NAME_TOO_LONG,
        MISSING_DASH_PREFIX, EMPTY_VALUE_NAME, EXPECTED_EQUALS,
        UNEXPECTED_TRAILING_INPUT
    - definition (22xxx)
      • DUPLICATE_OPTION, DUPLICATE_ARGUMENT, REQUIRED_AFTER_OPTIONAL
    - binding (23xxx)
      • MISSING_REQUIRED_ARGUMENT, INVALID_ARGUMENT_VALUE, OPTION_REQUIRES_VALUE,
        INVALID_OPTION_VALUE, INVALID_FLAG_DEFAULT
    - warnings (29xxx)
      • MALFORMED_ENVIRONMENT

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- specification errors (21xxx) ---
    MISSING_IDENTIFIER          = 21101
    EMPTY_IDENTIFIER            = 21102
    UNEXPECTED_WHITESPACE       = 21103
    UNTERMINATED_BRACKET        = 21104
    INVALID_OPTION_NAME         = 21111
    SHORT_NAME_TOO_LONG         = 21112
    MISSING_DASH_PREFIX         = 21113
    EMPTY_VALUE_NAME            = 21114
    EXPECTED_EQUALS             = 21115
    UNEXPECTED_TRAILING_INPUT   = 21121

    # --- definition errors (22xxx) ---
    DUPLICATE_OPTION            = 22101
    DUPLICATE_ARGUMENT          = 22102
    REQUIRED_AFTER_OPTIONAL     = 22103

    # --- binding errors (23xxx) ---
    MISSING_REQUIRED_ARGUMENT   = 23101
    INVALID_ARGUMENT_VALUE      = 23102
    OPTION_REQUIRES_VALUE       = 23111
    INVALID_OPTION_VALUE        = 23112
    INVALID_FLAG_DEFAULT        = 23113

    # --- warnings (29xxx) ---
    MALFORMED_ENVIRONMENT       = 29101

    def normalize(self):
        """Display form of the code: __main__.__codes__[code] when the host maps it, else the number."""
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _prog():
    main = __import__("__main__")
    return getattr(main, "__prog__", os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "argosy")


def _render(fault):
    """
    rich rendering shared by errors and warnings.

    layout: "[ prog — code | Title ]", the message, an optional "→ hint" line and
    optional docs. style keys are looked up with the fault family prefix
    ("error-code", "warning-title", ...) so a host can restyle both families
    independently through __main__.__styles__.
    """
    styles = defaultdict(str, fault.__palette__ | getattr(__import__("__main__"), "__styles__", {}))
    colorful = fault.options.get("colorful", True)
    family = fault.__family__

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    code = fault.code
    known = isinstance(code, FaultCode)

    header = Text.assemble(
        "[ ",
        text(fault.options.get("prog", _prog()), styler("prog-name")),
        " — ",
        text(code.normalize() if known else "-----", styler(family + "-code")),
        " | ",
        text(fault.title.title(), styler(family + "-title")),
        " ]"
    )
    body = [text(coalesce(fault.message, ""), styler(family + "-message"))]
    if fault.hint:
        body.append(Text.assemble(text(" → ", styler("hint-arrow")), text(fault.hint, styler("hint"))))
    if docs := coalesce(fault.options.get("docs", Unset), getdoc(code) if known else None):
        body.append(text(docs, styler("docs")))

    if not fault.options.get("fancy", False):
        return Group(header, *body)

    # "ratio" scales the panel to a fraction of the console; without it the panel fills the line
    width = None
    if "ratio" in fault.options:
        width = int((console.width - 4) * fault.options["ratio"])
    return Panel(Group(*body), title=header, title_align="left", width=width)


class _Fault:
    """
    state and behavior shared by ArgosyError and ArgosyWarning.

    - message: the one-sentence, lowercased description (or Unset).
    - options: read-only mapping with the structured context (spec/offset,
      label/name/value/cause) and presentation overrides (title, code, hint,
      docs, prog, shell, deferred, fancy, colorful, ratio).
    - code/title/hint: taken from options first, then from the class-level
      __code__/__title__/__hint__ defaults.
    """
    __code__ = Unset
    __title__ = "fault"
    __hint__ = None
    __family__ = "fault"
    __palette__ = {}

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code", type(self).__code__)

    @property
    def title(self):
        return self.options.get("title", type(self).__title__)

    @property
    def hint(self):
        return self.options.get("hint", type(self).__hint__)

    def __rich__(self):
        return _render(self)

    def __replace__(self, /, **overrides):
        return type(self)(self.message, **(self.options | overrides))


class ArgosyError(_Fault, Exception):
    """
    base class of every error raised by the library.

    triggered outside shell mode the error is raised (chained to options["cause"]);
    in shell mode it is printed to stderr and the process exits with status 1,
    unless deferred=True.
    """
    __title__ = "error"
    __family__ = "error"
    __palette__ = {
        # header parts
        "prog-name": "bold #E6E6F0",  # near-white program name
        "error-code": "bold #00E5FF",  # neon cyan fault code
        "error-title": "bold #FF4DA6",  # pink title

        # body
        "error-message": "#C8C8D0",  # light gray message
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
        "docs": "#737373",
    }

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from self.options.get("cause")
        console.print(self)
        if not self.options.get("deferred", False):
            sys.exit(1)


class SpecificationError(ArgosyError, ValueError):
    """a specification string could not be parsed."""
    __title__ = "bad specification"

    @property
    def spec(self):
        return self.options.get("spec")

    @property
    def offset(self):
        return self.options.get("offset")


class MissingIdentifierError(SpecificationError):
    __code__ = FaultCode.MISSING_IDENTIFIER
    __title__ = "missing identifier"
    __hint__ = "write a name such as 'FILE' or '[FILE]'"


class EmptyIdentifierError(SpecificationError):
    __code__ = FaultCode.EMPTY_IDENTIFIER
    __title__ = "empty identifier"
    __hint__ = "put a name between the brackets (for example: [FILE])"


class UnexpectedWhitespaceError(SpecificationError):
    __code__ = FaultCode.UNEXPECTED_WHITESPACE
    __title__ = "unexpected whitespace"
    __hint__ = "argument names cannot contain spaces; join words with '_' or '-'"


class UnterminatedBracketError(SpecificationError):
    __code__ = FaultCode.UNTERMINATED_BRACKET
    __title__ = "unterminated bracket"
    __hint__ = "close the bracket with ']'"


class InvalidOptionNameError(SpecificationError):
    __code__ = FaultCode.INVALID_OPTION_NAME
    __title__ = "invalid option name"
    __hint__ = "use '-x' for short names and '--long-name' (two or more characters) for long names"


class ShortNameTooLongError(SpecificationError):
    __code__ = FaultCode.SHORT_NAME_TOO_LONG
    __title__ = "short name too long"
    __hint__ = "short names take exactly one character; use '--' for longer names"


class MissingDashPrefixError(SpecificationError):
    __code__ = FaultCode.MISSING_DASH_PREFIX
    __title__ = "missing dash prefix"
    __hint__ = "option names start with '-' or '--' (for example: -v, --verbose)"


class EmptyValueNameError(SpecificationError):
    __code__ = FaultCode.EMPTY_VALUE_NAME
    __title__ = "empty value name"
    __hint__ = "name the value after '=' (for example: --output=FILE)"


class ExpectedEqualsError(SpecificationError):
    __code__ = FaultCode.EXPECTED_EQUALS
    __title__ = "expected equals"
    __hint__ = "optional values are written as '[=VALUE]'"


class UnexpectedTrailingInputError(SpecificationError):
    __code__ = FaultCode.UNEXPECTED_TRAILING_INPUT
    __title__ = "unexpected trailing input"
    __hint__ = "remove everything after the end of the specification"


class DefinitionError(ArgosyError, ValueError):
    """a descriptor could not be registered on a definition."""
    __title__ = "bad definition"


class DuplicateOptionError(DefinitionError):
    __code__ = FaultCode.DUPLICATE_OPTION
    __title__ = "duplicate option"
    __hint__ = "every option name (short or long) may only be registered once"


class DuplicateArgumentError(DefinitionError):
    __code__ = FaultCode.DUPLICATE_ARGUMENT
    __title__ = "duplicate argument"
    __hint__ = "every argument name may only be registered once"


class RequiredAfterOptionalError(DefinitionError):
    __code__ = FaultCode.REQUIRED_AFTER_OPTIONAL
    __title__ = "required after optional"
    __hint__ = "declare required arguments before optional ones"


class BindingError(ArgosyError):
    """input could not be bound onto the definition's value cells."""
    __title__ = "bad input"

    @property
    def label(self):
        return self.options.get("label")

    @property
    def name(self):
        return self.options.get("name")


class MissingRequiredArgumentError(BindingError):
    __code__ = FaultCode.MISSING_REQUIRED_ARGUMENT
    __title__ = "missing argument"


class InvalidArgumentValueError(BindingError):
    __code__ = FaultCode.INVALID_ARGUMENT_VALUE
    __title__ = "invalid argument value"


class OptionRequiresValueError(BindingError):
    __code__ = FaultCode.OPTION_REQUIRES_VALUE
    __title__ = "option requires a value"


class InvalidOptionValueError(BindingError):
    __code__ = FaultCode.INVALID_OPTION_VALUE
    __title__ = "invalid option value"


class InvalidFlagDefaultError(BindingError):
    __code__ = FaultCode.INVALID_FLAG_DEFAULT
    __title__ = "invalid flag default"
    __hint__ = "the value type's flag default is not accepted by its own parser; this is a bug in the value type"


class ArgosyWarning(_Fault, UserWarning):
    """
    base class of every warning emitted by the library.

    triggered outside shell mode the warning goes through warnings.warn (so the
    usual filters apply); in shell mode it is only printed to stderr.
    """
    __title__ = "warning"
    __family__ = "warning"
    __palette__ = {
        # header parts
        "prog-name": "bold #E6E6F0",
        "warning-code": "bold #FFB400",  # amber fault code
        "warning-title": "bold #FFC2E0",  # soft pink title

        # body
        "warning-message": "#D6D6DE",
        "hint-arrow": "#B8EFAF dim",
        "hint": "italic #B8EFAF",
        "docs": "#737373",
    }

    def __trigger__(self) -> None:
        if self.options.get("shell", False):
            console.print(self)
        else:
            warnings.warn(self, stacklevel=self.options.get("stacklevel", len(inspect.stack())))


class MalformedEnvironmentWarning(ArgosyWarning):
    __code__ = FaultCode.MALFORMED_ENVIRONMENT
    __title__ = "malformed environment entry"
    __hint__ = "environment entries are written as KEY=VALUE"


def trigger(fault, /, **options):
    """
    present a fault, after merging `options` into it with copy.replace().

    outside shell mode errors are raised and warnings are warned; with shell=True
    both are rendered on stderr and errors end the process with status 1 (unless
    deferred=True). other useful options: fancy, colorful, prog, title, hint, docs.
    """
    if not callable(getattr(fault, "__trigger__", None)) or not callable(getattr(fault, "__replace__", None)):
        raise TypeError("trigger() argument must be an argosy error or warning")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """documentation the host registered for `code` in __main__.__docs__, or None."""
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FaultCode",

    # Base types
    "ArgosyError",
    "ArgosyWarning",
    "SpecificationError",
    "DefinitionError",
    "BindingError",

    # Specification errors
    "MissingIdentifierError",
    "EmptyIdentifierError",
    "UnexpectedWhitespaceError",
    "UnterminatedBracketError",
    "InvalidOptionNameError",
    "ShortNameTooLongError",
    "MissingDashPrefixError",
    "EmptyValueNameError",
    "ExpectedEqualsError",
    "UnexpectedTrailingInputError",

    # Definition errors
    "DuplicateOptionError",
    "DuplicateArgumentError",
    "RequiredAfterOptionalError",

    # Binding errors
    "MissingRequiredArgumentError",
    "InvalidArgumentValueError",
    "OptionRequiresValueError",
    "InvalidOptionValueError",
    "InvalidFlagDefaultError",

    # Warnings
    "MalformedEnvironmentWarning",

    # Functions
    "trigger",
    "getdoc",
)
