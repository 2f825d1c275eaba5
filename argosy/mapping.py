"""
Argosy input binder: Input + environment → caller-owned value cells.

bind(label, definition, input, environ) runs three phases in a fixed order and
stops at the first failure (no partial-continue, no multi-error aggregation):

1. positional arguments
   Declared arguments are walked alongside input.arguments by index and each
   cell is set from its token. When the input runs out, every remaining
   *required* argument is an error; optional ones keep whatever their storage
   already held. Surplus positional tokens are ignored here.

2. options from the input
   For each declared option the input is searched for its names, in declared
   order; when an option was given several times the last occurrence wins.

3. environment fallback
   Every option with an envvar is looked up in the environment and, when the
   variable is present, bound with the same value-assignment rule.

   NOTE: this phase runs after phase 2 and unconditionally, so an environment
   variable that is set OVERRIDES a value given explicitly on the command line
   (`FOO=1 tool --foo=2` binds 1). This inverts the usual convention and is kept
   on purpose; callers that want flags to win must leave the variable unset.

Value-assignment rule for an option and a raw value (possibly empty)
- ValueMode.REQUIRED and empty            → OptionRequiresValueError
- empty and the cell supports flag()      → cell.set(cell.flag()); a failure is an
                                            InvalidFlagDefaultError (library bug)
- ValueMode.OPTIONAL and empty            → nothing happens
- otherwise                               → cell.set(raw); a failure is an
                                            InvalidOptionValueError

The binder never prints, logs or exits; see argosy.faults.trigger for presenting
its errors.
"""
import os
import sys
import warnings
from collections.abc import Mapping

from .faults import *
from .parsing import tokenize
from .specification import ValueMode
from .utils import *
from .values import supports_flag


def _display(name):
    return ("-" if len(name) == 1 else "--") + name


def _environment(environ, stacklevel):
    """
    Normalize an environment snapshot into a dict.

    Accepts a Mapping (e.g. os.environ) or an iterable of "KEY=VALUE" strings,
    split on the first "="; later entries win. Entries without "=" are skipped
    with a MalformedEnvironmentWarning attributed to the frame `stacklevel` points at.
    """
    if isinstance(environ, Mapping):
        return dict(environ)

    variables = {}
    for entry in environ:
        key, equals, value = entry.partition("=")
        if not equals:
            warnings.warn(MalformedEnvironmentWarning(
                "environment entry %r has no '=' and was ignored" % entry,
                entry=entry,
            ), stacklevel=stacklevel)
            continue
        variables[key] = value
    return variables


def _assign(label, option, name, value):
    """Apply the value-assignment rule for one option (see module docstring)."""
    cell = option.value

    if option.mode is ValueMode.REQUIRED and not value:
        raise OptionRequiresValueError(
            "%s: option %r requires a value" % (label, name),
            label=label,
            name=name,
            hint="pass a value with %s=<%s> or %s <%s>" % (
                _display(option.primary), option.metavar, _display(option.primary), option.metavar
            ),
        )

    if not value and supports_flag(cell):
        default = cell.flag()
        try:
            cell.set(default)
        except Exception as exception:
            raise InvalidFlagDefaultError(
                "%s: invalid default value %r for option %r: %s" % (label, default, name, exception),
                label=label,
                name=name,
                value=default,
                cause=exception,
            ) from exception
        return

    if option.mode is ValueMode.OPTIONAL and not value:
        return

    try:
        cell.set(value)
    except Exception as exception:
        raise InvalidOptionValueError(
            "%s: invalid value %r for option %r: %s" % (label, value, name, exception),
            label=label,
            name=name,
            value=value,
            cause=exception,
        ) from exception


def _bind_arguments(label, arguments, input):
    for index, argument in enumerate(arguments):
        if index >= len(input.arguments):
            for missing in arguments[index:]:
                if missing.required:
                    raise MissingRequiredArgumentError(
                        "%s: argument %r is required" % (label, missing.name),
                        label=label,
                        name=missing.name,
                        hint="pass a value for %s" % missing.name,
                    )
            return

        value = input.arguments[index].value
        try:
            argument.value.set(value)
        except Exception as exception:
            raise InvalidArgumentValueError(
                "%s: invalid value %r for argument %r: %s" % (label, value, argument.name, exception),
                label=label,
                name=argument.name,
                value=value,
                cause=exception,
            ) from exception


def _bind_options(label, options, input):
    # last occurrence wins
    given = {option.name: option for option in input.options}

    for option in options:
        for name in option.names:
            if name in given:
                _assign(label, option, name, given[name].value)
                break


def _bind_environment(label, options, environ, stacklevel):
    variables = _environment(environ, stacklevel + 1)

    for option in options:
        if option.envvar and option.envvar in variables:
            _assign(label, option, option.envvar, variables[option.envvar])


def _bind(label, definition, input, environ, stacklevel):
    # stacklevel counts from here; 3 is the caller of a public entry point
    _bind_arguments(label, definition.arguments, input)
    _bind_options(label, definition.options, input)
    _bind_environment(label, definition.options, environ, stacklevel + 1)


def bind(label, definition, input, environ=(), /):
    """
    Bind `input` and `environ` onto the value cells of `definition`.

    Parameters
    - label: str
      context label (usually the command name) prefixed to every error message.
    - definition: Definition
    - input: Input (see argosy.parsing.tokenize)
    - environ: Mapping[str, str] | Iterable[str]
      environment snapshot, either a mapping or "KEY=VALUE" strings.

    Raises
    - MissingRequiredArgumentError, InvalidArgumentValueError (phase 1)
    - OptionRequiresValueError, InvalidOptionValueError, InvalidFlagDefaultError
      (phases 2 and 3)
    """
    _bind(label, definition, input, environ, 3)


def parse(label, definition, args=Unset, environ=Unset, /):
    """
    Tokenize and bind in one call.

    Defaults to the running process: `args` is sys.argv[1:] and `environ` is
    os.environ. Returns the tokenized Input so callers can inspect surplus
    positional arguments or unknown options.
    """
    input = tokenize(definition, coalesce(args, sys.argv[1:]))
    _bind(label, definition, input, coalesce(environ, os.environ), 3)
    return input


__all__ = (
    "bind",
    "parse",
)
