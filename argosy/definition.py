"""
Argosy definitions: the ordered/keyed collection of descriptors for one command.

A Definition is built once per command invocation, before any tokenizing or
binding, by registering specification strings together with the value cells
they bind into:

    >>> definition = Definition()
    >>> definition.add_argument(StringValue(ns, "name"), "NAME", "who to greet")
    >>> definition.add_option(BoolValue(ns, "shout"), "-s, --shout")
    >>> definition.add_option(IntValue(ns, "times"), "-t, --times=COUNT", envvar="GREET_TIMES")

Invariants
- arguments keep declaration order (positionally significant).
- every option name (short or long) maps to exactly one option; registering a
  name twice raises DuplicateOptionError and leaves the definition unchanged.
- a required argument cannot follow an optional one (RequiredAfterOptionalError).
- a Definition is a plain value owned by whoever builds the command; there is no
  process-wide registry.
"""
import copy

from .faults import *
from .specification import parse_argument, parse_option
from .utils import *
from .values import Value


class Definition:
    """
    Ordered arguments plus an option-name map.

    Properties
    - arguments: tuple of Argument descriptors, in declaration order.
    - options: tuple of distinct Option descriptors, in declaration order.
    - names: read-only mapping of every option name to its Option.
    """

    def __init__(self):
        self._arguments = []
        self._options = []
        self._names = {}

    arguments = mirror("arguments")
    options = mirror("options")
    names = mirror("names")

    def add_argument(self, value, spec, descr=Unset, /):
        """
        Parse `spec` with parse_argument() and register it, bound to `value`.

        Raises
        - SpecificationError (from the parser) for a malformed spec.
        - DuplicateArgumentError when the name is already registered.
        - RequiredAfterOptionalError for a required argument after an optional one.
        """
        if not isinstance(value, Value):
            raise TypeError("add_argument() first argument must be a value cell")

        argument = copy.replace(parse_argument(spec), value=value, descr=descr)

        if any(other.name == argument.name for other in self._arguments):
            raise DuplicateArgumentError(
                "argument %r is already defined" % argument.name,
                name=argument.name,
                spec=spec,
            )
        if argument.required and any(not other.required for other in self._arguments):
            raise RequiredAfterOptionalError(
                "required argument %r cannot follow optional argument %r" % (
                    argument.name,
                    next(other.name for other in self._arguments if not other.required),
                ),
                name=argument.name,
                spec=spec,
            )

        self._arguments.append(argument)
        return argument

    def add_option(self, value, spec, descr=Unset, /, *, envvar=Unset):
        """
        Parse `spec` with parse_option() and register it, bound to `value`.

        `envvar` names an environment variable the binder reads as a fallback
        (which, when set, overrides the value given on the command line).

        Raises
        - SpecificationError (from the parser) for a malformed spec.
        - DuplicateOptionError when any of the option's names is already registered.
        """
        if not isinstance(value, Value):
            raise TypeError("add_option() first argument must be a value cell")

        option = copy.replace(parse_option(spec), value=value, descr=descr, envvar=envvar)

        for name in option.names:
            if name in self._names:
                raise DuplicateOptionError(
                    "option name %r is already defined" % (("-" if len(name) == 1 else "--") + name),
                    name=name,
                    spec=spec,
                )

        self._options.append(option)
        for name in option.names:
            self._names[name] = option
        return option

    def lookup(self, name, /):
        """Return the Option registered under the bare `name`, or None."""
        return self._names.get(name)

    def __contains__(self, name):
        return name in self._names

    def __repr__(self):
        return "definition(arguments=%r, options=%r)" % (self.arguments, self.options)

    def __rich_repr__(self):
        yield "arguments", self.arguments
        yield "options", self.options


__all__ = (
    "Definition",
)
