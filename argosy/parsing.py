"""
Argosy input tokenizer: raw argument vectors → structured Input.

The raw input is iterated over, not the definition: every token is classified
as a positional argument or as one or more options regardless of what is
registered. The definition is only consulted to decide whether an option
needs the following token as its value.

Rules (per token, in priority order)
1. "--" ends option parsing; it is always dropped and every later token is a
   positional argument, even when it starts with a dash. There is no way back.
2. "--key" / "--key=value" (more than two characters): one long option.
3. "-k" / "-k=value" (more than one character): a short option. A multi-character
   key is a folded cluster: "-abc=x" is "-a -b -c=x" (only the last one carries
   the inline value).
4. anything else (including a lone "-"): a positional argument.

Value consumption
- Only the last option produced from a token is considered.
- When its name is not registered, the token's options are recorded as they are
  and nothing is consumed; the rest of that token is not looked at again (a
  folded cluster ending in an unknown flag never takes a value).
- When it is registered with ValueMode.REQUIRED, carries no inline value, and a
  following token exists, the following token is consumed whole as its value,
  even if it looks like an option itself.

Quick example:
    >>> tokenize(definition, ["-vo", "out.txt", "--", "-input-"])
    Input(arguments=[InputArgument(value='-input-')],
          options=[InputOption(name='v', value=''), InputOption(name='o', value='out.txt')])
"""
from typing import NamedTuple

from .specification import ValueMode


class InputArgument(NamedTuple):
    value: str


class InputOption(NamedTuple):
    name: str
    value: str = ""  # empty means "no value present"


class Input:
    """
    The tokenized, structured form of an argument vector.

    - arguments: list of InputArgument, in the order given.
    - options: list of InputOption, in the order given (folded clusters expand
      left to right). No re-ordering, no de-duplication.
    """

    def __init__(self, arguments=(), options=()):
        self.arguments = list(arguments)
        self.options = list(options)

    def __eq__(self, other):
        if not isinstance(other, Input):
            return NotImplemented
        return self.arguments == other.arguments and self.options == other.options

    __hash__ = None

    def __repr__(self):
        return "Input(arguments=%r, options=%r)" % (self.arguments, self.options)

    def __rich_repr__(self):
        yield "arguments", self.arguments
        yield "options", self.options


def _split(token, prefix):
    key, _, value = token.removeprefix(prefix).partition("=")
    return key, value


def _long(token):
    key, value = _split(token, "--")
    return [InputOption(key, value)]


def _short(token):
    key, value = _split(token, "-")
    if len(key) > 1:
        # folded: every character is an option, only the last one keeps the value
        return [InputOption(char) for char in key[:-1]] + [InputOption(key[-1], value)]
    return [InputOption(key, value)]


def tokenize(definition, args, /):
    """
    Tokenize `args` (the argument vector without the program name) into an Input.

    Parameters
    - definition: Definition | None
      consulted only to find options that require a value; None means "nothing
      registered".
    - args: iterable of str

    Returns
    - Input
    """
    args = list(args)
    if not all(isinstance(arg, str) for arg in args):
        raise TypeError("tokenize() arguments must be strings")

    input = Input()
    ended = False

    index = 0
    while index < len(args):
        arg = args[index]

        if arg == "--":
            ended = True
        elif not ended and len(arg) > 2 and arg.startswith("--"):
            options = _long(arg)
            index += _consume(definition, options, args, index)
            input.options.extend(options)
        elif not ended and len(arg) > 1 and arg.startswith("-"):
            options = _short(arg)
            index += _consume(definition, options, args, index)
            input.options.extend(options)
        else:
            input.arguments.append(InputArgument(arg))

        index += 1

    return input


def _consume(definition, options, args, index):
    """
    Give the last option of a token the following argument as its value, when needed.

    Mutates `options` in place and returns how many extra tokens were consumed (0 or 1).
    """
    last = options[-1]
    option = definition.lookup(last.name) if definition is not None else None
    if option is None:
        return 0
    if option.mode is ValueMode.REQUIRED and not last.value and index + 1 < len(args):
        options[-1] = last._replace(value=args[index + 1])
        return 1
    return 0


__all__ = (
    "InputArgument",
    "InputOption",
    "Input",
    "tokenize",
)
