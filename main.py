import os
import sys
from types import SimpleNamespace

from rich import print
from rich.pretty import pprint

from argosy import *

__prog__ = "greet"


def build(namespace):
    definition = Definition()
    definition.add_argument(StringValue(namespace, "name"), "NAME", "who to greet")
    definition.add_argument(StringValue(namespace, "greeting", default="hello"), "[GREETING]", "what to say")
    definition.add_option(BoolValue(namespace, "help"), "-h, --help", "show this help")
    definition.add_option(BoolValue(namespace, "shout"), "-s, --shout", "use capitals")
    definition.add_option(IntValue(namespace, "times", default=1), "-t, --times=COUNT", "repeat", envvar="GREET_TIMES")
    definition.add_option(DurationValue(namespace, "pause"), "-p, --pause[=DELAY]", "wait between lines")
    return definition


if __name__ == '__main__':
    namespace = SimpleNamespace()
    definition = build(namespace)
    input = tokenize(definition, sys.argv[1:])

    # help wins over binding errors (a missing NAME would stop binding first)
    if any(option.name in definition.lookup("help").names for option in input.options):
        print(describe(definition))
        sys.exit(0)

    try:
        bind(__prog__, definition, input, os.environ)
    except ArgosyError as error:
        trigger(error, shell=True)

    pprint(namespace)
    pprint(input)
