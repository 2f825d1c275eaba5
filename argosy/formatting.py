"""
Argosy help rendering: a Definition described for humans.

describe(definition) builds a rich renderable with three sections:

    USAGE:
      tool [OPTIONS] SOURCE [TARGET]

    ARGUMENTS:
      SOURCE              file to read (required)
      TARGET              where to write

    OPTIONS:
      -v, --verbose       talk more
      -o, --output=FILE   output file [env: TOOL_OUTPUT] [default: out.txt]
      -c, --color[=WHEN]  colorize output

Sections without entries are omitted. Nothing is printed here: the caller decides
where the renderable goes (rich.print, a Console, a pager, ...).

Palette keys (override any of them through __main__.__styles__)
- section-label, program-name, usage-section
- argument-name, option-name, metavar
- description, required-marker, env-marker, default-marker
- panel-title
"""
from collections import defaultdict

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .faults import _prog
from .specification import ValueMode
from .utils import *


def _names(option):
    # declared order; the first name is the primary one
    return ", ".join(("-" if len(name) == 1 else "--") + name for name in option.names)


def _metavar(option):
    match option.mode:
        case ValueMode.REQUIRED:
            return "=" + (option.metavar or "VALUE")
        case ValueMode.OPTIONAL:
            return "[=" + (option.metavar or "VALUE") + "]"
        case _:
            return ""


def _default(option):
    # flags report no default; their render ("false") is noise in help output.
    # unwritten storage only holds the kind's zero value, which is not a default
    if option.mode is ValueMode.NONE or option.value is None or not option.value.stored:
        return ""
    return str(option.value)


def usage(definition, prog=Unset, /):
    """
    Return the one-line usage string of `definition`, e.g. "tool [OPTIONS] SOURCE [TARGET]".

    `prog` defaults to __main__.__prog__, then to the basename of sys.argv[0].
    """
    parts = [coalesce(prog, _prog())]
    if definition.options:
        parts.append("[OPTIONS]")
    for argument in definition.arguments:
        parts.append(argument.name if argument.required else "[%s]" % argument.name)
    return " ".join(parts)


def describe(definition, /, *, prog=Unset, colorful=True, fancy=False):
    """
    Build the help renderable for `definition`.

    Parameters
    - prog: program name for the usage line (defaults as in usage()).
    - colorful: when False every style is dropped (plain text output).
    - fancy: wrap the sections in a rounded Panel titled with the program name.

    Returns
    - rich.console.Group, or rich.panel.Panel when fancy=True.
    """
    prog = coalesce(prog, _prog())
    styles = defaultdict(str, {
        # === Head sections ===
        "section-label": "bold #FFFFFF",  # Pure white headers
        "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
        "usage-section": "bold #36C5F0",  # SKY-BLUE

        # === Names / metavars ===
        "argument-name": "bold #FFD600",  # AMBER for positionals
        "option-name": "bold #00E6FF",  # CYAN for options
        "metavar": "bold #FFD600",

        # === Descriptions ===
        "description": "#9CA3AF",  # Muted gray
        "required-marker": "#EF4444",
        "env-marker": "#22C55E dim",
        "default-marker": "#737373",

        # === Fancy panel ===
        "panel-title": "bold #FF4D94",
    } | getattr(__import__("__main__"), "__styles__", {}))

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

    def section(label):
        return text(label, styler("section-label")).append(":")

    def table():
        grid = Table.grid(padding=(0, 2))
        grid.add_column(no_wrap=True)
        grid.add_column()
        return grid

    renders = []

    line = Text("  ")
    line.append(text(prog, styler("program-name")))
    remainder = usage(definition, "").strip()
    if remainder:
        line.append(" ").append(text(remainder, styler("usage-section")))
    renders.append(Group(section("USAGE"), line))

    if definition.arguments:
        arguments = table()
        for argument in definition.arguments:
            descr = Text.assemble(text(argument.descr, styler("description")))
            if argument.required:
                descr.append(" " * bool(argument.descr)).append(text("(required)", styler("required-marker")))
            arguments.add_row(Text("  ") + text(argument.name, styler("argument-name")), descr)
        renders.append(Group(Text(""), section("ARGUMENTS"), arguments))

    if definition.options:
        options = table()
        for option in definition.options:
            names = Text.assemble(
                "  ",
                text(_names(option), styler("option-name")),
                text(_metavar(option), styler("metavar")),
            )
            descr = Text.assemble(text(option.descr, styler("description")))
            suffixes = []
            if option.envvar:
                suffixes.append(text("[env: %s]" % option.envvar, styler("env-marker")))
            if default := _default(option):
                suffixes.append(text("[default: %s]" % default, styler("default-marker")))
            for suffix in suffixes:
                if descr:
                    descr.append(" ")
                descr.append(suffix)
            options.add_row(names, descr)
        renders.append(Group(Text(""), section("OPTIONS"), options))

    renderable = Group(*renders)

    if fancy:
        renderable = Panel(
            renderable,
            title=Text.assemble("[", " ", f"{prog} HELP".upper(), " ", "]", style=styler("panel-title")),
            title_align="left",
        )

    return renderable


__all__ = (
    "describe",
    "usage",
)
