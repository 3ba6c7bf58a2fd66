"""
Help rendering for argosy parsers (rich-based, color-aware).

render(parser) reads only registry metadata (names, help text, value type,
default, choices, required flag) and returns a rich renderable:
- a usage line: program name, [options], then positional placeholders;
- an options table (global options first when the parser honors them);
- a positional arguments table, when any are declared.

Customization
- Define __prog__ in __main__ to set the program name shown in usage.
- Define a mapping named __styles__ in __main__ to override palette entries.
- colorful=False strips every style.
"""
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from .options import FlagOption, MultiValueOption
from .utils import *

console = Console()


def _metavar(holder):
    if holder.choices is not Unset:
        return "{%s}" % ",".join(map(holder.traits.format, holder.choices))
    metavar = "<%s>" % holder.traits.name
    if isinstance(holder, MultiValueOption):
        return metavar + "..."
    return metavar


def _default(holder):
    if isinstance(holder, FlagOption) or holder.default is Unset:
        return ""
    if isinstance(holder, MultiValueOption):
        return "[%s]" % ", ".join(map(holder.traits.format, holder.default))
    return holder.traits.format(holder.default)


def render(parser, /, *, colorful=True):
    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",  # cyan headline
        "program-name": "bold #FF4D94",  # magenta-pink brand pop
        "usage-section": "bold #36C5F0",  # sky-blue usage items
        "table-title": "bold #FFFFFF",
        "table-border": "#4B5563",  # slate border
        "option-name": "bold #00E6FF",
        "flag-name": "bold #22C55E",
        "metavar": "bold #FFD600",
        "default": "#A3A3A3",
        "required": "bold #EF4444",
        "argument-description": "#9CA3AF",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        return Text(str(fragment), styler(style) if fragment else "")

    holders = [] if parser.globals is None else list(parser.globals)
    holders.extend(parser.registry)
    positionals = list(parser.positionals)

    usage = Text()
    usage.append("usage", styler("usage-label")).append(": ")
    usage.append(text(getattr(__import__("__main__"), "__prog__", "prog"), "program-name"))
    if holders:
        usage.append(" ").append(text("[options]", "usage-section"))
    for holder in positionals:
        placeholder = "<%s>" % holder.traits.name
        usage.append(" ").append(text(placeholder if holder.required else "[%s]" % placeholder, "usage-section"))
    if parser.free_args is not None:
        usage.append(" ").append(text("[...]", "usage-section"))

    renders = [usage]

    if holders:
        table = Table(
            "option", "value", "default", "help",
            title=text("options", "table-title"),
            box=ROUNDED,
            style=styler("table-border"),
            header_style=styler("table-title"),
        )
        for holder in holders:
            names = ", ".join(([] if holder.shortname is Unset else ["-" + holder.shortname]) + [holder.label])
            flag = isinstance(holder, FlagOption)
            help = text(holder.help, "argument-description")
            if holder.required:
                help = Text.assemble(text("(required) ", "required"), help)
            table.add_row(
                text(names, "flag-name" if flag else "option-name"),
                Text("") if flag else text(_metavar(holder), "metavar"),
                text(_default(holder), "default"),
                help,
            )
        renders.append(table)

    if positionals:
        table = Table(
            "position", "value", "default", "help",
            title=text("positional arguments", "table-title"),
            box=ROUNDED,
            style=styler("table-border"),
            header_style=styler("table-title"),
        )
        for position, holder in enumerate(positionals, 1):
            help = text(holder.help, "argument-description")
            if holder.required:
                help = Text.assemble(text("(required) ", "required"), help)
            table.add_row(
                text(ordinal(position), "option-name"),
                text(_metavar(holder), "metavar"),
                text(_default(holder), "default"),
                help,
            )
        renders.append(table)

    return Group(*renders)


__all__ = (
    "render",
)
