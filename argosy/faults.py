"""
Argosy faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain to keep copy consistent and make logs/searches
  predictable.
- ParserError: the single error kind raised by declarations and parsing. It
  carries a message plus context options and knows how to render itself.
- Category subclasses narrow ParserError for callers that want to branch on
  the kind of failure (declaration misuse, unknown names, value errors, free
  argument policy, missing required options).
- report(): print one fault to stderr through rich.

UX goals
- Position-first messages during parsing (“at third position”).
- Soft but technical language: short titles, one-sentence bodies, a single hint.

Integration
- The engine only raises. The calling tool catches ParserError, calls
  report(error) (or renders it any other way) and chooses an exit code.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, UnsetType

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping (by high-level domain)
    - declarations (101xx)
      • RESERVED_NAME, DUPLICATED_NAME, DUPLICATED_SHORTNAME, MALFORMED_NAME,
        INCOMPATIBLE_MODIFIERS, EMPTY_CHOICES, NO_EQUALITY, DEFAULT_NOT_A_CHOICE,
        ABSENT_VALUE
    - option lookup (111xx)
      • UNKNOWN_LONG_OPTION, UNKNOWN_SHORT_OPTION
    - values (112xx)
      • FLAG_ASSIGNMENT, MISSING_VALUE, DUPLICATED_VALUE, UNCASTABLE_VALUE,
        INVALID_CHOICE, MISPLACED_SHORT_OPTION
    - free arguments (113xx)
      • FREE_ARGUMENTS_DISABLED
    - post-parse checks (114xx)
      • MISSING_REQUIRED

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- declaration errors (101xx) ---
    RESERVED_NAME               = 10101
    DUPLICATED_NAME             = 10102
    DUPLICATED_SHORTNAME        = 10103
    MALFORMED_NAME              = 10104
    INCOMPATIBLE_MODIFIERS      = 10111
    EMPTY_CHOICES               = 10112
    NO_EQUALITY                 = 10113
    DEFAULT_NOT_A_CHOICE        = 10114
    ABSENT_VALUE                = 10121

    # --- option lookup errors (111xx) ---
    UNKNOWN_LONG_OPTION         = 11101
    UNKNOWN_SHORT_OPTION        = 11102

    # --- value errors (112xx) ---
    FLAG_ASSIGNMENT             = 11201
    MISSING_VALUE               = 11202
    DUPLICATED_VALUE            = 11203
    UNCASTABLE_VALUE            = 11204
    INVALID_CHOICE              = 11205
    MISPLACED_SHORT_OPTION      = 11206

    # --- free argument errors (113xx) ---
    FREE_ARGUMENTS_DISABLED     = 11301

    # --- post-parse errors (114xx) ---
    MISSING_REQUIRED            = 11401

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ParserError(Exception):
    """
    the one error kind raised by argosy.

    attributes
    - message: str, the human-readable description (also str(error)).
    - options: read-only mapping with the context of the fault. the engine
      always provides 'code' (FaultCode), 'title' and 'hint'; parse-time faults
      also carry 'input' (the offending token or name) and 'index' (1-based
      position in the token list) when known.

    rendering
    - __rich__ renders a header (program, code, title), the message and the hint.
      'colorful' and 'fancy' options switch styling and panel chrome; report()
      injects them through copy.replace().
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | UnsetType)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

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

        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            text(getattr(main, "__prog__", self.options.get("prog", "argosy")), styler("prog-name")),
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "?", styler("code")),
            " | ",
            text(str(self.options.get("title", "error")).title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))

        if not (hint := self.options.get("hint")):
            body = Group(message)
        else:
            body = Group(message, Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if self.options.get("fancy", False):
            return Panel(body, title=header, title_align="left")

        return Group(header, body)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


# (a) declaration-time misuse
class DeclarationError(ParserError): ...
# (b) unresolved option names
class UnknownOptionError(ParserError): ...
# (c) value errors
class FlagAssignmentError(ParserError): ...
class MissingValueError(ParserError): ...
class DuplicateValueError(ParserError): ...
class CastError(ParserError): ...
class IllegalValueError(ParserError): ...
class MisplacedShortOptionError(ParserError): ...
# (d) free argument policy
class FreeArgumentsError(ParserError): ...
# (e) post-parse required check
class MissingRequiredError(ParserError): ...


def report(fault, /, **options):
    """
    print a fault to stderr with the given rendering options.

    contract
    - fault must be a ParserError; options are merged into its context via
      copy.replace() before rendering.
    - typical options: colorful (bool, default True), fancy (bool, default False), prog (str).
    - the process is never exited here; exit codes belong to the caller.
    """
    if not isinstance(fault, ParserError):
        raise TypeError("report() argument must be a parser error")
    console.print(copy.replace(fault, **options))


__all__ = (
    "FaultCode",
    "ParserError",
    "DeclarationError",
    "UnknownOptionError",
    "FlagAssignmentError",
    "MissingValueError",
    "DuplicateValueError",
    "CastError",
    "IllegalValueError",
    "MisplacedShortOptionError",
    "FreeArgumentsError",
    "MissingRequiredError",
    "report",
)
