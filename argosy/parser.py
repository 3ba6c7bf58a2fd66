r"""
Argosy parser: declare an interface once, then walk argv-like tokens.

What this module provides
- Parser: owns a local registry of named options, a registry of positional
  parameters, an optional free-argument bucket, a tail-argument bucket, and the
  token walker that classifies and dispatches every input token.

Quick start
    from argosy import Parser

    parser = Parser()
    verbose = parser.add_flag("verbose", "v", help="say more")
    jobs = parser.add_arg("jobs", "j", help="worker count", type=int).default(1)
    tags = parser.add_multi_arg("tag", "t", help="labels to attach")
    source = parser.add_positional_arg("input file")
    parser.enable_free_args()

    parser.parse_args(["prog", "-vj4", "--tag=a", "-t", "b", "in.txt", "extra"])
    # verbose.count == 1, jobs.value == 4, tags.values() == ["a", "b"],
    # source.value == "in.txt", parser.free_args == ["extra"]

Token grammar (token 0, the program name, is skipped)
- tail marker (optional): everything after it goes verbatim to tail_args.
- '--name', '--name=value', '--name value': long options.
- '-xyz': a group of short names. Flags may appear anywhere in it; a
  value-taking short name either ends the group and takes the next token
  ('-euxo pipefail'), or directly follows the dash and takes the rest of the
  token ('-j5').
- anything else fills the next positional slot, then goes to free arguments
  (when enabled).
- one leading backslash is stripped from every value, so '\--literal' is read
  as the value '--literal' rather than as an option. A lone '-' and the empty
  string are never options.

Global options
- Unless ignore_global_registry() is called (or globals=None is passed), the
  parser consults argosy.registry.global_registry() before its own registry,
  and local registrations colliding with global names are rejected immediately.
"""
import copy
import difflib
import logging

from . import helper
from .faults import *
from .registry import Registry, global_registry, positional_name
from .utils import *

logger = logging.getLogger("argosy.parser")


def _escape(value):
    """
    strip exactly one leading backslash from a value.
    """
    return value[1:] if value.startswith("\\") else value


class Parser:
    """
    Command-line parser over a local registry and (optionally) the global one.

    Parameters
    - globals: Registry | None (keyword-only)
      the registry merged into every lookup. Defaults to global_registry();
      None disables merging (same as ignore_global_registry()).

    Notes
    - parse_args() is a single pass: it runs to completion or raises a
      ParserError subclass. Holders keep what they received, so a parser is
      meant to parse one token list.
    """

    def __init__(self, *, globals=Unset):
        if not isinstance(globals, Registry | UnsetType | None):
            raise TypeError("parser 'globals' must be a registry or None")
        self._globals = global_registry() if globals is Unset else globals
        self._registry = Registry()
        self._positionals = Registry()
        self._free_args = None
        self._tail_args = []

    @property
    def globals(self):
        return self._globals

    @property
    def registry(self):
        return self._registry

    @property
    def positionals(self):
        return self._positionals

    @property
    def free_args(self):
        return None if self._free_args is None else list(self._free_args)

    @property
    def tail_args(self):
        return list(self._tail_args)

    def __rich_repr__(self):
        yield "globals", self._globals
        yield "registry", self._registry
        yield "positionals", self._positionals
        yield "free_args", self.free_args
        yield "tail_args", self.tail_args

    # --- setup surface ---

    def _check_globals(self, fullname, shortname):
        if self._globals is not None:
            self._globals.check(fullname, shortname)

    def add_flag(self, fullname, shortname=Unset, /, help=Unset):
        self._check_globals(fullname, shortname)
        return self._registry.add_flag(fullname, shortname, help)

    def add_arg(self, fullname, shortname=Unset, /, help=Unset, *, type=str):
        self._check_globals(fullname, shortname)
        return self._registry.add_arg(fullname, shortname, help, type=type)

    def add_multi_arg(self, fullname, shortname=Unset, /, help=Unset, *, type=str):
        self._check_globals(fullname, shortname)
        return self._registry.add_multi_arg(fullname, shortname, help, type=type)

    def add_positional_arg(self, help=Unset, /, *, type=str):
        return self._positionals.add_positional_arg(help, type=type)

    def add_positional_args(self, *types, help=Unset):
        """
        register one positional per type, in order; returns the handles as a tuple.
        """
        return tuple(self.add_positional_arg(help, type=type) for type in types)

    def enable_free_args(self):
        if self._free_args is None:
            self._free_args = []

    def ignore_global_registry(self):
        self._globals = None

    # --- help ---

    def format_help(self, *, colorful=True):
        return helper.render(self, colorful=colorful)

    def print_help(self, *, colorful=True):
        helper.console.print(self.format_help(colorful=colorful))

    # --- parsing ---

    def _lookup_long(self, name):
        if self._globals is not None and (holder := self._globals.lookup_by_fullname(name)):
            return holder
        return self._registry.lookup_by_fullname(name)

    def _lookup_short(self, name):
        if self._globals is not None and (holder := self._globals.lookup_by_shortname(name)):
            return holder
        return self._registry.lookup_by_shortname(name)

    def _known_names(self):
        registries = [self._registry] if self._globals is None else [self._globals, self._registry]
        return [holder.label for registry in registries for holder in registry]

    def _apply(self, holder, value, index):
        """
        hand one escaped value to a holder, tagging holder faults with the token position.
        """
        logger.debug("token %d: %s <- %r", index, holder.label, value)
        try:
            holder.process_value(_escape(value))
        except ParserError as fault:
            raise copy.replace(fault, index=index) from None

    def _parse_long(self, tokens, index):
        """
        dispatch a '--name[=value]' token; returns how many tokens were consumed.
        """
        name, separator, value = tokens[index][2:].partition("=")

        if (holder := self._lookup_long(name)) is None:
            suggestions = difflib.get_close_matches("--" + name, self._known_names(), 3)
            try:
                hint = "did you mean %r?" % suggestions[0]
            except IndexError:
                hint = "check the spelling, or declare the option before parsing"
            raise UnknownOptionError(
                "unknown long option %r at %s position" % ("--" + name, ordinal(index)),
                title="unknown option",
                code=FaultCode.UNKNOWN_LONG_OPTION,
                hint=hint,
                input="--" + name,
                index=index,
                suggestions=suggestions,
            )

        if separator:
            if not holder.accepts_value():
                raise FlagAssignmentError(
                    "long option %r at %s position doesn't accept a value" % (holder.label, ordinal(index)),
                    title="flag cannot take a value",
                    code=FaultCode.FLAG_ASSIGNMENT,
                    hint="remove everything from '=' (for example: %s)" % holder.label,
                    input=holder.label,
                    index=index,
                )
            self._apply(holder, value, index)
            return 1

        if not holder.accepts_value():
            logger.debug("token %d: %s (flag)", index, holder.label)
            holder.process_flag()
            return 1

        if index + 1 >= len(tokens):
            raise MissingValueError(
                "no value provided for long option %r at %s position" % (holder.label, ordinal(index)),
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                hint="pass a value after it (for example: %s <value>)" % holder.label,
                input=holder.label,
                index=index,
            )
        self._apply(holder, tokens[index + 1], index + 1)
        return 2

    def _parse_short(self, tokens, index):
        """
        dispatch a '-xyz' group; returns how many tokens were consumed.
        """
        token = tokens[index]

        for offset, name in enumerate(token[1:], 1):
            if (holder := self._lookup_short(name)) is None:
                raise UnknownOptionError(
                    "unknown short option %r in %r at %s position" % ("-" + name, token, ordinal(index)),
                    title="unknown option",
                    code=FaultCode.UNKNOWN_SHORT_OPTION,
                    hint="escape the token with a leading backslash if it is a value (for example: \\%s)" % token,
                    input="-" + name,
                    index=index,
                )

            if not holder.accepts_value():
                logger.debug("token %d: %s (flag)", index, holder.label)
                holder.process_flag()
                continue

            # last of the group: the value is the next token (-euxo pipefail)
            if offset + 1 == len(token):
                if index + 1 >= len(tokens):
                    raise MissingValueError(
                        "no value provided for short option %r at %s position" % ("-" + name, ordinal(index)),
                        title="missing value",
                        code=FaultCode.MISSING_VALUE,
                        hint="pass a value after it (for example: -%s <value>)" % name,
                        input="-" + name,
                        index=index,
                    )
                self._apply(holder, tokens[index + 1], index + 1)
                return 2

            # right after the dash: the value is the rest of the token (-j5)
            if offset == 1:
                self._apply(holder, token[2:], index)
                return 1

            raise MisplacedShortOptionError(
                "short option %r requiring a value is not allowed in the middle of a short options group %r" % (
                    "-" + name, token
                ),
                title="misplaced short option",
                code=FaultCode.MISPLACED_SHORT_OPTION,
                hint="move -%s to the end of the group, or pass it on its own" % name,
                input="-" + name,
                index=index,
            )

        return 1

    def parse_args(self, tokens, tail_marker=Unset):
        """
        parse argv-like tokens (tokens[0] is the program name and is skipped).

        parameters
        - tokens: Iterable[str]
        - tail_marker: str | Unset
          when given, the first token equal to it stops the scan; the tokens
          after it are stored verbatim in tail_args.

        raises
        - ParserError subclasses (see argosy.faults) on the first violation.
        """
        tokens = list(tokens)
        self._tail_args = []

        filled = 0
        index = 1
        while index < len(tokens):
            token = tokens[index]

            if tail_marker is not Unset and token == tail_marker:
                self._tail_args.extend(tokens[index + 1:])
                logger.debug("token %d: tail marker, %d token(s) left unparsed", index, len(self._tail_args))
                break

            if len(token) > 2 and token.startswith("--"):
                index += self._parse_long(tokens, index)
                continue

            if len(token) > 1 and token.startswith("-"):
                index += self._parse_short(tokens, index)
                continue

            if filled < len(self._positionals):
                holder = self._positionals.lookup_by_fullname(positional_name(filled))
                filled += 1
                self._apply(holder, token, index)
                index += 1
                continue

            if self._free_args is None:
                raise FreeArgumentsError(
                    "free arguments are not enabled (got %r at %s position)" % (token, ordinal(index)),
                    title="unexpected argument",
                    code=FaultCode.FREE_ARGUMENTS_DISABLED,
                    hint="remove the extra argument",
                    input=token,
                    index=index,
                )

            logger.debug("token %d: free argument %r", index, token)
            self._free_args.append(_escape(token))
            index += 1

        if self._globals is not None:
            self._globals.validate_all_required()
        self._registry.validate_all_required()
        self._positionals.validate_all_required()


__all__ = (
    "Parser",
)
