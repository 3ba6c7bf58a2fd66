"""
Argosy registries: who owns the option holders and how names resolve.

What this module provides
- Registry: owns holders keyed by fullname and an alias map shortname → fullname.
  Uniqueness of both namespaces is enforced at registration time.
- positional_name(index): the synthetic fullname under which positional
  parameters are stored (registration order is consumption order).
- global_registry(): the process-wide registry shared by every parser that
  honors it. It is built explicitly on first call and never torn down; all
  global registration is expected during single-threaded program setup,
  strictly before any parsing.
- add_global_flag / add_global_arg / add_global_multi_arg: register into it.
"""
import functools
import logging

from .arguments import FlagHandle, ArgHandle, MultiArgHandle
from .faults import *
from .options import FlagOption, SingleValueOption, MultiValueOption
from .utils import *

logger = logging.getLogger("argosy.registry")

RESERVED = frozenset({"help"})


def positional_name(position, /):
    """
    synthetic fullname of the positional parameter at 0-based 'position'.
    """
    return "__positional_argument__%d" % position


class Registry:
    """
    Mapping of fullname → holder plus shortname → fullname aliases.

    Invariants
    - fullnames are unique and never equal to a reserved name ("help").
    - shortnames are unique single characters; an absent shortname (Unset) is
      never stored in the alias map.
    - holders are exclusively owned by the registry; callers get handles.
    """

    def __init__(self):
        self._holders = {}
        self._aliases = {}

    def __len__(self):
        return len(self._holders)

    def __iter__(self):
        return iter(self._holders.values())

    def __contains__(self, fullname):
        return fullname in self._holders

    def __repr__(self):
        return "registry(%s)" % ", ".join(map(repr, self._holders))

    def check(self, fullname, shortname=Unset, /):
        """
        validate a prospective (fullname, shortname) pair against this registry.

        raises
        - DeclarationError when the fullname is malformed, reserved or taken,
          or when the shortname is malformed or already mapped.
        """
        if not isinstance(fullname, str) or not fullname or "=" in fullname or fullname.startswith("-"):
            raise DeclarationError(
                "bad option name %r" % (fullname,),
                title="malformed name",
                code=FaultCode.MALFORMED_NAME,
                hint="use a non-empty name without leading dashes or '=' (for example: 'output')",
                input=fullname,
            )
        if shortname is not Unset and (not isinstance(shortname, str) or len(shortname) != 1 or shortname in "-\\"):
            raise DeclarationError(
                "bad short name %r for option %r" % (shortname, fullname),
                title="malformed name",
                code=FaultCode.MALFORMED_NAME,
                hint="use exactly one character other than '-' or '\\' (for example: 'o')",
                input=fullname,
            )
        if fullname in RESERVED:
            raise DeclarationError(
                "%r is a predefined option" % fullname,
                title="reserved name",
                code=FaultCode.RESERVED_NAME,
                hint="pick another name; --%s is kept for help output" % fullname,
                input=fullname,
            )
        if fullname in self._holders:
            raise DeclarationError(
                "argument is already defined (%r)" % fullname,
                title="duplicated name",
                code=FaultCode.DUPLICATED_NAME,
                hint="every option needs its own fullname",
                input=fullname,
            )
        if shortname is not Unset and shortname in self._aliases:
            raise DeclarationError(
                "argument with shortname is already defined (%r is used by %r)" % (
                    shortname, self._aliases[shortname]
                ),
                title="duplicated short name",
                code=FaultCode.DUPLICATED_SHORTNAME,
                hint="pick another short name or omit it",
                input=shortname,
            )

    def register(self, kind, fullname, shortname=Unset, /, help=Unset, **options):
        """
        check the names, build a holder of the given kind and take ownership of it.

        parameters
        - kind: FlagOption | SingleValueOption | MultiValueOption
        - options: forwarded to the holder (type, label)

        returns
        - the new holder (callers wrap it in a handle).
        """
        self.check(fullname, shortname)
        holder = kind(fullname, shortname, help, **options)
        self._holders[holder.fullname] = holder
        if holder.shortname is not Unset:
            self._aliases[holder.shortname] = holder.fullname
        logger.debug("registered %r", holder)
        return holder

    def add_flag(self, fullname, shortname=Unset, /, help=Unset):
        return FlagHandle(self.register(FlagOption, fullname, shortname, help))

    def add_arg(self, fullname, shortname=Unset, /, help=Unset, *, type=str):
        return ArgHandle(self.register(SingleValueOption, fullname, shortname, help, type=type))

    def add_multi_arg(self, fullname, shortname=Unset, /, help=Unset, *, type=str):
        return MultiArgHandle(self.register(MultiValueOption, fullname, shortname, help, type=type))

    def add_positional_arg(self, help=Unset, /, *, type=str):
        position = len(self._holders)
        return ArgHandle(self.register(
            SingleValueOption,
            positional_name(position),
            help=help,
            type=type,
            label="%s positional argument" % ordinal(position + 1),
        ))

    def lookup_by_fullname(self, fullname, /):
        return self._holders.get(fullname)

    def lookup_by_shortname(self, shortname, /):
        try:
            return self._holders.get(self._aliases[shortname])
        except KeyError:
            return None

    def validate_all_required(self):
        """
        fail on the first required holder that carries no value.
        """
        for holder in self._holders.values():
            if holder.required and not holder.has_value():
                raise MissingRequiredError(
                    "no value provided for %s" % holder.label,
                    title="missing required argument",
                    code=FaultCode.MISSING_REQUIRED,
                    hint="pass a value for %s" % holder.label,
                    input=holder.label,
                )


@functools.cache
def global_registry():
    """
    the process-wide registry (created on first call, then always the same object).
    """
    logger.debug("creating the global registry")
    return Registry()


def add_global_flag(fullname, shortname=Unset, /, help=Unset):
    return global_registry().add_flag(fullname, shortname, help)


def add_global_arg(fullname, shortname=Unset, /, help=Unset, *, type=str):
    return global_registry().add_arg(fullname, shortname, help, type=type)


def add_global_multi_arg(fullname, shortname=Unset, /, help=Unset, *, type=str):
    return global_registry().add_multi_arg(fullname, shortname, help, type=type)


__all__ = (
    "Registry",
    "positional_name",
    "global_registry",
    "add_global_flag",
    "add_global_arg",
    "add_global_multi_arg",
)
