"""
Argosy option holders: the mutable state behind every declared option.

Overview
- Option: abstract contract shared by all holders (fullname, shortname, help,
  required, has_value(), accepts_value(), process_flag(), process_value()).
- FlagOption: presence-only switch; counts its occurrences.
- SingleValueOption: at most one explicit value, optional default/choices/caster.
- MultiValueOption: ordered list of explicit values, same optional configuration.

The set of holders is closed: the three concrete classes are sealed against
subclassing (OptionType(final=True)).

State per value-bearing holder
- unset → default-set (default(...)) → explicitly-set (first parsed value).
- a single-valued holder rejects a second explicit value.
- a multi-valued holder drops its default on the first explicit value and then
  appends every value in encounter order.

Configuration
- configure(**changes) applies builder settings (required, default, choices,
  caster) and validates the whole configuration at once, so the reported
  incompatibility never depends on the order of the builder calls. A rejected
  change leaves the holder untouched.
"""
import functools
import logging
import operator
import re

from .casting import traits, guarded
from .faults import *
from .utils import *

logger = logging.getLogger("argosy.options")


class OptionType(type):
    """
    Metaclass giving holders stable representations and optional sealing.

    Responsibilities
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages and help output.
    - __repr__/__rich_repr__ list the names declared in __displayable__.
    - final=True seals the class against further subclassing.
    """
    __displayable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {"__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower()},
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__displayable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        if options.get("final", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


class Option(metaclass=OptionType):
    """
    Abstract holder contract.

    Parameters
    - fullname: str, the unique key (“--fullname” on the command line).
    - shortname: str | Unset, the single-character alias.
    - help: str | Unset, description used by the help renderer.
    - label: str | Unset, the name used in messages (defaults to “--fullname”).
    """
    __displayable__ = ("fullname", "shortname", "help", "required")

    def __init__(self, fullname, shortname=Unset, help=Unset, *, label=Unset):
        self._fullname = fullname
        self._shortname = shortname
        self._help = coalesce(help, "")
        self._label = coalesce(label, "--" + fullname)
        self._required = False

    @property
    def fullname(self):
        return self._fullname

    @property
    def shortname(self):
        return self._shortname

    @property
    def help(self):
        return self._help

    @property
    def label(self):
        return self._label

    @property
    def required(self):
        return self._required

    def has_value(self):
        raise NotImplementedError

    def accepts_value(self):
        raise NotImplementedError

    def process_flag(self):
        raise NotImplementedError

    def process_value(self, token, /):
        raise NotImplementedError


class FlagOption(Option, final=True):
    """
    Presence-only holder: every occurrence increments the count.
    """
    __displayable__ = Option.__displayable__ + ("count",)

    def __init__(self, fullname, shortname=Unset, help=Unset, *, label=Unset):
        super().__init__(fullname, shortname, help, label=label)
        self._count = 0

    @property
    def count(self):
        return self._count

    def has_value(self):
        return True

    def accepts_value(self):
        return False

    def process_flag(self):
        self._count += 1

    def process_value(self, token, /):
        raise FlagAssignmentError(
            "flag %r doesn't accept values (got %r)" % (self._label, token),
            title="flag cannot take a value",
            code=FaultCode.FLAG_ASSIGNMENT,
            hint="remove the value after %s" % self._label,
            input=self._label,
        )


class ValueOption(Option):
    """
    Shared configuration and casting for value-bearing holders.

    Parameters
    - type: the value type; its Traits (see argosy.casting) provide the default
      caster and the equality capability used by choices.
    """
    __displayable__ = Option.__displayable__ + ("type", "default", "choices")

    def __init__(self, fullname, shortname=Unset, help=Unset, *, type=str, label=Unset):
        super().__init__(fullname, shortname, help, label=label)
        self._type = type
        self._traits = traits(type)
        self._default = Unset
        self._choices = Unset
        self._caster = Unset
        self._explicit = False

    @property
    def type(self):
        return self._type

    @property
    def traits(self):
        return self._traits

    @property
    def default(self):
        return self._default

    @property
    def choices(self):
        return self._choices

    def accepts_value(self):
        return True

    def process_flag(self):
        raise MissingValueError(
            "argument %r requires a value" % self._label,
            title="missing value",
            code=FaultCode.MISSING_VALUE,
            hint="pass a value (for example: %s=<value>)" % self._label,
            input=self._label,
        )

    def configure(self, **changes):
        """
        apply builder settings and validate the resulting configuration as a whole.

        recognized settings
        - required: bool
        - default: the default value (a sequence for multi-valued holders)
        - choices: the allow-list (any iterable; stored as a tuple)
        - caster: Callable[[str], T]
        """
        if "choices" in changes:
            changes["choices"] = tuple(changes["choices"])
        if "caster" in changes:
            if not callable(caster := changes["caster"]):
                raise DeclarationError(
                    "caster for argument %r must be callable" % self._label,
                    title="bad caster",
                    code=FaultCode.INCOMPATIBLE_MODIFIERS,
                    hint="pass a function taking the raw string and returning the value",
                    input=self._label,
                )
            changes["caster"] = guarded(caster)

        previous = {name: getattr(self, "_" + name) for name in changes}
        for name, value in changes.items():
            setattr(self, "_" + name, value)

        try:
            self._validate()
        except DeclarationError:
            for name, value in previous.items():
                setattr(self, "_" + name, value)
            raise

        logger.debug("configured %s with %s", self._label, ", ".join(changes))
        return self

    def _defaults(self):
        return (self._default,)

    def _validate(self):
        # precedence is fixed so that every call order reports the same fault
        if self._choices is not Unset:
            if not self._choices:
                raise DeclarationError(
                    "set of options can't be empty (%r)" % self._label,
                    title="empty options",
                    code=FaultCode.EMPTY_CHOICES,
                    hint="list at least one legal value",
                    input=self._label,
                )
            if not self._traits.supports_equality:
                raise DeclarationError(
                    "no equality defined for the type of the argument (%r is %s)" % (self._label, self._traits.name),
                    title="options need equality",
                    code=FaultCode.NO_EQUALITY,
                    hint="define __eq__ on %s or register traits with an 'equals' function" % self._traits.name,
                    input=self._label,
                )
        if self._required and self._default is not Unset:
            raise DeclarationError(
                "required argument can't have a default value (%r)" % self._label,
                title="incompatible modifiers",
                code=FaultCode.INCOMPATIBLE_MODIFIERS,
                hint="drop either required() or default(...)",
                input=self._label,
            )
        if self._choices is not Unset and self._default is not Unset:
            for value in self._defaults():
                if not self._traits.contains(value, self._choices):
                    raise DeclarationError(
                        "default value %s of argument %r is not among valid options" % (
                            self._traits.format(value), self._label
                        ),
                        title="default outside options",
                        code=FaultCode.DEFAULT_NOT_A_CHOICE,
                        hint="valid options are %s" % ", ".join(map(self._traits.format, self._choices)),
                        input=self._label,
                    )

    def _cast(self, token):
        value = coalesce(self._caster, self._traits.cast)(token)
        if value is Unset:
            raise CastError(
                "failed to cast %r to %s for argument %r" % (token, self._traits.name, self._label),
                title="bad value",
                code=FaultCode.UNCASTABLE_VALUE,
                hint="pass a valid %s" % self._traits.name,
                input=self._label,
            )
        if self._choices is not Unset and not self._traits.contains(value, self._choices):
            raise IllegalValueError(
                "value %s is not allowed for argument %r" % (self._traits.format(value), self._label),
                title="invalid choice",
                code=FaultCode.INVALID_CHOICE,
                hint="choose one of %s" % ", ".join(map(self._traits.format, self._choices)),
                input=self._label,
            )
        return value


class SingleValueOption(ValueOption, final=True):
    """
    Holder accepting at most one explicit value.

    A default set with configure(default=...) is replaced by the first parsed
    value; a second parsed value is rejected.
    """
    __displayable__ = ValueOption.__displayable__ + ("value",)

    def __init__(self, fullname, shortname=Unset, help=Unset, *, type=str, label=Unset):
        super().__init__(fullname, shortname, help, type=type, label=label)
        self._value = Unset

    @property
    def value(self):
        return self._value if self._explicit else self._default

    def has_value(self):
        return self.value is not Unset

    def process_value(self, token, /):
        if self._explicit:
            raise DuplicateValueError(
                "argument %r accepts only one value (got another: %r)" % (self._label, token),
                title="duplicated value",
                code=FaultCode.DUPLICATED_VALUE,
                hint="pass %s once, or declare it as a multi-valued argument" % self._label,
                input=self._label,
            )
        self._value = self._cast(token)
        self._explicit = True


class MultiValueOption(ValueOption, final=True):
    """
    Holder collecting every explicit value in encounter order.

    The default (a sequence) is reported until the first parsed value arrives,
    and is discarded from then on. Duplicates are kept.
    """
    __displayable__ = ValueOption.__displayable__ + ("values",)

    def __init__(self, fullname, shortname=Unset, help=Unset, *, type=str, label=Unset):
        super().__init__(fullname, shortname, help, type=type, label=label)
        self._values = []

    def configure(self, **changes):
        if "default" in changes:
            changes["default"] = tuple(changes["default"])
        return super().configure(**changes)

    @property
    def values(self):
        if self._explicit:
            return list(self._values)
        return list(coalesce(self._default, ()))

    def has_value(self):
        return bool(self.values)

    def process_value(self, token, /):
        value = self._cast(token)
        if not self._explicit:
            self._values.clear()
            self._explicit = True
        self._values.append(value)

    def _defaults(self):
        return self._default


__all__ = (
    "Option",
    "FlagOption",
    "ValueOption",
    "SingleValueOption",
    "MultiValueOption",
)
