r"""
Argosy argument handles: what registration hands back to the caller.

Overview
- FlagHandle: read-only view of a FlagOption (occurrence count, truthiness).
- ArgHandle: fluent builder and typed accessor over a SingleValueOption.
- MultiArgHandle: fluent builder and sequence-like accessor over a MultiValueOption.

Builder methods
- required(), default(value), options(iterable), cast_using(fn)
  Each returns the handle itself so calls can be chained:

    >>> jobs = parser.add_arg("jobs", "j", type=int).default(1).options(range(1, 9))

  The whole configuration is validated after every call, so a conflict is
  reported the same way whatever the call order.

Accessors
- handle.value: the typed value (raises DeclarationError when absent).
- handle.has_value() / bool(handle): whether a default or a parsed value exists.
- multi handles: values(), size(), empty(), len(), iteration and indexing.
"""
from .faults import *
from .options import FlagOption, SingleValueOption, MultiValueOption
from .utils import *


class FlagHandle:
    __slots__ = ("_holder",)

    def __init__(self, holder, /):
        if not isinstance(holder, FlagOption):
            raise TypeError("flag handle requires a flag option")
        self._holder = holder

    @property
    def holder(self):
        return self._holder

    @property
    def count(self):
        return self._holder.count

    @property
    def value(self):
        return self._holder.count

    def __bool__(self):
        return self._holder.count > 0

    def __int__(self):
        return self._holder.count

    def __repr__(self):
        return "flag-handle(%r, count=%d)" % (self._holder.fullname, self._holder.count)


class _ValueHandle:
    __slots__ = ("_holder",)

    def __init__(self, holder, /):
        self._holder = holder

    @property
    def holder(self):
        return self._holder

    def required(self):
        self._holder.configure(required=True)
        return self

    def default(self, value, /):
        self._holder.configure(default=value)
        return self

    def options(self, options, /):
        self._holder.configure(choices=options)
        return self

    def cast_using(self, caster, /):
        self._holder.configure(caster=caster)
        return self

    def has_value(self):
        return self._holder.has_value()

    def __bool__(self):
        return self._holder.has_value()


class ArgHandle(_ValueHandle):
    __slots__ = ()

    def __init__(self, holder, /):
        if not isinstance(holder, SingleValueOption):
            raise TypeError("argument handle requires a single-value option")
        super().__init__(holder)

    @property
    def value(self):
        """
        The parsed value, or the default when nothing was parsed.

        Raises
        - DeclarationError when neither exists (check has_value() first).
        """
        if (value := self._holder.value) is Unset:
            raise DeclarationError(
                "argument %r has no value" % self._holder.label,
                title="absent value",
                code=FaultCode.ABSENT_VALUE,
                hint="check has_value() before reading, or declare a default",
                input=self._holder.label,
            )
        return value

    def __repr__(self):
        return "arg-handle(%r, value=%r)" % (self._holder.fullname, self._holder.value)


class MultiArgHandle(_ValueHandle):
    __slots__ = ()

    def __init__(self, holder, /):
        if not isinstance(holder, MultiValueOption):
            raise TypeError("multi-argument handle requires a multi-value option")
        super().__init__(holder)

    def values(self):
        return self._holder.values

    def size(self):
        return len(self._holder.values)

    def empty(self):
        return not self._holder.values

    def __len__(self):
        return len(self._holder.values)

    def __getitem__(self, index):
        return self._holder.values[index]

    def __iter__(self):
        return iter(self._holder.values)

    def __repr__(self):
        return "multi-arg-handle(%r, values=%r)" % (self._holder.fullname, self._holder.values)


__all__ = (
    "FlagHandle",
    "ArgHandle",
    "MultiArgHandle",
)
