"""
Type capabilities: how a raw token becomes a typed value.

Every value-accepting option is bound to a Traits bundle:
- cast(token) -> value, or Unset when the token cannot be converted (mandatory);
- equals(a, b) -> bool (optional; required by allow-lists);
- format(value) -> str (used by help output to show defaults and choices).

Resolution order in traits(type)
1. traits installed with register_traits(type, ...)
2. built-ins for bool, int, float and str
3. a fallback built from the type itself: its constructor casts the token
   (ValueError/TypeError mean “cannot cast”), and equality is available only
   when the type defines its own __eq__.

Equality is an explicit capability query (Traits.supports_equality). An
allow-list attached to a type without it is rejected at registration time.
"""
import builtins
import functools
import logging
import operator
import re

from .utils import *

logger = logging.getLogger("argosy.casting")


class Traits:
    """
    Capability bundle for one value type.

    Parameters
    - type: the value type the bundle describes (used for labels).
    - cast: Callable[[str], T | Unset]; must return Unset on failure.
    - equals: Callable[[T, T], bool] | Unset; Unset means “no equality”.
    - format: Callable[[T], str]; defaults to repr.
    """
    __slots__ = ("type", "cast", "equals", "format")

    def __init__(self, type, cast, equals=Unset, format=repr):
        if not callable(cast):
            raise TypeError("traits 'cast' must be callable")
        if not (equals is Unset or callable(equals)):
            raise TypeError("traits 'equals' must be callable")
        if not callable(format):
            raise TypeError("traits 'format' must be callable")
        self.type = type
        self.cast = cast
        self.equals = equals
        self.format = format

    @property
    def name(self):
        return getattr(self.type, "__name__", str(self.type))

    @property
    def supports_equality(self):
        return self.equals is not Unset

    def contains(self, value, choices, /):
        """
        allow-list membership through the equality capability.
        """
        if not self.supports_equality:
            raise TypeError("type %r does not support equality" % self.name)
        return any(self.equals(value, choice) for choice in choices)

    def __repr__(self):
        return "traits(type=%s, equality=%r)" % (self.name, self.supports_equality)


def _cast_bool(token):
    match token:
        case "true":
            return True
        case "false":
            return False
        case _:
            return Unset


def _cast_int(token):
    # whole-string base-10 parse; int() alone would accept spaces and underscores
    if not re.fullmatch(r"[+-]?[0-9]+", token):
        return Unset
    return int(token)


def _cast_float(token):
    if not token or token != token.strip() or "_" in token:
        return Unset
    try:
        return float(token)
    except ValueError:
        return Unset


def _format_bool(value):
    return "true" if value else "false"


_registry = {
    bool: Traits(bool, _cast_bool, operator.eq, _format_bool),
    int: Traits(int, _cast_int, operator.eq, str),
    float: Traits(float, _cast_float, operator.eq, str),
    str: Traits(str, lambda token: token, operator.eq, repr),
}


def register_traits(type, /, cast=Unset, equals=Unset, format=Unset):
    """
    Install the capabilities of a custom type.

    Parameters
    - type: the value type.
    - cast: Callable[[str], T]; when Unset the type constructor is used. Raising
      ValueError/TypeError or returning Unset means the token cannot be cast.
    - equals: Callable[[T, T], bool]; when Unset, the type's own __eq__ is used if
      it defines one, otherwise the type has no equality.
    - format: Callable[[T], str]; when Unset, repr is used.

    Returns
    - the installed Traits (later lookups with traits(type) return it).
    """
    if not isinstance(type, builtins.type):
        raise TypeError("register_traits() argument must be a type")

    fallback = _fallback(type)
    registered = Traits(
        type,
        fallback.cast if cast is Unset else guarded(cast),
        fallback.equals if equals is Unset else equals,
        coalesce(format, repr),
    )
    _registry[type] = registered
    logger.debug("registered traits for %s (equality=%s)", registered.name, registered.supports_equality)
    return registered


def guarded(cast, /):
    """
    Wrap a user caster so that conversion failures become Unset.

    ValueError and TypeError raised by the caster are the conventional Python
    signals for “this string is not a valid value”; anything else propagates.
    """
    @functools.wraps(cast, updated=())
    def wrapper(token):
        try:
            return cast(token)
        except (ValueError, TypeError) as exception:
            logger.debug("caster %r rejected %r: %s", cast, token, exception)
            return Unset
    return wrapper


def _has_own_equality(type):
    eq = getattr(type, "__eq__", None)
    return eq is not None and eq is not object.__eq__


def _fallback(type):
    return Traits(
        type,
        guarded(type),
        operator.eq if _has_own_equality(type) else Unset,
        repr,
    )


def traits(type, /):
    """
    Return the Traits bundle for a value type (see module docstring for the order).
    """
    try:
        return _registry[type]
    except KeyError:
        pass
    except TypeError:
        raise TypeError("traits() argument must be a hashable type") from None
    return _fallback(type)


__all__ = (
    "Traits",
    "register_traits",
    "traits",
    "guarded",
)
