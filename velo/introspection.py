"""
Capability lookup on host values.

Resolves the three kinds of reference steps against arbitrary Python objects:

- property ``.name``: mapping key, zero-argument getter or plain attribute
- method ``.name(args)``: a member found along the type's MRO
- index ``[key]``: sequence position, mapping key or a one-argument ``get``

Member lookup walks the MRO from the most specific class to the least
specific one, so an override always wins over the member it overrides.
Abstract declarations are skipped: they only describe a capability that
some subclass provides and must never shadow the real implementation.
"""

from __future__ import annotations

import functools
import inspect
import logging
import typing
from collections.abc import Mapping, Sequence
from typing import Any, Callable, List, Tuple

from .expressions.values import is_integer, type_name

logger = logging.getLogger(__name__)

_MISSING = object()


class AccessError(Exception):
    """
    A reference step cannot be applied to a value.

    Carries no source position; the evaluator converts it into
    EvaluationError pointing at the offending step.
    """
    pass


@functools.lru_cache(maxsize=1024)
def class_members(cls: type, name: str) -> Tuple[Any, ...]:
    """
    Members called ``name`` declared along the MRO of ``cls``.

    Ordered from most to least specific; abstract declarations are left out.
    """
    members: List[Any] = []
    for klass in cls.__mro__:
        member = vars(klass).get(name, _MISSING)
        if member is _MISSING:
            continue
        if getattr(member, "__isabstractmethod__", False):
            continue
        members.append(member)
    return tuple(members)


def find_method(value: Any, name: str, args: Tuple[Any, ...]) -> Callable[..., Any]:
    """
    Pick the callable that ``value.name(*args)`` should invoke.

    Raises:
        AccessError: No callable member, or none accepting the arguments
    """
    candidates = _method_candidates(value, name)
    if not candidates:
        raise AccessError(f"{type_name(value)} has no method '{name}'")

    for candidate in candidates:
        if _accepts(candidate, args):
            return candidate

    raise AccessError(
        f"No overload of {type_name(value)}.{name} accepts {len(args)} argument(s) "
        f"of type ({', '.join(type_name(arg) for arg in args)})"
    )


def invoke_method(value: Any, name: str, args: Tuple[Any, ...]) -> Any:
    method = find_method(value, name, args)
    return _call_host(method, args, f"{type_name(value)}.{name}")


def get_property(value: Any, name: str) -> Any:
    """
    Resolve ``value.name``.

    Lookup order: mapping key, then getters ``get_name``, ``getName``,
    ``is_name``, ``isName`` taking no arguments, then a non-routine attribute.

    Raises:
        AccessError: The value exposes no such property
    """
    if isinstance(value, Mapping) and name in value:
        return value[name]

    capitalized = name[0].upper() + name[1:]
    for getter_name in (f"get_{name}", f"get{capitalized}", f"is_{name}", f"is{capitalized}"):
        for candidate in _method_candidates(value, getter_name):
            if _accepts(candidate, ()):
                return _call_host(candidate, (), f"{type_name(value)}.{getter_name}")

    try:
        attribute = getattr(value, name, _MISSING)
    except Exception as e:
        raise AccessError(
            f"Reading {type_name(value)}.{name} raised {type(e).__name__}: {e}"
        ) from e
    if attribute is not _MISSING and not inspect.isroutine(attribute):
        return attribute

    raise AccessError(f"{type_name(value)} has no property '{name}'")


def get_index(value: Any, key: Any) -> Any:
    """
    Resolve ``value[key]``.

    Sequences take a non-negative integer position, mappings an existing key;
    any other value is indexed through a one-argument ``get`` method and
    finally through ``__getitem__``.

    Raises:
        AccessError: The value is not indexable or has nothing under ``key``
    """
    if isinstance(value, Mapping):
        try:
            present = key in value
        except TypeError as e:
            raise AccessError(f"Invalid key {key!r} for {type_name(value)}: {e}") from e
        if not present:
            raise AccessError(f"{type_name(value)} has no entry for key {key!r}")
        return value[key]

    if isinstance(value, Sequence):
        if not is_integer(key):
            raise AccessError(f"{type_name(value)} index must be an integer, got {type_name(key)}")
        if not 0 <= key < len(value):
            raise AccessError(f"Index {key} out of range for {type_name(value)} of length {len(value)}")
        return value[key]

    if _method_candidates(value, "get"):
        try:
            getter = find_method(value, "get", (key,))
        except AccessError:
            logger.debug("%s.get does not accept %r, trying __getitem__", type_name(value), key)
        else:
            return _call_host(getter, (key,), f"{type_name(value)}.get")

    if class_members(type(value), "__getitem__"):
        return _call_host(value.__getitem__, (key,), f"{type_name(value)}[]")

    raise AccessError(f"{type_name(value)} does not support indexing")


def _method_candidates(value: Any, name: str) -> List[Callable[..., Any]]:
    """Bound callables named ``name``: instance attribute first, then the MRO."""
    candidates: List[Callable[..., Any]] = []

    instance_dict = getattr(value, "__dict__", None)
    if isinstance(instance_dict, dict):
        instance_attr = instance_dict.get(name, _MISSING)
        if instance_attr is not _MISSING and callable(instance_attr):
            candidates.append(instance_attr)

    for member in class_members(type(value), name):
        if isinstance(member, property):
            continue
        bound = member.__get__(value, type(value)) if hasattr(member, "__get__") else member
        if callable(bound):
            candidates.append(bound)

    return candidates


def _accepts(function: Callable[..., Any], args: Tuple[Any, ...]) -> bool:
    """Whether ``function(*args)`` matches its signature and annotated parameter types."""
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        # Builtins without an introspectable signature are tried as is
        return True

    try:
        bound = signature.bind(*args)
    except TypeError:
        return False

    try:
        hints = typing.get_type_hints(function)
    except (NameError, TypeError, AttributeError):
        return True

    for param_name, argument in bound.arguments.items():
        hint = hints.get(param_name)
        if not isinstance(hint, type) or hint is Any:
            continue
        try:
            matches = isinstance(argument, hint)
        except TypeError:
            continue
        if not matches:
            return False
    return True


def _call_host(function: Callable[..., Any], args: Tuple[Any, ...], description: str) -> Any:
    try:
        return function(*args)
    except Exception as e:
        raise AccessError(f"{description} raised {type(e).__name__}: {e}") from e


__all__ = [
    "AccessError",
    "class_members",
    "find_method",
    "invoke_method",
    "get_property",
    "get_index",
]
