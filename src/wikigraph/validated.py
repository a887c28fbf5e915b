"""Validated values: synchronous, error-accumulating results.

A ``Validated[T, A]`` is either ``Ok(value)`` or ``Err(errors)``. Unlike
exceptions, errors from independent computations are not short-circuited:
combining two ``Err`` values keeps both error sequences, left before right.

Example:
    match zip(parse(a), parse(b)):
        case Ok((x, y)):
            ...
        case Err(errors):
            ...
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable


@dataclasses.dataclass(frozen=True, slots=True)
class Ok[A]:
    """A valid value."""

    value: A


@dataclasses.dataclass(frozen=True, slots=True)
class Err[T]:
    """One or more errors, in the order they were produced."""

    errors: tuple[T, ...]

    def __post_init__(self) -> None:
        if not self.errors:
            raise ValueError("Err requires at least one error")


type Validated[T, A] = Ok[A] | Err[T]


def zip[T, A, B](  # noqa: A001
    left: Validated[T, A], right: Validated[T, B]
) -> Validated[T, tuple[A, B]]:
    """Pair two validated values, accumulating errors from both sides."""
    match left, right:
        case Ok(a), Ok(b):
            return Ok((a, b))
        case Err(), Ok():
            return left
        case Ok(), Err():
            return right
        case Err(left_errors), Err(right_errors):
            return Err(left_errors + right_errors)
    raise TypeError(f"not a Validated pair: {left!r}, {right!r}")


def traverse[T, A, B](
    items: Iterable[A], f: Callable[[A], Validated[T, B]]
) -> Validated[T, tuple[B, ...]]:
    """Apply *f* to every item and collect all values or all errors.

    Equivalent to a left fold of :func:`zip` starting from ``Ok(())``: values
    and errors both keep input order, and an empty input is ``Ok(())``.
    """
    values: list[B] = []
    errors: list[T] = []
    for item in items:
        match f(item):
            case Ok(value):
                values.append(value)
            case Err(item_errors):
                errors.extend(item_errors)
    if errors:
        return Err(tuple(errors))
    return Ok(tuple(values))


def sequence[T, B](items: Iterable[Validated[T, B]]) -> Validated[T, tuple[B, ...]]:
    """Collect already computed validated values, see :func:`traverse`."""
    return traverse(items, lambda item: item)
