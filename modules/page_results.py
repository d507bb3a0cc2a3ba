"""
Typed results of page interactions.

Every call into the browser session returns one of:
    - Ok: the interaction succeeded and carries its value
    - NavigationError: the page was unreachable or timed out
    - EvaluationError: a query inside the page context failed

Callers branch with isinstance() instead of relying on exceptions.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Ok:
    value: Any = None


@dataclass(frozen=True)
class NavigationError:
    url: str
    message: str
    timed_out: bool = False


@dataclass(frozen=True)
class EvaluationError:
    url: str
    message: str


PageResult = Union[Ok, NavigationError, EvaluationError]


def is_failure(result: PageResult) -> bool:
    return isinstance(result, (NavigationError, EvaluationError))


__all__ = ['Ok', 'NavigationError', 'EvaluationError', 'PageResult', 'is_failure']
