"""Result type returned by the callback handler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..errors import AuthFlowError
from .auth import AuthorizedUser


@dataclass(frozen=True)
class Success:
    """The attempt completed and its record was persisted."""

    context: AuthorizedUser

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """The attempt was rejected; *error* is the cause."""

    error: AuthFlowError

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Success, Failure]
