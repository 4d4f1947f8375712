"""Per-principal guards against concurrent operations.

Swap guards for one principal may coexist, each with its own swap number;
a general guard excludes every other guard for the same principal.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

from appic_dex.cbor import Principal

_U32_MAX = 2**32 - 1


@dataclass(frozen=True)
class _Guard:
    principal: Principal
    is_swap_guard: bool
    swap_number: Optional[int]


_guarded: set[_Guard] = set()
_lock = threading.Lock()


class PrincipalGuardError(Exception):
    """Raised when a principal is already being processed."""

    def __init__(self, principal: Principal) -> None:
        super().__init__(f"already processing principal {principal}")
        self.principal = principal


def clear_guards() -> None:
    """Forget every active guard."""
    with _lock:
        _guarded.clear()


class PrincipalGuard:
    """A held lock on a principal; release it or use it as a context manager."""

    def __init__(self, lock: _Guard) -> None:
        self._lock = lock

    @classmethod
    def new_swap_guard(cls, principal: Principal) -> "PrincipalGuard":
        """Take a swap guard; fails if a general guard is held."""
        with _lock:
            if any(g.principal == principal and not g.is_swap_guard for g in _guarded):
                raise PrincipalGuardError(principal)
            numbers = [
                g.swap_number
                for g in _guarded
                if g.principal == principal
                and g.is_swap_guard
                and g.swap_number is not None
            ]
            next_number = min(max(numbers) + 1, _U32_MAX) if numbers else 0
            guard = _Guard(principal, True, next_number)
            _guarded.add(guard)
        return cls(guard)

    @classmethod
    def new_general_guard(cls, principal: Principal) -> "PrincipalGuard":
        """Take a general guard; fails if any guard is held."""
        with _lock:
            if any(g.principal == principal for g in _guarded):
                raise PrincipalGuardError(principal)
            guard = _Guard(principal, False, None)
            _guarded.add(guard)
        return cls(guard)

    @property
    def principal(self) -> Principal:
        return self._lock.principal

    @property
    def is_swap_guard(self) -> bool:
        return self._lock.is_swap_guard

    @property
    def swap_number(self) -> Optional[int]:
        return self._lock.swap_number

    def release(self) -> None:
        """Give up the guard. Releasing twice is harmless."""
        with _lock:
            _guarded.discard(self._lock)

    def __enter__(self) -> "PrincipalGuard":
        return self

    def __exit__(self, *args) -> None:
        self.release()

    def __repr__(self) -> str:
        return (
            f"PrincipalGuard(principal={self.principal!r}, "
            f"is_swap_guard={self.is_swap_guard}, swap_number={self.swap_number})"
        )