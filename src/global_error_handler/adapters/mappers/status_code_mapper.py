# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Exception → HTTP status mapper.

Summary:
    Maps fault classes to HTTP status codes and decides which message a client
    is allowed to see. The table is populated once during startup, frozen, and
    then read concurrently by every request without locking.

Lookup policy:
    * Keys are exception classes used as explicit type tokens.
    * Lookup is by the exact runtime class (``type(fault)``); subclasses of a
      registered class are *not* matched.
    * Misses fall back to ``default_status_code``.

Message policy:
    The fault's own text is exposed only when the resolved status differs from
    ``default_status_code``. A registered class mapped to the default value
    still yields ``default_error_message``.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Final, NamedTuple

from global_error_handler.domain.exceptions.base import ConfigurationError, fault_text

__all__ = [
    "DEFAULT_ERROR_MESSAGE",
    "DEFAULT_STATUS_CODE",
    "StatusMapper",
    "StatusResolution",
]

DEFAULT_STATUS_CODE: Final[int] = 500
DEFAULT_ERROR_MESSAGE: Final[str] = "Something went wrong."


class StatusResolution(NamedTuple):
    """Result of a status lookup."""

    status_code: int
    is_mapped: bool


class StatusMapper:
    """Maps exception instances to HTTP status codes.

    Args:
        mapping: Optional initial ``{exception class: status code}`` table.
        default_status_code: Status returned for unmapped faults.
        default_error_message: Client message used whenever the resolved status
            equals ``default_status_code``.

    Raises:
        ConfigurationError: If any initial entry is invalid.
    """

    def __init__(
        self,
        mapping: Mapping[type[BaseException], int] | None = None,
        default_status_code: int = DEFAULT_STATUS_CODE,
        default_error_message: str = DEFAULT_ERROR_MESSAGE,
    ) -> None:
        self._statuses: dict[type[BaseException], int] = {}
        self._view: Mapping[type[BaseException], int] = MappingProxyType(self._statuses)
        self._frozen = False
        self._default_status_code = _validate_status_code(default_status_code)
        self._default_error_message = default_error_message
        for fault_type, status_code in (mapping or {}).items():
            self.register(fault_type, status_code)

    @property
    def default_status_code(self) -> int:
        """Status code used for unmapped faults."""
        return self._default_status_code

    @property
    def default_error_message(self) -> str:
        """Generic, non-leaking client message."""
        return self._default_error_message

    @property
    def mappings(self) -> Mapping[type[BaseException], int]:
        """Read-only view of the registered table."""
        return self._view

    @property
    def frozen(self) -> bool:
        """Whether the table has been sealed."""
        return self._frozen

    def register(self, fault_type: type[BaseException], status_code: int) -> StatusMapper:
        """Add or overwrite one entry; the last write for a class wins.

        Args:
            fault_type: Exception class to match exactly.
            status_code: Non-negative HTTP status code.

        Returns:
            The mapper itself, for chaining during configuration.

        Raises:
            ConfigurationError: If the mapper is frozen or the entry is invalid.
        """
        if self._frozen:
            raise ConfigurationError(
                "Status mapping is frozen; register faults during startup.",
                details={"fault_type": getattr(fault_type, "__name__", repr(fault_type))},
            )
        if not (isinstance(fault_type, type) and issubclass(fault_type, BaseException)):
            raise ConfigurationError(
                "Status mapping keys must be exception classes.",
                details={"fault_type": repr(fault_type)},
            )
        self._statuses[fault_type] = _validate_status_code(status_code)
        return self

    def freeze(self) -> StatusMapper:
        """Seal the table against further registration."""
        self._frozen = True
        return self

    def map(self, fault: BaseException) -> StatusResolution:
        """Resolve the status code for ``fault`` by its exact class."""
        status_code = self._statuses.get(type(fault))
        if status_code is None:
            return StatusResolution(self._default_status_code, False)
        return StatusResolution(status_code, True)

    def resolve_message(self, fault: BaseException, status_code: int) -> str:
        """Return the client-visible message for ``fault`` at ``status_code``."""
        if status_code == self._default_status_code:
            return self._default_error_message
        return fault_text(fault)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(entries={len(self._statuses)}, "
            f"default_status_code={self._default_status_code}, frozen={self._frozen})"
        )


def _validate_status_code(status_code: int) -> int:
    # bool is an int subclass; reject it explicitly.
    if isinstance(status_code, bool) or not isinstance(status_code, int) or status_code < 0:
        raise ConfigurationError(
            "Status codes must be non-negative integers.",
            details={"status_code": repr(status_code)},
        )
    return status_code
