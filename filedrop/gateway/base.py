"""Abstract ports for the storage service and the downstream consumer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from filedrop.config.settings import IntakeConfiguration

QUARANTINE_FOLDER = "errors"


class StorageGateway(ABC):
    """
    Port to the object store holding the intake paths.

    Implementations own the copy-then-delete sequencing of renames and
    report every failure as a False return instead of raising.
    """

    @abstractmethod
    def get_configuration(self) -> IntakeConfiguration:
        """Intake rules for the bucket this gateway serves."""
        ...

    @abstractmethod
    def get_container_name(self) -> str:
        """Name of the bucket this gateway serves."""
        ...

    @abstractmethod
    async def rename_object(self, key: str, new_key: str) -> bool:
        """
        Move an object to a new key by copying and then deleting the source.

        Args:
            key: Current key
            new_key: Target key

        Returns:
            True if both copy and delete succeeded
        """
        ...

    @abstractmethod
    async def move_to_quarantine(self, key: str, scope_path: str, reason: str) -> bool:
        """
        Move an object to ``scope_path/errors/<timestamp>-<basename(key)>``.

        The failure reason is attached to the copy as object metadata.

        Args:
            key: Current key of the object
            scope_path: Intake path the quarantine folder lives under
            reason: Why the object is quarantined

        Returns:
            True if the object was copied and the source deleted
        """
        ...


class Notifier(ABC):
    """Port to the downstream consumer of renamed objects."""

    @abstractmethod
    async def notify(self, container_name: str, new_key: str) -> None:
        """
        Dispatch a fire-and-forget notification for a renamed object.

        Returns once the dispatch is accepted. Raises when it is rejected.
        """
        ...


# Builds the notifier for a rule's downstream target.
NotifierFactory = Callable[[str], Notifier]
