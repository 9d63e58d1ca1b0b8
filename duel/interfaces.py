"""Abstract base classes for dependency injection."""

from abc import ABC, abstractmethod

from .models import DuelSession, Theme


class Storage(ABC):
    """Abstract base class for theme and duel storage.

    Duels are versioned: save_duel is a compare-and-swap on the stored
    version, which is how concurrent actions on one duel are serialized.
    """

    @abstractmethod
    def load_theme(self, theme_id: str) -> Theme | None:
        """Load a theme. Returns None if not found."""
        pass

    @abstractmethod
    def save_theme(self, theme: Theme) -> None:
        """Create or replace a theme."""
        pass

    @abstractmethod
    def load_duel(self, duel_id: str) -> DuelSession | None:
        """Load a duel. Returns None if not found."""
        pass

    @abstractmethod
    def create_duel(self, duel: DuelSession) -> None:
        """Store a new duel. Raises VersionConflict if the id is taken."""
        pass

    @abstractmethod
    def save_duel(self, duel: DuelSession, expected_version: int) -> None:
        """Replace a duel if the stored version still equals expected_version.
        Raises VersionConflict otherwise."""
        pass

    @abstractmethod
    def list_duels(self, status: str = None) -> list[DuelSession]:
        """List duels, optionally only those with the given status."""
        pass
