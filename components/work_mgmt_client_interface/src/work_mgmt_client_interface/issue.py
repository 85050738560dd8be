"""Issue contract - Core issue representation."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


#frozen so versions can live in sets and be shared between issues of one project
@dataclass(frozen=True)
class Version:
    """A fixed version as known by the tracker: internal id plus human name."""

    id: str
    name: str


@dataclass(frozen=True)
class Transition:
    """A workflow transition currently available on an issue."""

    id: str
    name: str

    def matches(self, name: str) -> bool:
        """Return True if ``name`` names this transition, ignoring case."""
        return self.name.strip().lower() == name.strip().lower()


class Issue(ABC):
    """Abstract base class representing an issue returned by a query."""

    @property
    @abstractmethod
    def key(self) -> str:
        """Return the project-prefixed key of the issue (e.g. 'PROJ-123')."""
        raise NotImplementedError

    @property
    @abstractmethod
    def summary(self) -> str:
        """Return the summary of the issue."""
        raise NotImplementedError

    @property
    @abstractmethod
    def project_key(self) -> str:
        """Return the key of the project the issue belongs to."""
        raise NotImplementedError

    @property
    @abstractmethod
    def fixed_version_ids(self) -> set[str]:
        """Return the ids of the fixed versions currently assigned."""
        raise NotImplementedError

    #equivalent to Javas .toString()
    def __repr__(self) -> str:
        return f"<Issue key={self.key!r} summary={self.summary!r} project={self.project_key!r}>"
