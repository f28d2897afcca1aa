"""
Base classes for revision sources and registry checkers
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .errors import RegistryTransportError
from .tags import validate_tag


class CheckStatus(Enum):
    """Outcome of a single image existence check"""
    FOUND = 'found'
    NOT_FOUND = 'not found'
    ERROR = 'error'


@dataclass(frozen=True)
class CheckResult:
    """Result of looking up one repository/tag pair in a registry"""
    repository: str
    tag: str
    status: CheckStatus
    message: Optional[str] = None

    @property
    def exists(self) -> bool:
        return self.status is CheckStatus.FOUND

    @property
    def reference(self) -> str:
        return f"{self.repository}:{self.tag}"

    def raise_for_error(self) -> None:
        """Raise RegistryTransportError if the check itself failed"""
        if self.status is CheckStatus.ERROR:
            raise RegistryTransportError(self.repository, self.tag, self.message or 'unknown error')


@dataclass
class ProbeResult:
    """The newest revision whose images all exist"""
    offset: int
    revision: str
    tag: str
    checks: List[CheckResult] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'offset': self.offset,
            'revision': self.revision,
            'tag': self.tag,
            'repositories': [c.repository for c in self.checks],
        }


class RevisionSource(ABC):
    """Maps an offset behind a reference tip to a concrete revision"""

    @abstractmethod
    def resolve_revision(self, offset: int) -> str:
        """
        Resolve the revision `offset` commits behind the reference

        Args:
            offset: Number of commits behind the tip (0 = tip)

        Returns:
            Revision identifier (commit hash)

        Raises:
            RevisionResolutionError: If the offset cannot be resolved
        """
        pass


class RegistryChecker(ABC):
    """Abstract base class for registry image checkers"""

    def check(self, repository: str, tag: str) -> CheckResult:
        """
        Check whether `repository` has an image tagged `tag`

        The tag is validated before any request is made.

        Args:
            repository: Repository name (e.g., "libra_validator")
            tag: Image tag (e.g., "land_1a2b3c4d")

        Returns:
            CheckResult with FOUND, NOT_FOUND or ERROR status

        Raises:
            MissingImageTagError: If the tag is empty or None
            InvalidImageTagError: If the tag is not a valid image tag
        """
        validate_tag(tag)
        return self._check(repository, tag)

    def image_exists(self, repository: str, tag: str) -> bool:
        """
        Boolean form of check()

        Raises:
            RegistryTransportError: If the registry could not be queried
        """
        result = self.check(repository, tag)
        result.raise_for_error()
        return result.exists

    @abstractmethod
    def _check(self, repository: str, tag: str) -> CheckResult:
        """Registry specific lookup; the tag has already been validated"""
        pass

    def _result(self, repository: str, tag: str, status: CheckStatus,
                message: Optional[str] = None) -> CheckResult:
        return CheckResult(repository=repository, tag=tag, status=status, message=message)
