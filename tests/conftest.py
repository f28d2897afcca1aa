from __future__ import annotations

import pytest

from prober.base import CheckResult, CheckStatus, RegistryChecker, RevisionSource
from prober.errors import RevisionResolutionError
from prober.prober import ImageAvailabilityProber


class FakeRevisionSource(RevisionSource):
    def __init__(self, revisions: list[str]) -> None:
        self.revisions = list(revisions)
        self.calls: list[int] = []

    def resolve_revision(self, offset: int) -> str:
        self.calls.append(offset)
        if offset >= len(self.revisions):
            raise RevisionResolutionError("origin/master", offset, "unknown revision")
        return self.revisions[offset]


class FakeChecker(RegistryChecker):
    def __init__(
        self,
        images: dict[str, set[str]] | None = None,
        errors: set[tuple[str, str]] | None = None,
    ) -> None:
        self.images = images or {}
        self.errors = errors or set()
        self.calls: list[tuple[str, str]] = []

    def _check(self, repository: str, tag: str) -> CheckResult:
        self.calls.append((repository, tag))
        if (repository, tag) in self.errors:
            return CheckResult(repository, tag, CheckStatus.ERROR, "connection refused")
        if tag in self.images.get(repository, set()):
            return CheckResult(repository, tag, CheckStatus.FOUND)
        return CheckResult(repository, tag, CheckStatus.NOT_FOUND)


@pytest.fixture
def messages() -> list[str]:
    return []


@pytest.fixture
def make_prober(messages):
    def _make(revisions, images=None, errors=None, **kwargs):
        source = FakeRevisionSource(revisions)
        checker = FakeChecker(images=images, errors=errors)
        kwargs.setdefault("log", messages.append)
        prober = ImageAvailabilityProber(source, checker, **kwargs)
        return prober, source, checker

    return _make
