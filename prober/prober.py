"""
Image availability prober - finds the newest revision whose images all exist
"""

import sys
from typing import Callable, List, Optional, Sequence

from .base import CheckResult, ProbeResult, RegistryChecker, RevisionSource
from .errors import RevisionResolutionError
from .tags import DEFAULT_SHORT_LENGTH, DEFAULT_TAG_PREFIX, derive_tag

DEFAULT_REPOSITORIES = (
    'libra_validator',
    'libra_cluster_test',
    'libra_init',
    'libra_safety_rules',
)
DEFAULT_MAX_OFFSET = 50

ON_ERROR_FAIL = 'fail'
ON_ERROR_SKIP = 'skip'
ON_ERROR_POLICIES = (ON_ERROR_FAIL, ON_ERROR_SKIP)


def _stderr(message: str):
    print(message, file=sys.stderr)


class ImageAvailabilityProber:
    """Scans recent revisions, newest first, for one with every image built"""

    def __init__(
        self,
        revisions: RevisionSource,
        checker: RegistryChecker,
        repositories: Sequence[str] = DEFAULT_REPOSITORIES,
        max_offset: int = DEFAULT_MAX_OFFSET,
        tag_prefix: str = DEFAULT_TAG_PREFIX,
        short_length: int = DEFAULT_SHORT_LENGTH,
        on_error: str = ON_ERROR_FAIL,
        log: Optional[Callable[[str], None]] = None,
        verbose: bool = True,
    ):
        """
        Initialize prober

        Args:
            revisions: Source mapping offsets to revisions
            checker: Registry checker used for existence lookups
            repositories: Repositories that must all carry the tag
            max_offset: Last offset scanned, inclusive (default: 50)
            tag_prefix: Prefix of derived image tags (default: "land_")
            short_length: Hash characters kept in tags (default: 8)
            on_error: "fail" to stop on registry errors, "skip" to treat
                the revision as disqualified and continue (default: "fail")
            log: Callable receiving progress lines (default: print to stderr)
            verbose: Emit per-check progress lines (default: True)
        """
        if not repositories:
            raise ValueError("At least one repository is required")
        if max_offset < 0:
            raise ValueError(f"max_offset must not be negative, got {max_offset}")
        if on_error not in ON_ERROR_POLICIES:
            raise ValueError(f"on_error must be one of {', '.join(ON_ERROR_POLICIES)}, got {on_error!r}")

        self.revisions = revisions
        self.checker = checker
        self.repositories = tuple(repositories)
        self.max_offset = max_offset
        self.tag_prefix = tag_prefix
        self.short_length = short_length
        self.on_error = on_error
        self._log = log or _stderr
        self.verbose = verbose

    def log(self, message: str, force: bool = False):
        if self.verbose or force:
            self._log(message)

    @property
    def window(self) -> range:
        """Offsets scanned, newest first"""
        return range(0, self.max_offset + 1)

    def tag_for(self, revision: str) -> str:
        return derive_tag(revision, prefix=self.tag_prefix, length=self.short_length)

    def check_tag(self, tag: str) -> Optional[List[CheckResult]]:
        """
        Check every repository for `tag`, stopping at the first miss

        Args:
            tag: Image tag to look up

        Returns:
            List of FOUND results when all repositories carry the tag,
            otherwise None

        Raises:
            MissingImageTagError: If the tag is empty
            RegistryTransportError: On a registry error with the "fail" policy
        """
        checks = []

        for repository in self.repositories:
            result = self.checker.check(repository, tag)

            if result.exists:
                self.log(f"{result.reference} found")
                checks.append(result)
                continue

            if result.message:
                self.log(f"{result.reference} {result.status.value}: {result.message}")
            else:
                self.log(f"{result.reference} {result.status.value}")

            if self.on_error == ON_ERROR_FAIL:
                result.raise_for_error()
            return None

        self.log(f"All images found for tag {tag}")
        return checks

    def probe(self) -> Optional[ProbeResult]:
        """
        Find the newest revision in the window whose images all exist

        Returns:
            ProbeResult for that revision, or None if the window is exhausted
        """
        seen_tags = set()

        for offset in self.window:
            try:
                revision = self.revisions.resolve_revision(offset)
            except RevisionResolutionError as e:
                if offset == 0:
                    raise
                # History is shorter than the window
                self.log(f"Stopping at offset {offset}: {e}", force=True)
                break

            tag = self.tag_for(revision)
            if tag in seen_tags:
                self.log(f"Skipping offset {offset}: tag {tag} already checked", force=True)
                continue
            seen_tags.add(tag)

            checks = self.check_tag(tag)
            if checks is not None:
                return ProbeResult(offset=offset, revision=revision, tag=tag, checks=checks)

        return None
