"""
Git backed revision source
"""

from pathlib import Path
from typing import Callable, Optional

from .base import RevisionSource
from .errors import RevisionResolutionError
from .runner import CommandNotFoundError, CommandRunner

DEFAULT_REF = 'origin/master'


class GitRevisionSource(RevisionSource):
    """Resolves `<ref>~<offset>` to a full commit hash with git rev-parse"""

    def __init__(
        self,
        ref: str = DEFAULT_REF,
        repo_dir: Optional[Path] = None,
        fetch: bool = False,
        remote: str = 'origin',
        runner: Optional[CommandRunner] = None,
        log: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize git revision source

        Args:
            ref: Reference whose history is scanned (default: origin/master)
            repo_dir: Working tree to run git in (default: current directory)
            fetch: Run `git fetch <remote>` once before the first lookup
            remote: Remote to fetch from (default: origin)
            runner: Command runner (default: CommandRunner())
            log: Callable for diagnostic messages
        """
        self.ref = ref
        self.repo_dir = Path(repo_dir) if repo_dir else None
        self.fetch = fetch
        self.remote = remote
        self.runner = runner or CommandRunner()
        self.log = log or (lambda message: None)
        self._fetched = False

    def _fetch_once(self) -> None:
        if not self.fetch or self._fetched:
            return
        self._fetched = True

        self.log(f"Fetching {self.remote}...")
        result = self.runner.run(['git', 'fetch', '--quiet', self.remote], cwd=self.repo_dir)
        if not result.ok:
            # A stale ref is still usable, so only warn
            self.log(f"Warning: git fetch {self.remote} failed: {result.stderr.strip()}")

    def resolve_revision(self, offset: int) -> str:
        if offset < 0:
            raise RevisionResolutionError(self.ref, offset, 'offset must not be negative')

        try:
            self._fetch_once()
            result = self.runner.run(
                ['git', 'rev-parse', '--verify', '--quiet', f"{self.ref}~{offset}^{{commit}}"],
                cwd=self.repo_dir,
            )
        except (CommandNotFoundError, OSError) as e:
            raise RevisionResolutionError(self.ref, offset, str(e)) from e

        revision = result.stdout.strip()
        if not result.ok or not revision:
            detail = result.stderr.strip() or 'no such revision'
            raise RevisionResolutionError(self.ref, offset, detail)

        return revision
