"""
Configuration loading for the land-blocking image prober
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .base import RegistryChecker, RevisionSource
from .ecr import AwsCliChecker, ECRChecker
from .errors import ConfigError
from .git import DEFAULT_REF, GitRevisionSource
from .prober import DEFAULT_MAX_OFFSET, DEFAULT_REPOSITORIES, ON_ERROR_FAIL, ON_ERROR_POLICIES
from .registry_v2 import RegistryV2Checker
from .tags import DEFAULT_SHORT_LENGTH, DEFAULT_TAG_PREFIX

DEFAULT_CONFIG_PATH = 'config/land-blocking.yaml'

BACKENDS = ('ecr', 'aws-cli', 'registry-v2')


@dataclass
class ProbeConfig:
    """Settings for one probe run"""
    repositories: List[str] = field(default_factory=lambda: list(DEFAULT_REPOSITORIES))
    max_offset: int = DEFAULT_MAX_OFFSET
    ref: str = DEFAULT_REF
    tag_prefix: str = DEFAULT_TAG_PREFIX
    short_length: int = DEFAULT_SHORT_LENGTH
    on_error: str = ON_ERROR_FAIL

    backend: str = 'ecr'
    region: Optional[str] = None
    registry_id: Optional[str] = None
    registry_url: Optional[str] = None
    namespace: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    repo_dir: str = '.'
    fetch: bool = False
    remote: str = 'origin'

    def validate(self) -> 'ProbeConfig':
        """Raise ConfigError if any setting is unusable"""
        if not self.repositories:
            raise ConfigError("No repositories configured")
        if not all(isinstance(r, str) and r for r in self.repositories):
            raise ConfigError(f"Repository names must be non-empty strings: {self.repositories}")
        if not isinstance(self.max_offset, int) or self.max_offset < 0:
            raise ConfigError(f"max_offset must be a non-negative integer, got {self.max_offset!r}")
        if not isinstance(self.short_length, int) or self.short_length <= 0:
            raise ConfigError(f"short_length must be a positive integer, got {self.short_length!r}")
        if self.on_error not in ON_ERROR_POLICIES:
            raise ConfigError(f"Unsupported on_error policy: {self.on_error}")
        if self.backend not in BACKENDS:
            raise ConfigError(f"Unsupported registry backend: {self.backend}")
        if self.backend == 'registry-v2' and not self.registry_url:
            raise ConfigError("registry-v2 backend requires a registry url")
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProbeConfig':
        """
        Build a config from parsed YAML

        Args:
            data: Mapping with top-level keys plus optional `registry` and
                `git` sections

        Returns:
            ProbeConfig (not yet validated)
        """
        if not isinstance(data, dict):
            raise ConfigError("Config root must be a mapping")

        registry = data.get('registry') or {}
        git = data.get('git') or {}
        config = cls()

        for key in ('repositories', 'max_offset', 'ref', 'tag_prefix', 'short_length', 'on_error'):
            if data.get(key) is not None:
                setattr(config, key, data[key])

        config.backend = registry.get('backend', config.backend)
        config.region = registry.get('region')
        config.registry_id = registry.get('registry_id')
        config.registry_url = registry.get('url')
        config.namespace = registry.get('namespace')

        config.repo_dir = git.get('repo_dir', config.repo_dir)
        config.fetch = bool(git.get('fetch', config.fetch))
        config.remote = git.get('remote', config.remote)

        if isinstance(config.repositories, str):
            config.repositories = [config.repositories]
        if config.registry_id is not None:
            config.registry_id = str(config.registry_id)

        return config

    def apply_env(self, environ=None) -> 'ProbeConfig':
        """Fill registry-v2 url and credentials from LBT_REGISTRY_* variables"""
        environ = os.environ if environ is None else environ
        self.registry_url = environ.get('LBT_REGISTRY_URL') or self.registry_url
        self.username = environ.get('LBT_REGISTRY_USERNAME') or self.username
        self.password = environ.get('LBT_REGISTRY_PASSWORD') or self.password
        return self


def load_config(path: Optional[str] = None) -> ProbeConfig:
    """
    Load configuration from YAML

    Args:
        path: Config file path. When None, the default path is used if it
            exists and built-in defaults otherwise.

    Returns:
        ProbeConfig
    """
    explicit = path is not None
    config_path = Path(path or DEFAULT_CONFIG_PATH)

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        return ProbeConfig()

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read config {config_path}: {e}") from e

    return ProbeConfig.from_dict(data or {})


def build_checker(config: ProbeConfig) -> RegistryChecker:
    """Create the registry checker selected by `config.backend`"""
    if config.backend == 'ecr':
        return ECRChecker(region=config.region, registry_id=config.registry_id)
    elif config.backend == 'aws-cli':
        return AwsCliChecker(region=config.region, registry_id=config.registry_id)
    elif config.backend == 'registry-v2':
        return RegistryV2Checker(
            config.registry_url,
            namespace=config.namespace,
            username=config.username,
            password=config.password,
        )
    raise ConfigError(f"Unsupported registry backend: {config.backend}")


def build_revision_source(config: ProbeConfig, log=None) -> RevisionSource:
    return GitRevisionSource(
        ref=config.ref,
        repo_dir=Path(config.repo_dir),
        fetch=config.fetch,
        remote=config.remote,
        log=log,
    )
