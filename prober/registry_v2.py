"""
OCI Distribution (Docker Registry V2) checker
"""

import re
from typing import Dict, Optional, Tuple

import requests

from .base import CheckResult, CheckStatus, RegistryChecker

MANIFEST_ACCEPT = ', '.join([
    'application/vnd.oci.image.index.v1+json',
    'application/vnd.oci.image.manifest.v1+json',
    'application/vnd.docker.distribution.manifest.list.v2+json',
    'application/vnd.docker.distribution.manifest.v2+json',
])


class RegistryV2Checker(RegistryChecker):
    """Checker for any registry implementing the OCI Distribution API"""

    def __init__(
        self,
        registry_url: str,
        namespace: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize registry checker

        Args:
            registry_url: Registry base URL (e.g., "https://ghcr.io")
            namespace: Optional namespace prepended to repository names
            username: Optional username for token requests
            password: Optional password/token for token requests
            timeout: Request timeout in seconds (default: 30)
            session: requests session to use (default: new session)
        """
        if not registry_url:
            raise ValueError("registry_url is required for the registry-v2 backend")
        if '://' not in registry_url:
            registry_url = f"https://{registry_url}"

        self.base_url = registry_url.rstrip('/')
        self.api_base = f"{self.base_url}/v2"
        self.namespace = namespace.strip('/') if namespace else None
        self.auth = (username, password) if username and password else None
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': 'LBT-Image-Prober/0.1.0'
        })
        self._token_cache: Dict[str, str] = {}

    def _full_repository(self, repository: str) -> str:
        if self.namespace:
            return f"{self.namespace}/{repository}"
        return repository

    @staticmethod
    def _parse_challenge(header: str) -> Optional[Tuple[str, Dict[str, str]]]:
        """
        Parse a Bearer challenge: Bearer realm="...",service="...",scope="..."

        Returns:
            Tuple of (realm, params) or None if not a Bearer challenge
        """
        if not header.lower().startswith('bearer'):
            return None

        fields = dict(re.findall(r'(\w+)="([^"]*)"', header))
        realm = fields.pop('realm', None)
        if not realm:
            return None
        return realm, fields

    def _fetch_token(self, repository: str, challenge: str) -> Optional[str]:
        """Request a bearer token for the challenge, caching it per repository"""
        parsed = self._parse_challenge(challenge)
        if not parsed:
            return None

        realm, params = parsed
        params.setdefault('scope', f"repository:{repository}:pull")

        response = self.session.get(realm, params=params, auth=self.auth, timeout=self.timeout)
        response.raise_for_status()
        data = response.json()
        token = data.get('token') or data.get('access_token')
        if token:
            self._token_cache[repository] = token
        return token

    def _head_manifest(self, repository: str, tag: str) -> requests.Response:
        url = f"{self.api_base}/{repository}/manifests/{tag}"
        headers = {'Accept': MANIFEST_ACCEPT}

        token = self._token_cache.get(repository)
        if token:
            headers['Authorization'] = f'Bearer {token}'

        return self.session.head(url, headers=headers, timeout=self.timeout,
                                 allow_redirects=True)

    def _check(self, repository: str, tag: str) -> CheckResult:
        full_repo = self._full_repository(repository)

        try:
            response = self._head_manifest(full_repo, tag)

            if response.status_code == 401:
                # Token missing or expired: negotiate once and retry
                self._token_cache.pop(full_repo, None)
                challenge = response.headers.get('WWW-Authenticate', '')
                if self._fetch_token(full_repo, challenge):
                    response = self._head_manifest(full_repo, tag)

        except (requests.exceptions.RequestException, ValueError) as e:
            return self._result(repository, tag, CheckStatus.ERROR, str(e))

        if response.status_code == 200:
            return self._result(repository, tag, CheckStatus.FOUND)
        if response.status_code == 404:
            return self._result(repository, tag, CheckStatus.NOT_FOUND)

        return self._result(repository, tag, CheckStatus.ERROR,
                            f"HTTP {response.status_code} from {self.base_url}")
