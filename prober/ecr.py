"""
Amazon ECR registry checkers

ECRChecker talks to the ECR API through boto3. AwsCliChecker shells out to
`aws ecr describe-images` for hosts where only the CLI is configured.
"""

from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .base import CheckResult, CheckStatus, RegistryChecker
from .errors import ConfigError
from .runner import CommandNotFoundError, CommandRunner

NOT_FOUND_CODE = 'ImageNotFoundException'


class ECRChecker(RegistryChecker):
    """Checker for Amazon ECR using the describe_images API"""

    def __init__(self, region: Optional[str] = None, registry_id: Optional[str] = None,
                 client=None):
        """
        Initialize ECR checker

        Args:
            region: AWS region (default: resolved by boto3)
            registry_id: AWS account id owning the registry (default: caller's account)
            client: Pre-built ECR client (default: boto3.client("ecr"))
        """
        self.region = region
        self.registry_id = registry_id
        if client is None:
            try:
                client = boto3.client('ecr', region_name=region) if region else boto3.client('ecr')
            except BotoCoreError as e:
                raise ConfigError(f"Could not create ECR client: {e}") from e
        self.client = client

    def _check(self, repository: str, tag: str) -> CheckResult:
        params = {
            'repositoryName': repository,
            'imageIds': [{'imageTag': tag}],
        }
        if self.registry_id:
            params['registryId'] = self.registry_id

        try:
            response = self.client.describe_images(**params)
        except ClientError as e:
            error = e.response.get('Error', {})
            code = error.get('Code', '')
            if code == NOT_FOUND_CODE:
                return self._result(repository, tag, CheckStatus.NOT_FOUND)
            return self._result(repository, tag, CheckStatus.ERROR,
                                f"{code}: {error.get('Message', str(e))}")
        except BotoCoreError as e:
            return self._result(repository, tag, CheckStatus.ERROR, str(e))

        if not response.get('imageDetails'):
            return self._result(repository, tag, CheckStatus.NOT_FOUND)

        return self._result(repository, tag, CheckStatus.FOUND)


class AwsCliChecker(RegistryChecker):
    """Checker that runs `aws ecr describe-images` and inspects its exit code"""

    def __init__(self, region: Optional[str] = None, registry_id: Optional[str] = None,
                 runner: Optional[CommandRunner] = None):
        self.region = region
        self.registry_id = registry_id
        self.runner = runner or CommandRunner()

    def build_command(self, repository: str, tag: str) -> list:
        cmd = [
            'aws', 'ecr', 'describe-images',
            '--repository-name', repository,
            '--image-ids', f"imageTag={tag}",
            '--output', 'json',
        ]
        if self.registry_id:
            cmd.extend(['--registry-id', self.registry_id])
        if self.region:
            cmd.extend(['--region', self.region])
        return cmd

    def _check(self, repository: str, tag: str) -> CheckResult:
        try:
            result = self.runner.run(self.build_command(repository, tag))
        except (CommandNotFoundError, OSError) as e:
            return self._result(repository, tag, CheckStatus.ERROR, str(e))

        if result.ok:
            return self._result(repository, tag, CheckStatus.FOUND)

        stderr = result.stderr.strip()
        if NOT_FOUND_CODE in stderr:
            return self._result(repository, tag, CheckStatus.NOT_FOUND)

        return self._result(repository, tag, CheckStatus.ERROR,
                            stderr or f"aws exited with code {result.returncode}")
