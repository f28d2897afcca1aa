"""
Land-Blocking Image Finder

Finds the newest commit whose land-blocking test images exist in every
required registry repository.
"""

from .base import CheckResult, CheckStatus, ProbeResult, RegistryChecker, RevisionSource
from .ecr import AwsCliChecker, ECRChecker
from .git import GitRevisionSource
from .prober import ImageAvailabilityProber
from .registry_v2 import RegistryV2Checker
from .tags import derive_tag, validate_tag

__all__ = [
    'CheckResult',
    'CheckStatus',
    'ProbeResult',
    'RegistryChecker',
    'RevisionSource',
    'AwsCliChecker',
    'ECRChecker',
    'GitRevisionSource',
    'ImageAvailabilityProber',
    'RegistryV2Checker',
    'derive_tag',
    'validate_tag',
]

__version__ = '0.1.0'
