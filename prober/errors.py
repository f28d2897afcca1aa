"""
Exceptions raised while probing for land-blocking images
"""


class ProbeError(Exception):
    """Base class for all prober errors"""


class MissingImageTagError(ProbeError, ValueError):
    """An existence check was requested without an image tag"""

    def __init__(self):
        super().__init__("Missing image tag")


class InvalidImageTagError(ProbeError, ValueError):
    """The image tag does not follow the registry tag grammar"""

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"Invalid image tag: {tag!r}")


class RevisionResolutionError(ProbeError):
    """A revision offset could not be resolved to a commit"""

    def __init__(self, ref: str, offset: int, detail: str = ''):
        self.ref = ref
        self.offset = offset
        message = f"Could not resolve {ref}~{offset}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class RegistryTransportError(ProbeError):
    """The registry could not be queried (network, auth, API failure)"""

    def __init__(self, repository: str, tag: str, detail: str):
        self.repository = repository
        self.tag = tag
        super().__init__(f"Error checking {repository}:{tag}: {detail}")


class ConfigError(ProbeError):
    """Invalid or unreadable configuration"""
