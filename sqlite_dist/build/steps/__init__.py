"""构建步骤模块"""

from .build_step import BuildStep
from .collection_step import PlatformCollectionStep
from .release_step import GithubReleaseStep
from .amalgamation_step import AmalgamationStep
from .pip_step import PipStep
from .npm_step import NpmStep
from .gem_step import GemStep
from .finalize_step import FinalizeStep

__all__ = [
    "BuildStep",
    "PlatformCollectionStep",
    "GithubReleaseStep",
    "AmalgamationStep",
    "PipStep",
    "NpmStep",
    "GemStep",
    "FinalizeStep",
]
