import os
from pathlib import Path
from typing import Optional

from skill_rule.constants import GITHUB_TOKEN_ENV
from skill_rule.errors import UnsupportedRegistryError
from skill_rule.models import RegistryConfig, RegistryType
from skill_rule.registry.base import IRegistryAdapter
from skill_rule.registry.github import GitHubRegistryAdapter
from skill_rule.registry.local import LocalRegistryAdapter


def create_registry(
    config: RegistryConfig, base_dir: Optional[Path] = None
) -> IRegistryAdapter:
    if config.type == RegistryType.LOCAL:
        root = Path(config.url).expanduser()
        if base_dir is not None and not root.is_absolute():
            root = base_dir / root
        return LocalRegistryAdapter(root)

    if config.type == RegistryType.GITHUB:
        token = config.token or os.environ.get(GITHUB_TOKEN_ENV) or None
        return GitHubRegistryAdapter(config.url, branch=config.branch, token=token)

    raise UnsupportedRegistryError(getattr(config.type, "value", str(config.type)))


__all__ = [
    "GitHubRegistryAdapter",
    "IRegistryAdapter",
    "LocalRegistryAdapter",
    "create_registry",
]
