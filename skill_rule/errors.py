from pathlib import Path


class SyncAppError(Exception):
    """Base user-facing application error."""


class SyncFileError(SyncAppError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class MissingConfigFileError(SyncFileError):
    def __init__(self, path: Path) -> None:
        super().__init__(path=path, message="Config not found (run 'sr init' first)")


class InvalidJsonFormatError(SyncFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid JSON format ({detail})")


class InvalidConfigSchemaError(SyncFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid config schema ({detail})")


class RegistryError(SyncAppError):
    """Registry could not be constructed from its configuration."""


class UnsupportedRegistryError(RegistryError):
    def __init__(self, registry_type: str) -> None:
        self.registry_type = registry_type
        super().__init__(f"Registry type not supported: {registry_type}")


class InvalidRegistryUrlError(RegistryError):
    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Invalid GitHub URL: {url}")
