"""
Asset stores.

This package provides the byte-store interface and its drivers, plus a factory
that builds a store for a named disk from the configuration.
"""

from typing import Any, Dict, Optional

from imagemaker.core.config import get_config
from imagemaker.core.constants import DEFAULT_DISK, DEFAULT_DISK_ROOT, DEFAULT_DISK_URL
from imagemaker.core.error_handler import ConfigurationError, validate_configuration
from imagemaker.storage.base import AssetStore
from imagemaker.storage.local import LocalDiskStore
from imagemaker.storage.memory import InMemoryStore

def create_store(disk: Optional[str] = None, config: Optional[Dict[str, Any]] = None) -> AssetStore:
    """
    Build the store for a configured disk.

    Args:
        disk (str, optional): Disk name. Defaults to ``storage.default_disk``.
        config (Dict[str, Any], optional): Configuration to read. Defaults to get_config().

    Returns:
        AssetStore: A store serving the disk

    Raises:
        ConfigurationError: If the disk or its driver is unknown
    """
    config = config if config is not None else get_config()
    storage_config = config.get("storage", {})
    disk = disk or storage_config.get("default_disk", DEFAULT_DISK)

    disks = storage_config.get("disks", {})
    if disk not in disks:
        raise ConfigurationError(
            message=f"Unknown disk '{disk}'",
            component="storage",
            missing_keys=[f"storage.disks.{disk}"]
        )

    disk_config = disks[disk]
    validate_configuration(disk_config, ["driver"], component=f"storage.disks.{disk}")
    driver = disk_config["driver"]

    if driver == "local":
        return LocalDiskStore(
            root=disk_config.get("root", DEFAULT_DISK_ROOT),
            base_url=disk_config.get("url", DEFAULT_DISK_URL),
            disk=disk
        )
    if driver == "memory":
        return InMemoryStore(base_url=disk_config.get("url", DEFAULT_DISK_URL), disk=disk)

    raise ConfigurationError(message=f"Unknown storage driver '{driver}'", component=f"storage.disks.{disk}")
