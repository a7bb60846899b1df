from __future__ import annotations

import logging
from pathlib import Path

from settings import AppConfig
from security import hash_password

from .disk_store import DiskJsonDocumentStore
from .document import UserRecord

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def database_path(base_dir: Path, config: AppConfig) -> Path:
    return base_dir / config.json_database_name


def public_dir(base_dir: Path, config: AppConfig) -> Path | None:
    if not config.public_folder_name:
        return None
    return base_dir / config.public_folder_name


def uploads_dir(base_dir: Path, config: AppConfig) -> Path | None:
    if not config.uploads_folder_name:
        return None
    return base_dir / config.uploads_folder_name


def _admin_record(config: AppConfig) -> UserRecord | None:
    if not (config.requires_authorization and config.admin_username and config.admin_password):
        return None
    return UserRecord(username=config.admin_username, password=hash_password(config.admin_password))


def bootstrap_workspace(config: AppConfig, base_dir: Path) -> DiskJsonDocumentStore:
    """
    Create the public/uploads folders and the initial database when absent.
    An existing database is never touched.
    """
    for folder in (public_dir(base_dir, config), uploads_dir(base_dir, config)):
        if folder is not None:
            ensure_dir(folder)

    store = DiskJsonDocumentStore(database_path(base_dir, config))
    if not store.exists():
        store.create_initial(config.resource_names, _admin_record(config))
    else:
        logger.debug("Using existing database %s", store.path)
    return store
