"""Cloning of untracked environment files into a new worktree."""

import json
import os
import shutil
from dataclasses import dataclass, field
from typing import List, Optional

from worktree_keeper.exceptions import EnvCloneError
from worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class EnvCloneConfig:
    """Relative paths to copy and to symlink from the source tree."""

    copy: List[str] = field(default_factory=list)
    symlink: List[str] = field(default_factory=list)


def _string_list(value, key: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"'{key}' must be a list of relative paths")
    return value


def load_env_clone_config(repo_root: str, file_name: str) -> Optional[EnvCloneConfig]:
    """Load the env-clone config file from the repository root.

    Args:
        repo_root: Repository root
        file_name: Config file name, e.g. .worktree-env.json

    Returns:
        EnvCloneConfig, or None when the file is missing or invalid
    """
    config_path = os.path.join(repo_root, file_name)
    if not os.path.isfile(config_path):
        logger.debug(f"No env clone config at {config_path}")
        return None

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("top level must be an object")
        return EnvCloneConfig(
            copy=_string_list(data.get("copy"), "copy"),
            symlink=_string_list(data.get("symlink"), "symlink"),
        )
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring invalid env clone config {config_path}: {e}")
        return None


def clone_environment(source_dir: str, target_dir: str, config: EnvCloneConfig) -> List[str]:
    """Copy and symlink configured entries from source_dir into target_dir.

    Missing sources are skipped silently. Entries that exist but cannot be
    cloned are collected and reported together after every entry was tried.

    Returns:
        Relative paths that were cloned

    Raises:
        EnvCloneError: If any existing entry could not be cloned
    """
    cloned: List[str] = []
    failures: List[str] = []

    for rel_path in config.copy:
        src = os.path.join(source_dir, rel_path)
        dest = os.path.join(target_dir, rel_path)
        if not os.path.exists(src):
            logger.debug(f"Skipping missing env file {src}")
            continue
        try:
            os.makedirs(os.path.dirname(dest), exist_ok=True)
            if os.path.isdir(src):
                shutil.copytree(src, dest, symlinks=True, dirs_exist_ok=True)
            else:
                shutil.copy2(src, dest)
            cloned.append(rel_path)
            logger.debug(f"Copied {src} -> {dest}")
        except OSError as e:
            failures.append(f"copy {rel_path}: {e}")

    for rel_path in config.symlink:
        src = os.path.join(source_dir, rel_path)
        dest = os.path.join(target_dir, rel_path)
        if not os.path.exists(src):
            logger.debug(f"Skipping missing env entry {src}")
            continue
        if os.path.lexists(dest):
            logger.debug(f"Not linking {rel_path}: {dest} already exists")
            continue
        try:
            os.makedirs(os.path.dirname(dest), exist_ok=True)
            os.symlink(os.path.abspath(src), dest)
            cloned.append(rel_path)
            logger.debug(f"Linked {dest} -> {src}")
        except OSError as e:
            failures.append(f"symlink {rel_path}: {e}")

    if failures:
        raise EnvCloneError("; ".join(failures))
    return cloned
