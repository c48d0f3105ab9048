#!/usr/bin/env python3
"""
SLIM2ERB FILES - Disk I/O
-------------------------
Discovery of Slim sources, output path resolution, backups and atomic
writes. Every OS failure is re-raised as ReadError / WriteError with the
offending path attached.

Author: Slim2ERB Team
Date: 2026-10-18
"""

import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional, Union

from slim2erb.core.errors import ReadError, WriteError

logger = logging.getLogger("slim2erb.files")

PathLike = Union[str, Path]

OUTPUT_SUFFIX = ".erb"
BACKUP_SUFFIX = ".backup"
TEMP_SUFFIX = ".slim2erb.tmp"


def read_source(path: PathLike) -> str:
    """Reads a source file, dropping a UTF-8 BOM if present."""
    path = Path(path)
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise ReadError(f"Failed to read file {path}: {e}", file_path=str(path))


def output_path_for(source: PathLike, output_directory: Optional[PathLike] = None,
                    root: Optional[PathLike] = None) -> Path:
    """
    views/show.slim -> views/show.erb, or <output_directory>/show.erb.
    With a scan `root`, the source's subdirectories under it are kept:
    views/users/index.slim -> <output_directory>/users/index.erb
    """
    source = Path(source)
    name = f"{source.stem}{OUTPUT_SUFFIX}"
    if not output_directory:
        return source.with_name(name)
    target_dir = Path(output_directory)
    if root is not None and source.parent.is_relative_to(root):
        target_dir = target_dir / source.parent.relative_to(root)
    return target_dir / name


def ensure_directory(directory: PathLike):
    directory = Path(directory)
    if directory.is_dir():
        return
    try:
        logger.info(f"Creating output directory: {directory}")
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WriteError(f"Failed to create directory {directory}: {e}", file_path=str(directory))


def create_backup(path: PathLike) -> Path:
    """
    Copies `path` to `<path>.backup`, or `<path>-N.backup` when earlier
    backups already exist.
    """
    path = Path(path)
    backup_path = path.with_name(f"{path.name}{BACKUP_SUFFIX}")
    counter = 1
    while backup_path.exists():
        backup_path = path.with_name(f"{path.name}-{counter}{BACKUP_SUFFIX}")
        counter += 1
    try:
        shutil.copy2(path, backup_path)
    except OSError as e:
        raise WriteError(f"Failed to create backup: {e}", file_path=str(path))
    return backup_path


def atomic_write(target_path: PathLike, content: str):
    """Writes to a sibling temp file first, then swaps it into place."""
    target_path = Path(target_path)
    if not os.access(target_path.parent, os.W_OK):
        raise WriteError(f"No write access to {target_path.parent}", file_path=str(target_path))
    temp_file = target_path.with_name(target_path.name + TEMP_SUFFIX)
    try:
        temp_file.write_text(content, encoding="utf-8")
        os.replace(temp_file, target_path)
    except OSError as e:
        if temp_file.exists():
            temp_file.unlink()
        raise WriteError(f"Atomic write failed: {e}", file_path=str(target_path))


def write_output(source: PathLike, content: str, create_backup_copy: bool = True,
                 delete_original: bool = False,
                 output_directory: Optional[PathLike] = None,
                 root: Optional[PathLike] = None) -> dict:
    """
    Writes the converted document next to its source (or into
    output_directory) and applies the backup / delete-original policy.
    The original is only removed after the new file is safely in place.
    """
    source = Path(source)
    target = output_path_for(source, output_directory, root)
    ensure_directory(target.parent)

    backup = None
    if create_backup_copy and source.exists():
        backup = create_backup(source)

    atomic_write(target, content)

    deleted = False
    if delete_original and source.exists() and source.resolve() != target.resolve():
        try:
            source.unlink()
            deleted = True
        except OSError as e:
            raise WriteError(f"Converted, but failed to delete original: {e}", file_path=str(source))

    return {"output_path": target, "backup_path": backup, "deleted_original": deleted}


def find_sources(directory: PathLike, extension: str = ".slim") -> List[Path]:
    """
    Recursively collects files ending in `extension` (case-insensitive),
    sorted, skipping symlinks to avoid loops.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise ReadError(f"Failed to scan directory {directory}: not a directory", file_path=str(directory))
    extension = extension.lower()
    try:
        return sorted(
            f for f in directory.rglob("*")
            if f.name.lower().endswith(extension) and f.is_file() and not f.is_symlink()
        )
    except OSError as e:
        raise ReadError(f"Failed to scan directory {directory}: {e}", file_path=str(directory))
