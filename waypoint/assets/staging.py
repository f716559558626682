"""
Asset staging for Waypoint

Copies files and directory trees into a static assets folder served by a node,
and a few small filesystem helpers used while preparing a build.
"""
from __future__ import annotations

import shutil

from pathlib import Path

import structlog

from waypoint.exceptions import AssetError

logger = structlog.get_logger(__name__)


def copy_dir_contents_to_static(source: Path, static_dir: Path = Path("static")) -> list[Path]:
    """Replace static_dir with the contents of source.

    Subdirectory structure is preserved.

    Args:
        source: Directory whose contents are copied
        static_dir: Static assets folder, recreated from scratch

    Returns:
        Paths of the copied files inside static_dir
    """
    if not source.is_dir():
        raise AssetError(f"{source} is not a directory")

    shutil.rmtree(static_dir, ignore_errors=True)
    static_dir.mkdir(parents=True)

    copied: list[Path] = []
    for path in sorted(source.rglob("*")):
        relative = path.relative_to(source)
        if path.is_dir():
            (static_dir / relative).mkdir(parents=True, exist_ok=True)
            continue
        copied.append(copy_file_to_static(path, relative.parent, static_dir))

    logger.info("Copied directory to static", source=str(source), files=len(copied))
    return copied


def copy_file_to_static(
    file_path: Path,
    target_subdir: Path | str = "",
    static_dir: Path = Path("static"),
) -> Path:
    """Copy one file into static_dir, optionally under target_subdir."""
    destination_dir = static_dir / target_subdir
    destination = destination_dir / file_path.name
    try:
        destination_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(file_path, destination)
    except OSError as e:
        raise AssetError(f"Failed to copy {file_path} to {destination}: {e}") from e

    logger.debug("Copied file to static", source=str(file_path), destination=str(destination))
    return destination


def copy_dockerfile_to_dir(
    dockerfile_ref: str,
    repo_dir: Path,
    dockerfiles_dir: Path = Path("dockerfiles"),
) -> bool:
    """Copy dockerfiles/<dockerfile_ref> to <repo_dir>/Dockerfile.

    Returns:
        True if the file was copied, False otherwise
    """
    source = dockerfiles_dir / dockerfile_ref
    destination = repo_dir / "Dockerfile"
    try:
        shutil.copyfile(source, destination)
    except OSError as e:
        logger.info(
            "Error copying dockerfile",
            dockerfile=str(source),
            destination=str(destination),
            error=f"{e.__class__.__name__}: {e}",
        )
        return False
    return True


def clear_tmp(tmp_dir: Path = Path("tmp")) -> bool:
    """Remove tmp_dir. Returns True if it existed and was removed."""
    if not tmp_dir.is_dir():
        return False
    shutil.rmtree(tmp_dir)
    return True


def append_to_file(file_path: Path, data: str) -> None:
    """Append data to file_path, creating it if needed."""
    try:
        with file_path.open("a", encoding="utf-8") as f:
            f.write(data)
    except OSError as e:
        logger.warning("Error opening file", path=str(file_path), error=f"{e.__class__.__name__}: {e}")


def get_all_files_in_folder(folder: Path) -> list[Path]:
    """List the entries directly inside folder.

    Raises:
        AssetError: If folder cannot be read
    """
    try:
        return sorted(folder.iterdir())
    except OSError as e:
        raise AssetError(f"Cannot list {folder}: {e}") from e
