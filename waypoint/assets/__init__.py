"""
Waypoint Assets Module

Fetches and stages the files a node serves.
"""

from .git import clone_remote_branch
from .staging import (
    append_to_file,
    clear_tmp,
    copy_dir_contents_to_static,
    copy_dockerfile_to_dir,
    copy_file_to_static,
    get_all_files_in_folder,
)

__all__ = [
    "clone_remote_branch",
    "append_to_file",
    "clear_tmp",
    "copy_dir_contents_to_static",
    "copy_dockerfile_to_dir",
    "copy_file_to_static",
    "get_all_files_in_folder",
]
