"""
File utilities module for logstreamer.

This module provides the file system helpers used to discover plain log files.
"""

from pathlib import Path
from typing import List, Optional, Union
import logging


class FileUtils:
    """
    Utility class for file operations.
    """

    logger = logging.getLogger(__name__)

    @staticmethod
    def find_files(directory: Path, extensions: Optional[Union[str, List[str]]] = None) -> List[Path]:
        """
        Find regular files directly inside a directory.

        Unreadable directories yield no files rather than an error.

        Args:
            directory: Directory to search in
            extensions: File extensions to look for (with or without dot)

        Returns:
            Sorted list of matching file paths
        """
        if not directory.is_dir():
            FileUtils.logger.debug(f"Directory does not exist: {directory}")
            return []

        if isinstance(extensions, str):
            extensions = [extensions]

        # Normalize extensions to include the dot
        if extensions:
            extensions = [ext if ext.startswith('.') else '.' + ext for ext in extensions]

        files = []
        try:
            for item in directory.iterdir():
                try:
                    if item.is_file() and FileUtils._matches_extension(item, extensions):
                        files.append(item)
                except OSError as e:
                    FileUtils.logger.debug(f"Skipping {item}: {e}")
        except OSError as e:
            FileUtils.logger.warning(f"Cannot list directory {directory}: {e}")
            return []

        return sorted(files)

    @staticmethod
    def _matches_extension(file_path: Path, extensions: Optional[List[str]]) -> bool:
        """
        Check if a file path matches any of the given extensions.

        Args:
            file_path: File path to check
            extensions: List of extensions to match against

        Returns:
            True if file matches any extension, False otherwise
        """
        if extensions is None:
            return True  # If no extensions specified, match all files

        return file_path.suffix.lower() in [ext.lower() for ext in extensions]
