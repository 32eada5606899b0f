"""
Discovery of plain log files kept alongside the unified log.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from .models import LogSource
from ..config.settings import Settings
from ..utils.file_utils import FileUtils


logger = logging.getLogger(__name__)


def list_log_sources(directories: Optional[Iterable[str]] = None,
                     extensions: Optional[Iterable[str]] = None) -> List[LogSource]:
    """
    List log files in the given directories.

    Args:
        directories: Directories to scan, ``~`` is expanded
        extensions: Accepted file suffixes

    Returns:
        Log sources, most recently modified first
    """
    settings = Settings()
    directories = list(directories) if directories is not None else list(settings.SOURCE_DIRECTORIES)
    extensions = list(extensions) if extensions is not None else list(settings.SOURCE_EXTENSIONS)

    sources = []
    for directory in directories:
        for path in FileUtils.find_files(Path(directory).expanduser(), extensions):
            try:
                stat_info = path.stat()
            except OSError as e:
                logger.debug(f"Skipping unreadable log file {path}: {e}")
                continue
            sources.append((stat_info.st_mtime, LogSource(
                id=str(path),
                name=path.name,
                path=str(path),
                size=stat_info.st_size,
                modified=datetime.fromtimestamp(stat_info.st_mtime).astimezone().isoformat(),
            )))

    sources.sort(key=lambda item: item[0], reverse=True)
    return [source for _, source in sources]
