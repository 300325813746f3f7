"""
Source Scanner Module

This module finds LC-3 assembly files to process, either a single file or
every matching file below a directory.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: Tuple[str, ...] = ('.asm',)


class SourceScanner:
    """
    Locates assembly source files.

    This class provides methods to:
    - Resolve a file or directory argument into a sorted list of sources
    - Skip files whose extension is not an assembly extension
    - Report what was found through logging
    """

    def __init__(self, extensions: Optional[Sequence[str]] = None):
        """
        Initialize the scanner.

        Args:
            extensions: File suffixes treated as assembly sources
        """
        self.extensions = tuple(ext.lower() for ext in (extensions or DEFAULT_EXTENSIONS))

    def is_source(self, filepath: str) -> bool:
        return Path(filepath).suffix.lower() in self.extensions

    def scan_directory(self, directory: str, recursive: bool = True) -> List[str]:
        """
        Find every source file in a directory.

        Args:
            directory: Path to the directory
            recursive: Whether to descend into subdirectories

        Returns:
            Sorted list of file paths
        """
        path = Path(directory)
        if not path.is_dir():
            logger.error(f"Directory not found: {directory}")
            return []

        candidates = path.rglob("*") if recursive else path.glob("*")
        files = sorted(str(p) for p in candidates if p.is_file() and self.is_source(str(p)))

        logger.info(f"Found {len(files)} assembly files in {directory}")
        return files

    def find_sources(self, paths: Sequence[str], recursive: bool = True) -> List[str]:
        """
        Expand file and directory arguments into source files.

        Explicitly named files are kept whatever their extension, so a
        single file can always be processed directly.

        Args:
            paths: Files and/or directories
            recursive: Whether directories are searched recursively

        Returns:
            De-duplicated list of file paths, in argument order
        """
        found: List[str] = []
        seen = set()

        for entry in paths:
            if Path(entry).is_dir():
                files = self.scan_directory(entry, recursive=recursive)
            elif Path(entry).is_file():
                if not self.is_source(entry):
                    logger.warning(f"Processing {entry} although it does not end in {', '.join(self.extensions)}")
                files = [entry]
            else:
                logger.error(f"Path not found: {entry}")
                files = []

            for filepath in files:
                if filepath not in seen:
                    seen.add(filepath)
                    found.append(filepath)

        return found
