"""
Corpus loader.

A corpus is a flat directory of plain-text test case documents. The file
name becomes the record name. Entries are sorted by name so two runs over
the same directory report in the same order.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import aiofiles
from loguru import logger

from casebench_core.domain.exceptions import CorpusError


@dataclass(frozen=True)
class CorpusEntry:
    name: str
    path: Path


class CorpusLoader:
    """
    Enumerates and reads test case documents.

    Usage:
        loader = CorpusLoader("tests/cases")
        for entry in loader.entries():
            text = await loader.read(entry)
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def entries(self) -> list[CorpusEntry]:
        """
        List the regular files directly inside the corpus directory.

        Raises:
            CorpusError: If the directory is missing or cannot be listed.
        """
        if not self.directory.is_dir():
            raise CorpusError(f"Corpus directory not found: {self.directory}")

        try:
            paths = [p for p in self.directory.iterdir() if p.is_file()]
        except OSError as e:
            raise CorpusError(f"Cannot list corpus directory {self.directory}: {e}", cause=e) from e

        entries = [CorpusEntry(name=p.name, path=p) for p in sorted(paths, key=lambda p: p.name)]
        logger.info(f"Found {len(entries)} test case(s) in {self.directory}")
        return entries

    async def read(self, entry: CorpusEntry) -> str:
        """
        Read one document as UTF-8 text.

        Raises:
            CorpusError: If the file cannot be read or decoded.
        """
        try:
            async with aiofiles.open(entry.path, "r", encoding="utf-8") as f:
                return await f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise CorpusError(f"Cannot read test case {entry.name}: {e}", cause=e) from e
