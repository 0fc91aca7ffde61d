# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-08
# Updated: 2026-01-21
# Description: QARecordLoader
# -----------------------------------------------------------------------------
import csv
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List

import pandas as pd

import settings
from utility.logging_utils import get_class_logger

SOURCE_FIELD = "__source__"


@dataclass(frozen=True)
class RawSource:
    """A delimited question/answer file; `name` is the label stored on its chunks."""

    name: str
    path: Path

    @classmethod
    def from_path(cls, path: str | Path) -> "RawSource":
        p = Path(path)
        return cls(name=p.name, path=p)


class QARecordLoader:
    """
    Reads knowledge-base sources into raw row dicts.

    Rows are returned exactly as read (header names untouched, values as
    strings) and tagged with their source name under SOURCE_FIELD; cleaning
    and validation belong to QANormalizer.
    """

    def __init__(self, *, logger: logging.Logger | None = None):
        self.logger = logger or get_class_logger(self.__class__)

    @staticmethod
    def default_sources(data_dir: str | Path | None = None) -> List[RawSource]:
        root = Path(data_dir or settings.DATA_DIR)
        return [RawSource(name=name, path=root / name) for name in settings.DEFAULT_SOURCE_FILES]

    def read(self, source: RawSource) -> List[Dict[str, Any]]:
        """
        Read one delimited file. The delimiter is sniffed, so comma, semicolon
        and tab separated exports all load.
        """
        start_time = time.time()
        self.logger.info("Reading source '%s' from %s", source.name, source.path)

        if not source.path.is_file():
            self.logger.error("Source file not found: %s", source.path)
            raise FileNotFoundError(f"Knowledge source '{source.name}' not found at {source.path}")

        # the delimiter sniffer cannot cope with a file that has no rows
        if not source.path.read_text(encoding="utf-8-sig").strip():
            self.logger.warning("Source '%s' is empty", source.name)
            return []

        try:
            df = pd.read_csv(
                source.path,
                sep=None,
                engine="python",
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                quoting=csv.QUOTE_MINIMAL,
                encoding="utf-8-sig",
            )
        except pd.errors.EmptyDataError:
            self.logger.warning("Source '%s' is empty", source.name)
            return []
        except Exception as e:
            elapsed = (time.time() - start_time) * 1000.0
            self.logger.exception(
                "Failed to parse source '%s' after %.1f ms: %s", source.name, elapsed, e
            )
            raise

        rows: List[Dict[str, Any]] = df.to_dict(orient="records")
        for row in rows:
            row[SOURCE_FIELD] = source.name

        elapsed = (time.time() - start_time) * 1000.0
        self.logger.info(
            "Read %d row(s) from '%s' (columns=%s, %.1f ms)",
            len(rows),
            source.name,
            list(df.columns),
            elapsed,
        )
        return rows

    def read_all(self, sources: Iterable[RawSource]) -> Iterator[Dict[str, Any]]:
        """Rows from every source, in source order."""
        for source in sources:
            yield from self.read(source)
