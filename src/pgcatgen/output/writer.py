"""
Catalog Writer - formats generated source and writes it to disk.

A destination file is either fully replaced or left as it was: the
formatted text goes to a temporary file in the destination directory which
is then renamed over the target.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

import black

from pgcatgen.errors import FormatError, WriteError

logger = logging.getLogger(__name__)


class CatalogWriter:
    """Formats generated Python source with black and writes it atomically."""

    def __init__(self, line_length: int = black.DEFAULT_LINE_LENGTH):
        self.mode = black.Mode(line_length=line_length)

    def format_source(self, source: str, destination: Optional[Path] = None) -> str:
        """
        Format rendered source.

        Raises:
            FormatError: the source does not parse, which means the template
                or the data fed into it is broken
        """
        try:
            return black.format_str(source, mode=self.mode)
        except black.InvalidInput as e:
            raise FormatError(destination, e) from e

    def write(self, destination: Path, source: str) -> Path:
        """
        Format ``source`` and replace ``destination`` with it.

        Args:
            destination: Target file; parent directories are created
            source: Rendered, unformatted source

        Returns:
            The destination path
        """
        destination = Path(destination)
        code = self.format_source(source, destination)

        tmp_name = None
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                delete=False,
                dir=destination.parent,
                prefix=f".{destination.name}.",
                suffix=".tmp",
            ) as fh:
                tmp_name = fh.name
                fh.write(code)
            os.replace(tmp_name, destination)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise WriteError(destination, e) from e

        logger.info(f"Wrote {destination}")
        return destination
