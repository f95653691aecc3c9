"""Folder capacity policy.

One aggregate ceiling per folder plus a ceiling per file. Both are checked
before anything is written; a rejected upload never reaches storage.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from ..core.config import Settings, settings as default_settings
from ..exceptions import CapacityExceededError
from .size_utils import calculate_folder_size, format_size

MAX_FOLDER_SIZE = 100 * 1024 * 1024
MAX_FILE_SIZE = 10 * 1024 * 1024


@dataclass(frozen=True)
class CapacityPolicy:
    max_folder_size: int = MAX_FOLDER_SIZE
    max_file_size: int = MAX_FILE_SIZE

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "CapacityPolicy":
        config = config or default_settings
        return cls(
            max_folder_size=config.max_folder_size_bytes,
            max_file_size=config.max_file_size_bytes,
        )

    def remaining_space(self, files: Iterable[Any]) -> float:
        return self.max_folder_size - calculate_folder_size(files)

    def check_upload(self, files: Iterable[Any], new_file_size: int, replacing_size: float = 0) -> float:
        """Return the projected folder size, or raise ``CapacityExceededError``.

        *replacing_size* is the size of a file being replaced by this upload;
        it is freed before the new file is counted.
        """
        projected = calculate_folder_size(files) - replacing_size + new_file_size

        if projected > self.max_folder_size:
            limit = format_size(self.max_folder_size)
            raise CapacityExceededError(
                f"Adding this file would exceed the folder size limit of {limit}",
                limit_kind="folder",
                limit=self.max_folder_size,
                formatted_limit=limit,
                projected=projected,
            )

        self.check_file_size(new_file_size, projected=projected)
        return projected

    def check_file_size(self, file_size: int, projected: float = 0) -> None:
        """Raise ``CapacityExceededError`` when one file is over the per-file ceiling."""
        if file_size > self.max_file_size:
            limit = format_size(self.max_file_size)
            raise CapacityExceededError(
                f"File size exceeds the maximum limit of {limit}",
                limit_kind="file",
                limit=self.max_file_size,
                formatted_limit=limit,
                projected=projected,
            )
