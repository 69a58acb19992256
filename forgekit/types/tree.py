"""Repository tree data models."""

from dataclasses import dataclass
from enum import Enum

DIRECTORY_MODE = "040000"
FILE_MODE = "100644"


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class TreeEntry:
    """A file or directory in a repository listing."""

    id: str
    name: str
    kind: EntryKind
    path: str  # never carries a trailing "/"
    mode: str  # "040000" or "100644", informational only

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE
