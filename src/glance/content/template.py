"""Template reference — the primary template plus its directory scope.

Every regular file next to the primary template is part of the template set,
so includes and partials resolve by bare file name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from glance.config import CONFIG_FILE_NAMES

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True, slots=True)
class TemplateRef:
    """A primary template and the directory that scopes it.

    Attributes:
        path: Absolute path to the primary template.

    """

    path: Path

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def name(self) -> str:
        """Entry template name inside the directory scope."""
        return self.path.name

    def sources(self) -> list[str]:
        """Names of every template in the directory scope, sorted.

        Hidden files (editor swap files, ``.DS_Store``), glance config files
        and subdirectories are skipped.
        """
        return sorted(
            entry.name
            for entry in self.directory.iterdir()
            if entry.is_file()
            and not entry.name.startswith(".")
            and entry.name not in CONFIG_FILE_NAMES
        )
