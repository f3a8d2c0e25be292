"""Glance configuration.

PreviewConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path

# Config files live next to the template but are never templates themselves.
CONFIG_FILE_NAMES = ("glance.yaml", "glance.yml", "glance.toml")


@dataclass(frozen=True, slots=True)
class PreviewConfig:
    """Configuration for a preview server.

    Attributes:
        template: Path to the primary template. Always resolved to an
            absolute path on construction. Every file next to it is part of
            the template set.
        host: Bind address.
        port: Bind port.
        data: Initial render context, either a JSON literal or ``@path`` to
            a JSON file. Empty means ``{}``.
        editor: Inject the data-editing overlay into the preview page.
        debounce_ms: How long the watcher waits for a burst of file changes
            to settle before broadcasting once.

    """

    template: Path = field(default_factory=lambda: Path("template.html"))
    host: str = "localhost"
    port: int = 9654
    data: str = ""
    editor: bool = True
    debounce_ms: int = 50

    def __post_init__(self) -> None:
        # watchfiles reports absolute paths; keep ours comparable.
        if not self.template.is_absolute():
            object.__setattr__(self, "template", self.template.resolve())

    @property
    def template_dir(self) -> Path:
        """Directory whose files make up the template set."""
        return self.template.parent

    @property
    def url(self) -> str:
        """Address the preview is served on."""
        return f"http://{self.host}:{self.port}"
