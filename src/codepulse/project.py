"""Project name lookup for the active document."""

from pathlib import Path
from typing import Iterable, List, Optional

from .models import DocumentInfo


class WorkspaceProjectResolver:
    """Resolves a project name from the host's open workspace folders.

    The project is the name of the innermost workspace folder containing the
    document. Documents outside every folder fall back to the first folder,
    matching how single-root editors report their project.
    """

    def __init__(self, workspace_folders: Optional[Iterable[str]] = None):
        self.workspace_folders: List[Path] = [
            Path(folder) for folder in (workspace_folders or [])
        ]

    def set_workspace_folders(self, workspace_folders: Iterable[str]) -> None:
        self.workspace_folders = [Path(folder) for folder in workspace_folders]

    def __call__(self, document: DocumentInfo) -> Optional[str]:
        if not self.workspace_folders:
            return None

        doc_path = Path(document.path)
        containing = [
            folder
            for folder in self.workspace_folders
            if folder == doc_path or folder in doc_path.parents
        ]
        if containing:
            innermost = max(containing, key=lambda folder: len(folder.parts))
            return innermost.name or None

        return self.workspace_folders[0].name or None
