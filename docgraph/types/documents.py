"""
Document Types

Input Models:
    - DocumentPayload: An uploaded document, on disk or in memory
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class DocumentPayload(BaseModel):
    """
    An uploaded document waiting for text extraction.

    Either `path` or `content_bytes` must be set. When both are present the
    in-memory bytes win.
    """

    name: str = Field(..., description="Original file name, e.g. 'report.pdf'")
    path: Path | None = Field(
        default=None, description="Path to the document file (if on disk)"
    )
    content_bytes: bytes | None = Field(
        default=None, description="Raw bytes of the document (if not using path)"
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def from_path(cls, path: str | Path) -> "DocumentPayload":
        path = Path(path)
        return cls(name=path.name, path=path)

    @property
    def suffix(self) -> str:
        """Lower-cased file extension including the dot ('' if none)."""
        return Path(self.name).suffix.lower()

    @property
    def display_name(self) -> str:
        """Name used for the DOCUMENT node: the file name without '.pdf'."""
        if self.suffix == ".pdf":
            return self.name[: -len(".pdf")]
        return self.name

    def read_bytes(self) -> bytes:
        if self.content_bytes is not None:
            return self.content_bytes
        if self.path is None:
            raise ValueError(f"Document {self.name!r} has neither content nor path")
        return self.path.read_bytes()
