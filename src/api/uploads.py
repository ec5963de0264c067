"""Client-side checks for CV and portfolio uploads.

Files are rejected here, before any request is built:
  - CVs: PDF, DOC or DOCX
  - Portfolios: PDF, ZIP, RAR or 7Z
  - Anything over 10 MB
"""

import mimetypes
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from src.api.errors import UploadValidationError

MAX_UPLOAD_BYTES = 10 * 1024 * 1024

PDF = "application/pdf"
DOC = "application/msword"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
ZIP = "application/zip"
RAR = "application/x-rar-compressed"
SEVEN_ZIP = "application/x-7z-compressed"

# mimetypes does not know .rar/.7z everywhere, so common types are pinned.
_EXTENSION_TYPES = {
    ".pdf": PDF,
    ".doc": DOC,
    ".docx": DOCX,
    ".zip": ZIP,
    ".rar": RAR,
    ".7z": SEVEN_ZIP,
}


class UploadKind(str, Enum):
    CV = "cv"
    PORTFOLIO = "portfolio"

    @property
    def allowed_types(self) -> frozenset[str]:
        if self is UploadKind.CV:
            return frozenset({PDF, DOC, DOCX})
        return frozenset({PDF, ZIP, RAR, SEVEN_ZIP})

    @property
    def type_error(self) -> str:
        if self is UploadKind.CV:
            return "Invalid file type. Please upload PDF, DOC, or DOCX files only."
        return "Invalid file type. Please upload PDF, ZIP, RAR, or 7Z files only."


class UploadFile(BaseModel):
    """A file picked for upload."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: str | Path, content_type: str | None = None) -> "UploadFile":
        """Read a file from disk, guessing its MIME type from the extension."""
        path = Path(path)
        if not path.exists():
            msg = f"File not found: {path}"
            raise FileNotFoundError(msg)
        return cls(
            filename=path.name,
            content=path.read_bytes(),
            content_type=content_type or guess_content_type(path.name),
        )


def guess_content_type(filename: str) -> str:
    """Best-effort MIME type for a filename. Unknown → application/octet-stream."""
    suffix = Path(filename).suffix.lower()
    if suffix in _EXTENSION_TYPES:
        return _EXTENSION_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or "application/octet-stream"


def validate_upload(upload: UploadFile, kind: UploadKind) -> None:
    """Raise UploadValidationError if the file may not be uploaded as kind."""
    if upload.content_type not in kind.allowed_types:
        raise UploadValidationError(kind.type_error)
    if upload.size > MAX_UPLOAD_BYTES:
        msg = "File size exceeds 10MB limit."
        raise UploadValidationError(msg)
