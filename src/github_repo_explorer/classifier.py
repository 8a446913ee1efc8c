"""Decide whether fetched file content is an image, text, or undecodable binary."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ContentKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    BINARY = "binary"


# Image file extensions and their MIME types
IMAGE_EXTENSIONS = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "webp": "image/webp",
}

# Extensions always shown as text, whatever the bytes look like
TEXT_EXTENSIONS = {
    "js", "json", "css", "html", "md", "txt", "xml", "csv", "log",
    "markdown", "py", "ts", "tsx", "jsx", "yml", "yaml", "toml", "ini",
    "cfg", "sh", "rst", "go", "rs", "java", "c", "h", "cpp", "rb", "sql",
}

TEXT_CONTENT_TYPES = {
    "application/json",
    "application/xml",
    "application/javascript",
}

MARKDOWN_EXTENSIONS = {"md", "markdown"}


@dataclass(frozen=True)
class Classification:
    """Tagged classification result: Image(mime), Text, or Binary."""

    kind: ContentKind
    mime_type: str | None = None

    @property
    def is_image(self) -> bool:
        return self.kind is ContentKind.IMAGE

    @property
    def is_text(self) -> bool:
        return self.kind is ContentKind.TEXT

    @property
    def is_binary(self) -> bool:
        return self.kind is ContentKind.BINARY


def get_extension(path: str) -> str:
    """Lower-cased text after the last dot of the file name, or ''."""
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()


def is_markdown(path: str) -> bool:
    return get_extension(path) in MARKDOWN_EXTENSIONS


def _is_text_content_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type.startswith("text/") or media_type in TEXT_CONTENT_TYPES


def classify(path: str, data: bytes, content_type: str | None = None) -> Classification:
    """Classify file content in three ordered steps.

    1. A known image extension gives an image with the table's MIME type.
    2. A text content type declared by the response, or a known text
       extension, gives text.
    3. Otherwise the bytes must decode as strict UTF-8 to count as text;
       anything that does not is binary.
    """
    extension = get_extension(path)
    if extension in IMAGE_EXTENSIONS:
        return Classification(ContentKind.IMAGE, IMAGE_EXTENSIONS[extension])

    if _is_text_content_type(content_type) or extension in TEXT_EXTENSIONS:
        return Classification(ContentKind.TEXT)

    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return Classification(ContentKind.BINARY)
    return Classification(ContentKind.TEXT)


def decode_text(data: bytes) -> str:
    """Decode text content, replacing invalid sequences."""
    return data.decode("utf-8", errors="replace")
