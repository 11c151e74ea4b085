"""
Vault documents: locating HQL blocks and rewriting document lines.

Documents are markdown files below the vault directory, addressed by their
path relative to it. Line ranges are 0-based and inclusive, matching the
section info hosts report for fenced code blocks.
"""

import re
from dataclasses import dataclass
from pathlib import Path

from core.config import QUERY_BLOCK_LANGUAGE, VAULT_DIR
from core.errors import RewriteError


@dataclass(frozen=True)
class QueryBlock:
    """A fenced HQL block inside a document."""

    line_start: int  # opening fence
    line_end: int  # closing fence
    source: str


@dataclass(frozen=True)
class BlockLocation:
    """Where an executing block lives, for write-back."""

    document_id: str
    line_start: int
    line_end: int


def split_lines(text: str) -> tuple[list[str], str, bool]:
    """
    Split a document into lines the way hosts number them.

    Only ``\\n`` ends a line; other Unicode line separators stay inside their
    line. A trailing newline does not start an extra line.

    Returns:
        (lines without line endings, newline style, has trailing newline)
    """
    newline = "\r\n" if "\r\n" in text else "\n"
    trailing_newline = text.endswith("\n")
    if trailing_newline:
        text = text[:-1]
    lines = text.split("\n")
    if newline == "\r\n":
        lines = [line[:-1] if line.endswith("\r") else line for line in lines]
    return lines, newline, trailing_newline


def find_query_blocks(text: str, language: str = QUERY_BLOCK_LANGUAGE) -> list[QueryBlock]:
    """
    Find fenced code blocks tagged with the query language.

    Unterminated blocks are ignored.
    """
    opening = re.compile(rf"^\s*(`{{3,}}|~{{3,}})\s*{re.escape(language)}\s*$")
    lines, _, _ = split_lines(text)
    blocks: list[QueryBlock] = []

    i = 0
    while i < len(lines):
        match = opening.match(lines[i])
        if not match:
            i += 1
            continue
        fence = match.group(1)
        for j in range(i + 1, len(lines)):
            if lines[j].strip() == fence:
                blocks.append(
                    QueryBlock(line_start=i, line_end=j, source="\n".join(lines[i + 1 : j]))
                )
                i = j
                break
        i += 1
    return blocks


class VaultDocumentRewriter:
    """
    Read-modify-write of vault documents.

    Not atomic with respect to other writers of the same file; the last write
    wins.
    """

    def __init__(self, vault_dir: Path = VAULT_DIR):
        self.vault_dir = Path(vault_dir)

    def resolve(self, document_id: str) -> Path:
        """Map a document id to a file inside the vault."""
        root = self.vault_dir.resolve()
        path = (root / document_id).resolve()
        if not path.is_relative_to(root):
            raise RewriteError(f"Document '{document_id}' is outside the vault.")
        if not path.is_file():
            raise RewriteError(f"Document '{document_id}' not found.")
        return path

    def read(self, document_id: str) -> str:
        """
        Read a document as UTF-8, line endings untouched.

        Raises:
            RewriteError: if the document is missing, unreadable or not UTF-8
        """
        path = self.resolve(document_id)
        try:
            with open(path, encoding="utf-8", newline="") as f:
                return f.read()
        except UnicodeDecodeError as e:
            raise RewriteError(f"Document '{document_id}' is not valid UTF-8.") from e
        except OSError as e:
            raise RewriteError(f"Could not read '{document_id}': {e.strerror or e}") from e

    def replace_lines(self, document_id: str, line_start: int, line_end: int, new_text: str):
        """
        Replace lines line_start..line_end (inclusive) with new_text.

        The document keeps its newline style (LF or CRLF) and trailing newline.

        Raises:
            RewriteError: if the document cannot be read or written, or the
                range is invalid
        """
        content = self.read(document_id)
        lines, newline, trailing_newline = split_lines(content)

        if line_start < 0 or line_end < line_start or line_end >= len(lines):
            raise RewriteError(
                f"Lines {line_start}-{line_end} are out of range for '{document_id}' "
                f"({len(lines)} lines)."
            )

        lines[line_start : line_end + 1] = new_text.split("\n")
        updated = newline.join(lines) + (newline if trailing_newline else "")
        try:
            with open(self.resolve(document_id), "w", encoding="utf-8", newline="") as f:
                f.write(updated)
        except OSError as e:
            raise RewriteError(f"Could not write '{document_id}': {e.strerror or e}") from e
