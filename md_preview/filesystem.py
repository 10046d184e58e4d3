"""Filesystem helpers for md-preview."""

from __future__ import annotations

import os
import stat
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .constants import MARKDOWN_EXTENSIONS


def is_markdown_file(path: Path, extensions: tuple[str, ...] = MARKDOWN_EXTENSIONS) -> bool:
    """Check whether a path has a Markdown suffix (case-insensitive).

    Examples:
        is_markdown_file(Path("README.MD"))  # True
        is_markdown_file(Path("notes.txt"))  # False
    """
    return path.suffix.lower() in extensions


def contains_symlink(path: Path) -> bool:
    """Check whether a path or any parent directory is a symlink.

    Args:
        path: Path to inspect.

    Returns:
        bool: True when a symlink is encountered, otherwise False.

    Examples:
        contains_symlink(Path("/tmp/link/child"))
    """
    for candidate in (path, *path.parents):
        try:
            if candidate.is_symlink():
                return True
        except OSError:
            continue
    return False


def normalize_filepath(
    raw_path: str,
    base_dir: Path,
    extensions: tuple[str, ...] | None = MARKDOWN_EXTENSIONS,
) -> Path:
    """Resolve and validate a document path under a base directory.

    Args:
        raw_path: User-supplied path (absolute or relative).
        base_dir: Working directory that constrains allowed paths.
        extensions: Accepted suffixes; None accepts any suffix.

    Returns:
        Path: Absolute path to the document.

    Raises:
        ValueError: If the path does not exist, is not a regular file, is
            outside `base_dir`, uses an unsupported extension, or traverses a
            symlink.

    Examples:
        normalize_filepath("docs/README.md", Path.cwd())
        normalize_filepath("capture.ansi", Path.cwd(), extensions=None)
    """
    path = Path(raw_path).expanduser()

    if contains_symlink(path):
        error_message = f"Symlinks are not supported for security reasons: {path}"
        raise ValueError(error_message)

    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError as error:
        error_message = f"{path} does not exist."
        raise ValueError(error_message) from error
    except OSError as error:
        error_message = f"Error resolving {path}: {error}"
        raise ValueError(error_message) from error

    if not resolved.is_file():
        error_message = f"{resolved} is not a regular file."
        raise ValueError(error_message)

    try:
        resolved.relative_to(base_dir)
    except ValueError as error:
        error_message = f"{resolved} is outside of the working directory {base_dir}."
        raise ValueError(error_message) from error

    if extensions is not None and not is_markdown_file(resolved, extensions):
        error_message = f"{resolved} is not a Markdown file.\n"
        error_message += f"Supported extensions are: {', '.join(extensions)}"
        raise ValueError(error_message)

    return resolved


def collect_file_stat(filepath: Path) -> os.stat_result:
    """Return stat information for a file while disallowing symlinks.

    Args:
        filepath: Path to the file.

    Returns:
        os.stat_result: File metadata gathered without following symlinks.

    Raises:
        IOError: If the path is inaccessible, a symlink, or not a regular file.

    Examples:
        stat_result = collect_file_stat(Path("README.md"))
    """
    try:
        stat_result = os.stat(filepath, follow_symlinks=False)
    except OSError as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error

    if stat.S_ISLNK(stat_result.st_mode):
        error_message = f"Symlinks are not supported: {filepath}."
        raise IOError(error_message)

    if not stat.S_ISREG(stat_result.st_mode):
        error_message = f"{filepath} is not a regular file."
        raise IOError(error_message)

    return stat_result


def enforce_file_size(stat_result: os.stat_result, max_size: int, filepath: Path):
    """Guard against files that exceed the configured maximum size.

    Raises:
        IOError: If `stat_result.st_size` exceeds `max_size`.
    """
    if stat_result.st_size > max_size:
        error_message = f"{filepath} exceeds the maximum allowed size of {max_size} bytes."
        raise IOError(error_message)


def safe_read(filepath: Path) -> str:
    """Read a UTF-8 text file with consistent error handling.

    Undecodable bytes are replaced rather than rejected, since captured
    terminal output is not guaranteed to be valid UTF-8.

    Args:
        filepath: Path to the file.

    Returns:
        str: File content.

    Raises:
        IOError: If the path is missing, inaccessible, or not a file.
    """
    try:
        with open(filepath, "r", encoding="UTF-8", errors="replace") as handle:
            return handle.read()
    except (
        FileNotFoundError,
        PermissionError,
        IsADirectoryError,
        NotADirectoryError,
    ) as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error


@contextmanager
def temporary_document(text: str, directory: Path | None = None, suffix: str = ".md") -> Iterator[Path]:
    """Write document text to a temporary file for the renderer to read.

    The file is created next to the source document when `directory` is
    given, so relative links and images resolve the same way, and it is
    removed when the block exits, whether or not it raised.

    Args:
        text: Document content.
        directory: Directory for the temporary file; the system default when None.
        suffix: File suffix, kept so the renderer detects the format.

    Yields:
        Path: Location of the temporary file.

    Raises:
        IOError: If the file cannot be created or `text` cannot be encoded.

    Examples:
        with temporary_document("# Draft\\n", Path("docs")) as path:
            render(path)
    """
    temp_path: Path | None = None
    try:
        try:
            with tempfile.NamedTemporaryFile(
                mode="w", encoding="UTF-8", delete=False, dir=directory, suffix=suffix, prefix=".md-preview-"
            ) as tmp_file:
                temp_path = Path(tmp_file.name)
                tmp_file.write(text)
        except (OSError, UnicodeError) as error:
            error_message = f"Error writing temporary document: {error}"
            raise IOError(error_message) from error
        yield temp_path
    finally:
        if temp_path is not None:
            try:
                temp_path.unlink(missing_ok=True)
            except OSError:
                pass
