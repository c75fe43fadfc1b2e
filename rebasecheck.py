#!/usr/bin/env python3
"""
RebaseCheck

Dry-run verification for interactive rebases. Before `git rebase -i` rewrites
anything, RebaseCheck replays the patch of every picked commit against an
in-memory copy of the `onto` tree and reports the first commit whose patch
will not apply, together with every file and line that fails.

Features:
    - Reads the live rebase todo script (.git/rebase-merge/git-rebase-todo)
    - Rebuilds each picked commit's patch against its first parent
    - Places hunks with patch-style positional fuzz (nearest match wins,
      later positions preferred over earlier ones at equal distance)
    - Threads file state across the whole sequence, so line drift from
      earlier commits is accounted for
    - Stops at the first failing commit, exactly where the rebase would stop
    - Rich console output, plain text and JSON reports

Usage:
    python rebasecheck.py verify-rebase-interactive .git/rebase-merge/git-rebase-todo
    # or after installation:
    rebasecheck verify-rebase-interactive .git/rebase-merge/git-rebase-todo

Options:
    -v, --verbose             Show every touched file and hunk placement
    -r, --report FILE         Save a plain text report to FILE
    -j, --json-report FILE    Save a JSON report for CI/CD integration
    -t, --hunk-tolerance INT  Limit how far a hunk may drift (default: unlimited)
    -T, --timeout INT         Timeout for git operations in seconds (default: 30)
    -M, --max-file-size INT   Maximum blob size to load in MB (default: 100)
    -c, --no-color            Disable colored output

Exit Codes:
    0 - Every picked commit applies cleanly
    1 - Stopped at a commit whose patch does not apply
    2 - The script, the repository or a patch could not be read

Version: 0.1
"""

import argparse
import json
import re
import subprocess
import sys

from dataclasses import dataclass, field, asdict
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import cachetools
import chardet

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from unidiff import PatchSet
from unidiff.constants import (
    DEV_NULL,
    LINE_TYPE_ADDED,
    LINE_TYPE_CONTEXT,
    LINE_TYPE_EMPTY,
    LINE_TYPE_NO_NEWLINE,
    LINE_TYPE_REMOVED,
)
from unidiff.errors import UnidiffParseError

__version__ = "0.1.0"

# Global console instance for rich output
console = Console()


# ===== Error Information System =====

@dataclass
class ErrorInfo:
    """Structured error information for callers and reports."""
    code: str  # e.g., "UNKNOWN_REVISION", "GIT_TIMEOUT", "PARSE_ERROR"
    message: str
    suggestion: str
    context: Dict[str, Any] = field(default_factory=dict)
    recoverable: bool = True
    severity: str = "error"  # "error", "warning", "info"


ERROR_NOT_SCRIPT_FILE = "NOT_SCRIPT_FILE"
ERROR_FILE_NOT_FOUND = "FILE_NOT_FOUND"
ERROR_PARSE_ERROR = "PARSE_ERROR"
ERROR_NON_MONOTONIC_HUNKS = "NON_MONOTONIC_HUNKS"
ERROR_GIT_TIMEOUT = "GIT_TIMEOUT"
ERROR_GIT_COMMAND_FAILED = "GIT_COMMAND_FAILED"
ERROR_UNKNOWN_REVISION = "UNKNOWN_REVISION"
ERROR_MISSING_PARENT = "MISSING_PARENT"
ERROR_CONTENT_TOO_LARGE = "CONTENT_TOO_LARGE"
ERROR_INVALID_CONFIG = "INVALID_CONFIG"


class RebaseCheckError(Exception):
    """Base exception for RebaseCheck errors."""

    def __init__(self, message: str, error_info: Optional[ErrorInfo] = None):
        super().__init__(message)
        self.error_info = error_info


class PatchParseError(RebaseCheckError):
    """Error when a commit's diff cannot be turned into a change set."""

    pass


class NonMonotonicHunksError(PatchParseError):
    """Hunks of one file are not listed in file order."""

    pass


class GitCommandError(RebaseCheckError):
    """Error when git commands fail."""

    def __init__(self, cmd: List[str], message: str, error_info: Optional[ErrorInfo] = None):
        super().__init__(f"Git failed: {' '.join(cmd)} -> {message}", error_info)
        self.cmd = cmd


class RevisionResolutionError(GitCommandError):
    """A revision, its parent or one of its objects cannot be read."""

    pass


class NotScriptFileError(RebaseCheckError):
    """The given path is not an interactive rebase todo script."""

    pass


class ContentTooLargeError(RebaseCheckError):
    """A blob exceeds the configured size limit."""

    pass


# Configuration constants
DEFAULT_SUBPROCESS_TIMEOUT = 30  # seconds
MAX_FILE_SIZE_MB = 100  # Maximum blob size to load into memory
GIT_TIMEOUT_RETURNCODE = 124

REBASE_MERGE_DIR = "rebase-merge"
TODO_FILE_NAME = "git-rebase-todo"
ONTO_FILE_NAME = "onto"

EXIT_OK = 0
EXIT_STOPPED = 1
EXIT_INPUT_ERROR = 2

# File kinds of a single file entry in a change set
KIND_ADDITION = "addition"
KIND_DELETION = "deletion"
KIND_CHANGES = "changes"

# Per-file and per-patch outcome
STATUS_OK = "OK"
STATUS_FAILED = "FAILED"

# Outcome of a whole sequence
STATUS_COMPLETED = "COMPLETED"
STATUS_STOPPED = "STOPPED"

# Merge error codes
MERGE_UNAPPLIED_HUNK = "UNAPPLIED_HUNK"
MERGE_MODIFY_MISSING_FILE = "MODIFY_MISSING_FILE"
MERGE_ADD_EXISTING_FILE = "ADD_EXISTING_FILE"
MERGE_MULTI_HUNK_ADDITION = "MULTI_HUNK_ADDITION"

# Todo lines that replay a commit; "fixup -C <rev>" keeps the commit message
TODO_LINE_PATTERN = re.compile(
    r"^\s*(pick|p|reword|r|edit|e|squash|s|fixup|f)\s+(?:-[cC]\s+)?([^\s#]+)"
)
TODO_ACTION_ALIASES = {
    "p": "pick",
    "r": "reword",
    "e": "edit",
    "s": "squash",
    "f": "fixup",
}


def shorten_revision(revision: str, width: int = 12) -> str:
    """Abbreviate full object ids, leave symbolic names alone."""
    if re.fullmatch(r"[0-9a-f]{40}|[0-9a-f]{64}", revision):
        return revision[:width]
    return revision


# ===== Patch Model =====

@dataclass(frozen=True)
class Hunk:
    """One contiguous patch fragment.

    ``source`` holds the lines the fragment expects to find (removed and
    context lines), ``target`` the lines it leaves behind (added and context
    lines). Context lines sit at the same relative position on both sides.
    """

    source: Tuple[str, ...] = ()
    target: Tuple[str, ...] = ()

    @property
    def delta(self) -> int:
        """Net number of lines this hunk adds to a file."""
        return len(self.target) - len(self.source)


@dataclass
class FileInfo:
    """Patch information for one file of a change set."""

    kind: str  # KIND_ADDITION, KIND_DELETION or KIND_CHANGES
    hunks: List[Tuple[int, Hunk]] = field(default_factory=list)  # (predicted 0-based line, hunk)


@dataclass
class ChangeSet:
    """All per-file patch information of one revision."""

    revision: str
    files: Dict[str, FileInfo] = field(default_factory=dict)


def split_lines(text: str) -> List[str]:
    """Split file content into lines without their terminators.

    A final newline does not produce a trailing empty line, and a carriage
    return before a newline is dropped along with it.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def decode_content(raw: bytes) -> str:
    """Decode blob and diff bytes the same way so their lines compare equal."""
    return raw.decode("utf-8", errors="replace")


def _strip_terminator(value: str) -> str:
    if value.endswith("\n"):
        value = value[:-1]
    if value.endswith("\r"):
        value = value[:-1]
    return value


def hunk_from_lines(lines: Iterable[Any]) -> Hunk:
    """Build a Hunk from tagged diff lines (anything with line_type and value)."""
    source: List[str] = []
    target: List[str] = []

    for line in lines:
        line_type = line.line_type
        if line_type == LINE_TYPE_ADDED:
            target.append(_strip_terminator(line.value))
        elif line_type == LINE_TYPE_REMOVED:
            source.append(_strip_terminator(line.value))
        elif line_type == LINE_TYPE_CONTEXT:
            text = _strip_terminator(line.value)
            source.append(text)
            target.append(text)
        elif line_type == LINE_TYPE_EMPTY:
            source.append("")
            target.append("")
        elif line_type == LINE_TYPE_NO_NEWLINE:
            # Describes the previous line, adds nothing of its own; values
            # are compared without terminators, so the line matches either way
            continue
        else:
            raise PatchParseError(
                f"Unexpected diff line type {line_type!r}",
                ErrorInfo(
                    code=ERROR_PARSE_ERROR,
                    message=f"Unexpected diff line type {line_type!r}",
                    suggestion="Regenerate the diff with plain 'git diff' output",
                    context={"line_type": line_type},
                    recoverable=False,
                ),
            )

    return Hunk(source=tuple(source), target=tuple(target))


def predicted_source_line(kind: str, source_start: int, source_length: int) -> int:
    """Convert a hunk header's source start into a 0-based line index.

    Whole-file additions and deletions keep the reported value. Modifications
    are shifted from 1-based to 0-based, except pure insertions (empty source
    side) whose start already names the line they follow.
    """
    # "@@ -N,0" inserts after line N, which is index N
    if kind != KIND_CHANGES or source_length == 0:
        return source_start
    return source_start - 1


def file_kind(patched_file: Any) -> str:
    """Classify a diff entry from its file headers.

    Only /dev/null sides and git's "new file mode"/"deleted file mode"
    lines count. Filling an empty file or emptying a full one produces a
    single 0,0 hunk as well, but the file exists on both sides.
    """
    header = [str(line) for line in (patched_file.patch_info or [])]
    if patched_file.source_file == DEV_NULL or any(
        line.startswith("new file mode") for line in header
    ):
        return KIND_ADDITION
    if patched_file.target_file == DEV_NULL or any(
        line.startswith("deleted file mode") for line in header
    ):
        return KIND_DELETION
    return KIND_CHANGES


def _check_hunk_order(revision: str, path: str, hunks: List[Tuple[int, Hunk]]) -> None:
    previous = None
    for line, _ in hunks:
        if previous is not None and line < previous:
            raise NonMonotonicHunksError(
                f"Hunks for {path} in {revision} are out of order (line {line + 1} after {previous + 1})",
                ErrorInfo(
                    code=ERROR_NON_MONOTONIC_HUNKS,
                    message=f"Hunks for {path} are not in file order",
                    suggestion="The diff is corrupt; regenerate it from the repository",
                    context={"revision": revision, "path": path},
                    recoverable=False,
                ),
            )
        previous = line


def build_changeset(revision: str, diff_text: str) -> ChangeSet:
    """Parse unified diff text into the ChangeSet of one revision.

    Args:
        revision: Revision the diff belongs to (kept for reporting)
        diff_text: Unified diff text, as produced by ``git diff``

    Returns:
        ChangeSet: Per-file hunks, keyed and ordered by path

    Raises:
        PatchParseError: The diff is malformed, lists a path twice, or has
            hunks out of file order
    """
    try:
        patch_set = PatchSet(diff_text)
    except UnidiffParseError as e:
        raise PatchParseError(
            f"Could not parse diff of {revision}: {e}",
            ErrorInfo(
                code=ERROR_PARSE_ERROR,
                message=f"Malformed diff for {revision}: {e}",
                suggestion="Check that the commit's diff can be shown with 'git show'",
                context={"revision": revision},
                recoverable=False,
            ),
        ) from e

    files: Dict[str, FileInfo] = {}
    for patched_file in patch_set:
        kind = file_kind(patched_file)

        hunks = [
            (
                predicted_source_line(kind, diff_hunk.source_start, diff_hunk.source_length),
                hunk_from_lines(diff_hunk),
            )
            for diff_hunk in patched_file
        ]

        # Binary and mode-only changes carry nothing to place
        if kind == KIND_CHANGES and not hunks:
            continue

        path = patched_file.path
        if path in files:
            raise PatchParseError(
                f"Diff of {revision} lists {path} more than once",
                ErrorInfo(
                    code=ERROR_PARSE_ERROR,
                    message=f"Duplicate file entry {path}",
                    suggestion="Regenerate the diff without rename or copy detection",
                    context={"revision": revision, "path": path},
                    recoverable=False,
                ),
            )

        _check_hunk_order(revision, path, hunks)
        files[path] = FileInfo(kind=kind, hunks=hunks)

    return ChangeSet(revision=revision, files=dict(sorted(files.items())))


# ===== Fuzzy Locator =====

def iter_fuzz_offsets(limit: int) -> Iterator[int]:
    """Yield 0, +1, -1, +2, -2, ... for distances below ``limit``.

    Offset 0 is always yielded, even when ``limit`` is 0.
    """
    yield 0
    for distance in range(1, limit):
        yield distance
        yield -distance


def _window_matches(content: Sequence[str], source: Sequence[str], start: int) -> bool:
    if start < 0 or start + len(source) > len(content):
        return False
    for i, line in enumerate(source):
        if content[start + i] != line:
            return False
    return True


def locate_hunk(
    content: Sequence[str],
    source: Sequence[str],
    pivot: int,
    tolerance: Optional[int] = None,
) -> Optional[int]:
    """Find where a hunk's source lines sit in ``content``.

    The search starts at ``pivot`` and widens one line at a time, trying the
    position after the pivot before the one before it. Only exact line
    matches count; the fuzz is positional only.

    Args:
        content: Current lines of the file
        source: Lines the hunk expects to find
        pivot: Predicted start line, already corrected for drift
        tolerance: Largest distance to try; None searches the whole file

    Returns:
        Optional[int]: Offset from the pivot of the first match, or None
    """
    limit = len(content)
    if tolerance is not None:
        limit = min(limit, tolerance + 1)

    for offset in iter_fuzz_offsets(limit):
        if _window_matches(content, source, pivot + offset):
            return offset
    return None


# ===== File Simulator =====

@dataclass(frozen=True)
class Unread:
    """File exists in the base tree; content not loaded yet."""

    content_id: str


@dataclass(frozen=True)
class Removed:
    """File does not exist at this point of the simulation."""

    pass


@dataclass
class Loaded:
    """File exists and its current lines are held in memory."""

    lines: List[str] = field(default_factory=list)


FileState = Union[Unread, Removed, Loaded]
FileSet = Dict[str, FileState]


@dataclass
class MergeError:
    """One reason a file of a patch could not be applied."""

    code: str  # MERGE_UNAPPLIED_HUNK, MERGE_MODIFY_MISSING_FILE, ...
    source_line: Optional[int] = None  # predicted 0-based line of the failing hunk
    message: str = ""


@dataclass
class MergeErrors:
    """Ordered (path, MergeError) pairs of one patch; non-empty means failure."""

    errors: List[Tuple[str, MergeError]] = field(default_factory=list)

    def add(self, path: str, error: MergeError) -> None:
        self.errors.append((path, error))

    def __iter__(self) -> Iterator[Tuple[str, MergeError]]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __bool__(self) -> bool:
        return bool(self.errors)


@dataclass
class HunkPlacement:
    """Where a hunk ended up relative to where it was expected."""

    source_line: int
    pivot: int
    position: int

    @property
    def offset(self) -> int:
        return self.position - self.pivot


@dataclass
class HunkApplication:
    """Outcome of applying the hunks of one file."""

    placements: List[HunkPlacement] = field(default_factory=list)
    error: Optional[MergeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def unapplied_hunk(source_line: int) -> MergeError:
    return MergeError(
        code=MERGE_UNAPPLIED_HUNK,
        source_line=source_line,
        message=f"hunk at line {source_line + 1} does not apply",
    )


def apply_hunks(
    content: List[str],
    hunks: Sequence[Tuple[int, Hunk]],
    tolerance: Optional[int] = None,
) -> HunkApplication:
    """Apply hunks to ``content`` in order, splicing in place.

    Each hunk's pivot is its predicted line plus the drift left by the hunks
    before it, independent of where those hunks were actually placed. The
    first hunk that cannot be placed stops the file.
    """
    application = HunkApplication()
    drift = 0

    for source_line, hunk in hunks:
        pivot = source_line + drift
        offset = locate_hunk(content, hunk.source, pivot, tolerance)
        if offset is None:
            application.error = unapplied_hunk(source_line)
            return application

        position = pivot + offset
        content[position:position + len(hunk.source)] = hunk.target
        application.placements.append(
            HunkPlacement(source_line=source_line, pivot=pivot, position=position)
        )
        drift += hunk.delta

    return application


@dataclass
class FileResult:
    """Result of applying one file entry of a patch."""

    path: str
    kind: str
    status: str = STATUS_OK
    placements: List[HunkPlacement] = field(default_factory=list)
    error: Optional[MergeError] = None


@dataclass
class PatchResult:
    """Result of applying one patch of the sequence."""

    revision: str
    index: int
    line_number: Optional[int] = None
    status: str = STATUS_OK
    file_results: List[FileResult] = field(default_factory=list)

    @property
    def merge_errors(self) -> MergeErrors:
        errors = MergeErrors()
        for file_result in self.file_results:
            if file_result.error is not None:
                errors.add(file_result.path, file_result.error)
        return errors


@dataclass
class SequenceResult:
    """Result of a whole verification run."""

    status: str
    total_count: int
    patch_results: List[PatchResult] = field(default_factory=list)
    failed_index: Optional[int] = None
    script_path: Optional[str] = None
    onto: Optional[str] = None

    @property
    def processed_count(self) -> int:
        return len(self.patch_results)

    @property
    def failed_patch(self) -> Optional[PatchResult]:
        if self.failed_index is None:
            return None
        return self.patch_results[self.failed_index]


# ===== Configuration =====

@dataclass
class Config:
    """Configuration for RebaseCheck with validation.

    Presets:
    - Config.strict_mode(): hunks must sit exactly where predicted
    - Config.lenient_mode(): unlimited positional fuzz (the default)
    """

    script_file: str = ""
    verbose: bool = False
    report_file: Optional[str] = None
    json_report_file: Optional[str] = None
    no_color: bool = False
    hunk_tolerance: Optional[int] = None
    timeout: int = field(default=DEFAULT_SUBPROCESS_TIMEOUT)
    max_file_size: int = field(default=MAX_FILE_SIZE_MB)

    def __post_init__(self):
        """Validate configuration values."""
        if self.hunk_tolerance is not None and self.hunk_tolerance < 0:
            raise ValueError(
                f"Hunk tolerance must be non-negative, got {self.hunk_tolerance}"
            )

        if self.timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {self.timeout}")

        if self.max_file_size <= 0:
            raise ValueError(
                f"Max file size must be positive, got {self.max_file_size}"
            )

    @classmethod
    def strict_mode(cls, **overrides) -> "Config":
        """Exact-position mode.

        A hunk only applies at its predicted line (after drift), which
        flags every commit that git would have to place with an offset.

        Example:
            config = Config.strict_mode(verbose=True)
        """
        defaults: Dict[str, Any] = {"hunk_tolerance": 0}
        defaults.update(overrides)
        return cls(**defaults)

    @classmethod
    def lenient_mode(cls, **overrides) -> "Config":
        """Unlimited positional fuzz with a longer git timeout."""
        defaults: Dict[str, Any] = {"hunk_tolerance": None, "timeout": 60}
        defaults.update(overrides)
        return cls(**defaults)

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "Config":
        """Create Config from parsed command line arguments."""
        return cls(
            script_file=args.script_file,
            verbose=getattr(args, "verbose", False),
            report_file=getattr(args, "report", None),
            json_report_file=getattr(args, "json_report", None),
            no_color=getattr(args, "no_color", False),
            hunk_tolerance=getattr(args, "hunk_tolerance", None),
            timeout=getattr(args, "timeout", DEFAULT_SUBPROCESS_TIMEOUT),
            max_file_size=getattr(args, "max_file_size", MAX_FILE_SIZE_MB),
        )


# Rich-based styling functions
def print_colored(text: str, color: str, **kwargs):
    """Print colored message using Rich markup."""
    console.print(f"[bold {color}]{text}[/bold {color}]", **kwargs)


def print_warning(text: str, **kwargs):
    """Print warning message in yellow."""
    print_colored(text, "yellow", **kwargs)


def print_error(text: str, **kwargs):
    """Print error message in red."""
    print_colored(text, "red", **kwargs)


def print_info(text: str, **kwargs):
    """Print info message in blue."""
    print_colored(text, "blue", **kwargs)


def print_header(text: str, **kwargs):
    """Print header message in cyan."""
    print_colored(text, "cyan", **kwargs)


def detect_file_encoding(file_path: str) -> str:
    """Detect file encoding using chardet.

    Results are cached per path, size and modification time, so a file
    rewritten in another encoding is detected again.
    """
    path = Path(file_path)
    try:
        stat = path.stat()
    except OSError:
        return "utf-8"
    if not path.is_file():
        return "utf-8"
    return _detect_encoding_cached(str(path), stat.st_size, stat.st_mtime_ns)


@lru_cache(maxsize=128)
def _detect_encoding_cached(file_path: str, size: int, mtime_ns: int) -> str:
    try:
        with open(file_path, "rb") as f:
            raw_data = f.read(8192)
    except OSError:
        return "utf-8"

    detected = chardet.detect(raw_data)
    if detected and detected["encoding"] and detected["confidence"] > 0.7:
        encoding = detected["encoding"].lower()
        return {"utf8": "utf-8", "utf-8-sig": "utf-8"}.get(encoding, encoding)

    return "utf-8"


def read_file_with_encoding(file_path: Union[str, Path]) -> str:
    """Read a text file with automatic encoding detection."""
    path_obj = Path(file_path)
    encoding = detect_file_encoding(str(path_obj))
    return path_obj.read_text(encoding=encoding, errors="replace")


# ===== Git Access =====

@dataclass
class GitResult:
    """Lightweight wrapper for git command results."""

    ok: bool
    stdout: str
    stderr: str
    returncode: int
    raw_stdout: bytes = b""


class GitRunner:
    """Git command runner with result caching, timeouts and error capture."""

    def __init__(
        self,
        repo_path: Union[str, Path] = ".",
        timeout: int = DEFAULT_SUBPROCESS_TIMEOUT,
        cache_ttl: int = 300,
        git_dir: Optional[Union[str, Path]] = None,
    ):
        self.repo_path = Path(repo_path)
        self.git_dir = Path(git_dir).resolve() if git_dir is not None else None
        self.timeout = timeout
        self._result_cache: cachetools.TTLCache[str, GitResult] = cachetools.TTLCache(
            maxsize=256, ttl=cache_ttl
        )
        self._cache_stats = {
            "hits": 0,
            "misses": 0,
            "total_requests": 0,
        }

    def _base_command(self) -> List[str]:
        if self.git_dir is not None:
            return ["git", f"--git-dir={self.git_dir}"]
        return ["git"]

    def run_git_command(self, args: List[str], use_cache: bool = True) -> GitResult:
        """Run a git command, returning a GitResult instead of raising."""
        cmd = self._base_command() + args
        cache_key = f"{self.repo_path}:{' '.join(cmd)}"

        self._cache_stats["total_requests"] += 1

        if use_cache and cache_key in self._result_cache:
            self._cache_stats["hits"] += 1
            return self._result_cache[cache_key]

        if use_cache:
            self._cache_stats["misses"] += 1

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                cwd=self.repo_path,
                timeout=self.timeout,
                check=False,  # Don't raise on non-zero exit
            )
        except subprocess.TimeoutExpired:
            console.print(f"[red]Warning:[/red] Git command timed out: {escape(' '.join(cmd))}")
            return GitResult(
                ok=False,
                stdout="",
                stderr=f"Command timed out after {self.timeout}s",
                returncode=GIT_TIMEOUT_RETURNCODE,
            )
        except (subprocess.SubprocessError, OSError) as e:
            console.print(
                f"[red]Warning:[/red] Git command failed: {escape(' '.join(cmd))}: {escape(str(e))}"
            )
            return GitResult(ok=False, stdout="", stderr=str(e), returncode=1)

        stdout = decode_content(result.stdout)
        git_result = GitResult(
            ok=result.returncode == 0,
            stdout=stdout,
            stderr=decode_content(result.stderr),
            returncode=result.returncode,
            raw_stdout=result.stdout,
        )

        # Only successful results are worth remembering
        if use_cache and git_result.ok:
            self._result_cache[cache_key] = git_result

        return git_result

    def get_cache_stats(self) -> Dict[str, Union[int, float]]:
        """Get cache statistics."""
        total_requests = self._cache_stats["total_requests"]
        hit_ratio = (
            self._cache_stats["hits"] / total_requests if total_requests > 0 else 0.0
        )

        return {
            "cached_entries": len(self._result_cache),
            "maxsize": self._result_cache.maxsize,
            "ttl": self._result_cache.ttl,
            "cache_hits": self._cache_stats["hits"],
            "cache_misses": self._cache_stats["misses"],
            "cache_hit_ratio": hit_ratio,
            "total_requests": total_requests,
        }


class GitObjectStore:
    """Read-only access to the revisions and blobs of one repository."""

    def __init__(
        self,
        git_dir: Union[str, Path],
        timeout: int = DEFAULT_SUBPROCESS_TIMEOUT,
        max_file_size_mb: int = MAX_FILE_SIZE_MB,
    ):
        self.git_dir = Path(git_dir)
        self.max_file_size_mb = max_file_size_mb
        self.git_runner = GitRunner(self.git_dir, timeout, git_dir=self.git_dir)
        self._tree_cache: cachetools.LRUCache[str, Dict[str, str]] = cachetools.LRUCache(
            maxsize=16
        )

    def _run(self, args: List[str], use_cache: bool = True) -> GitResult:
        result = self.git_runner.run_git_command(args, use_cache=use_cache)
        if not result.ok:
            timed_out = result.returncode == GIT_TIMEOUT_RETURNCODE
            message = result.stderr.strip() or f"exit status {result.returncode}"
            raise RevisionResolutionError(
                ["git"] + args,
                message,
                ErrorInfo(
                    code=ERROR_GIT_TIMEOUT if timed_out else ERROR_GIT_COMMAND_FAILED,
                    message=message,
                    suggestion=(
                        "Increase the timeout with --timeout"
                        if timed_out
                        else "Check that the repository is intact ('git fsck')"
                    ),
                    context={"args": args, "git_dir": str(self.git_dir)},
                    recoverable=timed_out,
                ),
            )
        return result

    def resolve_reference(self, name: str) -> str:
        """Resolve a revision name to a full commit id."""
        args = ["rev-parse", "--verify", "--quiet", f"{name}^{{commit}}"]
        result = self.git_runner.run_git_command(args)
        commit = result.stdout.strip()
        if not result.ok or not commit:
            raise RevisionResolutionError(
                ["git"] + args,
                f"unknown revision {name!r}",
                ErrorInfo(
                    code=ERROR_UNKNOWN_REVISION,
                    message=f"Revision {name!r} does not name a commit",
                    suggestion="Check the todo script for typos or commits that were garbage collected",
                    context={"revision": name},
                    recoverable=False,
                ),
            )
        return commit

    def list_files(self, revision: str) -> Dict[str, str]:
        """Map every blob path of a revision's tree to its object id."""
        if revision in self._tree_cache:
            return dict(self._tree_cache[revision])

        result = self._run(["ls-tree", "-r", "-z", "--full-tree", revision])
        files: Dict[str, str] = {}
        for entry in result.stdout.split("\0"):
            if not entry:
                continue
            meta, _, path = entry.partition("\t")
            parts = meta.split()
            # Submodules show up as "commit" entries and have no content here
            if len(parts) == 3 and parts[1] == "blob":
                files[path] = parts[2]

        self._tree_cache[revision] = files
        return dict(files)

    def read_content(self, content_id: str) -> bytes:
        """Read the raw bytes of a blob."""
        result = self._run(["cat-file", "blob", content_id], use_cache=False)
        size_mb = len(result.raw_stdout) / (1024 * 1024)
        if size_mb > self.max_file_size_mb:
            raise ContentTooLargeError(
                f"Blob {content_id} is too large ({size_mb:.1f}MB > {self.max_file_size_mb}MB)",
                ErrorInfo(
                    code=ERROR_CONTENT_TOO_LARGE,
                    message=f"Blob {content_id} exceeds {self.max_file_size_mb}MB",
                    suggestion="Raise the limit with --max-file-size",
                    context={"content_id": content_id, "size_mb": round(size_mb, 1)},
                ),
            )
        return result.raw_stdout

    def diff_between(self, old_revision: str, new_revision: str) -> str:
        """Unified diff between two revisions, without rename detection."""
        result = self._run(
            [
                "-c",
                "core.quotePath=false",
                "diff",
                "--no-color",
                "--no-ext-diff",
                "--no-textconv",
                "--no-renames",
                "--src-prefix=a/",
                "--dst-prefix=b/",
                "-U3",
                old_revision,
                new_revision,
            ]
        )
        return result.stdout

    def parents_of(self, revision: str) -> List[str]:
        """Parent commit ids of a revision, first parent first."""
        result = self._run(["rev-list", "--parents", "-n", "1", revision])
        return result.stdout.split()[1:]


def fileset_from_revision(store: GitObjectStore, revision: str) -> FileSet:
    """Start a simulation: every blob of the revision's tree, unread."""
    return {path: Unread(oid) for path, oid in store.list_files(revision).items()}


def changeset_for_commit(store: GitObjectStore, reference: str) -> ChangeSet:
    """Build the ChangeSet a commit introduces on top of its first parent."""
    commit = store.resolve_reference(reference)
    parents = store.parents_of(commit)
    if not parents:
        raise RevisionResolutionError(
            ["git", "rev-list", "--parents", "-n", "1", commit],
            f"{reference} has no parent commit",
            ErrorInfo(
                code=ERROR_MISSING_PARENT,
                message=f"Commit {reference} is a root commit",
                suggestion="Root commits cannot be replayed as patches; drop them from the script",
                context={"revision": reference},
                recoverable=False,
            ),
        )

    diff_text = store.diff_between(parents[0], commit)
    return build_changeset(reference, diff_text)


# ===== Rebase Script =====

@dataclass
class TodoEntry:
    """A todo line that replays a commit."""

    line_number: int  # 1-based
    action: str
    revision: str


@dataclass
class RebaseScript:
    """An interactive rebase in progress."""

    path: Path
    git_dir: Path
    onto: str
    entries: List[TodoEntry] = field(default_factory=list)


def parse_rebase_todo(lines: Iterable[str]) -> List[TodoEntry]:
    """Pick out the commit-replaying lines of a todo script.

    Comments, blank lines and commands such as exec, break, drop or label
    are ignored.
    """
    entries = []
    for line_number, line in enumerate(lines, start=1):
        match = TODO_LINE_PATTERN.match(line)
        if not match:
            continue
        action = TODO_ACTION_ALIASES.get(match.group(1), match.group(1))
        entries.append(TodoEntry(line_number=line_number, action=action, revision=match.group(2)))
    return entries


def load_rebase_script(script_file: Union[str, Path]) -> RebaseScript:
    """Load a todo script together with the rebase's onto revision.

    Raises:
        NotScriptFileError: The path is not .../rebase-merge/git-rebase-todo
            or the onto file is empty
        FileNotFoundError: The script or its onto file is missing
    """
    script_path = Path(script_file)
    if script_path.name != TODO_FILE_NAME or script_path.parent.name != REBASE_MERGE_DIR:
        raise NotScriptFileError(
            f"Not an interactive rebase script: {script_path}",
            ErrorInfo(
                code=ERROR_NOT_SCRIPT_FILE,
                message=f"{script_path} is not a git-rebase-todo file",
                suggestion=f"Pass the path of .git/{REBASE_MERGE_DIR}/{TODO_FILE_NAME}",
                context={"script_file": str(script_path)},
                recoverable=False,
            ),
        )

    if not script_path.is_file():
        raise FileNotFoundError(f"Rebase script not found: {script_path}")

    onto = read_file_with_encoding(script_path.parent / ONTO_FILE_NAME).strip()
    if not onto:
        raise NotScriptFileError(
            f"Rebase has no onto revision: {script_path.parent / ONTO_FILE_NAME}",
            ErrorInfo(
                code=ERROR_NOT_SCRIPT_FILE,
                message="The onto file of the rebase is empty",
                suggestion="Restart the interactive rebase",
                context={"script_file": str(script_path)},
                recoverable=False,
            ),
        )

    entries = parse_rebase_todo(read_file_with_encoding(script_path).splitlines())
    return RebaseScript(
        path=script_path,
        git_dir=script_path.parent.parent,
        onto=onto,
        entries=entries,
    )


# ===== Sequence Driver =====

class RebaseVerifier:
    """Replays change sets against a simulated file tree."""

    def __init__(
        self,
        store: Optional[GitObjectStore] = None,
        hunk_tolerance: Optional[int] = None,
        verbose: bool = False,
    ):
        self.store = store
        self.hunk_tolerance = hunk_tolerance
        self.verbose = verbose

    def verify_sequence(
        self, commits: Sequence[Tuple[Optional[int], ChangeSet]], fileset: FileSet
    ) -> SequenceResult:
        """Apply change sets in order, stopping at the first that fails.

        Args:
            commits: (script line number, change set) pairs in rebase order
            fileset: Simulated tree; mutated to the state after the last
                applied change set

        Returns:
            SequenceResult: COMPLETED, or STOPPED with the failing patch last
        """
        total = len(commits)
        result = SequenceResult(status=STATUS_COMPLETED, total_count=total)

        for index, (line_number, changeset) in enumerate(commits):
            console.print(
                f"[bold blue]Processing [{index + 1}/{total}]:[/bold blue] "
                f"[cyan]{escape(changeset.revision)}[/cyan]"
            )

            patch_result = self.apply_changeset(fileset, changeset)
            patch_result.index = index
            patch_result.line_number = line_number
            result.patch_results.append(patch_result)

            if patch_result.status == STATUS_FAILED:
                result.status = STATUS_STOPPED
                result.failed_index = index
                break

        return result

    def apply_changeset(self, fileset: FileSet, changeset: ChangeSet) -> PatchResult:
        """Apply every file of one change set; other files still run after a failure."""
        patch_result = PatchResult(revision=changeset.revision, index=0)

        for path, file_info in sorted(changeset.files.items()):
            file_result = self._apply_file(fileset, path, file_info)
            patch_result.file_results.append(file_result)
            if self.verbose:
                self._print_file_progress(file_result)

        if patch_result.merge_errors:
            patch_result.status = STATUS_FAILED
        return patch_result

    def _apply_file(self, fileset: FileSet, path: str, file_info: FileInfo) -> FileResult:
        state = fileset.get(path)

        if file_info.kind == KIND_DELETION:
            fileset[path] = Removed()
            return FileResult(path=path, kind=file_info.kind)

        if file_info.kind == KIND_ADDITION:
            if isinstance(state, (Unread, Loaded)):
                return self._failed(path, file_info, MergeError(
                    code=MERGE_ADD_EXISTING_FILE,
                    message="adding a file that already exists",
                ))
            if len(file_info.hunks) > 1:
                return self._failed(path, file_info, MergeError(
                    code=MERGE_MULTI_HUNK_ADDITION,
                    source_line=file_info.hunks[1][0],
                    message=f"file addition has {len(file_info.hunks)} hunks, expected one",
                ))
            lines = list(file_info.hunks[0][1].target) if file_info.hunks else []
            fileset[path] = Loaded(lines)
            return FileResult(path=path, kind=file_info.kind)

        if file_info.kind == KIND_CHANGES:
            if state is None or isinstance(state, Removed):
                return self._failed(path, file_info, MergeError(
                    code=MERGE_MODIFY_MISSING_FILE,
                    message="modifying nonexistent file",
                ))
            if isinstance(state, Unread):
                state = self._load(state)
                fileset[path] = state

            application = apply_hunks(state.lines, file_info.hunks, self.hunk_tolerance)
            file_result = FileResult(
                path=path, kind=file_info.kind, placements=application.placements
            )
            if not application.ok:
                file_result.status = STATUS_FAILED
                file_result.error = application.error
            return file_result

        raise ValueError(f"Unknown file kind: {file_info.kind}")

    def _failed(self, path: str, file_info: FileInfo, error: MergeError) -> FileResult:
        return FileResult(path=path, kind=file_info.kind, status=STATUS_FAILED, error=error)

    def _load(self, state: Unread) -> Loaded:
        if self.store is None:
            raise RebaseCheckError(
                f"No object store to read {state.content_id} from"
            )
        return Loaded(split_lines(decode_content(self.store.read_content(state.content_id))))

    def _print_file_progress(self, file_result: FileResult) -> None:
        path = escape(file_result.path)
        if file_result.error is not None:
            console.print(f"  [bold red][X][/bold red] {path} [dim]{escape(file_result.error.message)}[/dim]")
            return

        console.print(f"  [green][{file_result.kind[0].upper()}][/green] {path}")
        for placement in file_result.placements:
            if placement.offset:
                console.print(
                    f"      [dim]|- hunk at line {placement.source_line + 1} "
                    f"applied with offset {placement.offset:+d}[/dim]"
                )


def verify_rebase_interactive(
    script_file: Union[str, Path], config: Optional[Config] = None
) -> SequenceResult:
    """Verify an interactive rebase in progress.

    All change sets are built before the simulation starts, so a bad
    revision or a malformed diff aborts the run before any patch is applied.

    Raises:
        RebaseCheckError: The script, a revision or a diff could not be read
        OSError: The script or onto file could not be read
    """
    if config is None:
        config = Config(script_file=str(script_file))

    script = load_rebase_script(script_file)
    if not script.entries:
        print_warning(f"No commits to replay in {escape(str(script.path))}")

    store = GitObjectStore(
        script.git_dir, timeout=config.timeout, max_file_size_mb=config.max_file_size
    )

    onto = store.resolve_reference(script.onto)
    fileset = fileset_from_revision(store, onto)

    commits: List[Tuple[Optional[int], ChangeSet]] = []
    for entry in script.entries:
        commits.append((entry.line_number, changeset_for_commit(store, entry.revision)))

    verifier = RebaseVerifier(
        store=store, hunk_tolerance=config.hunk_tolerance, verbose=config.verbose
    )
    result = verifier.verify_sequence(commits, fileset)
    result.script_path = str(script.path)
    result.onto = onto
    return result


# ===== Reporting =====

def format_merge_error(path: str, error: MergeError) -> str:
    """One-line description of a merge error."""
    return f"{path}: {error.message or error.code}"


class ReportGenerator:
    """Generates verification reports."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def failure_lines(self, result: SequenceResult) -> List[str]:
        """Compiler-style lines (script:line: error: ...) for the failing patch."""
        patch = result.failed_patch
        if patch is None:
            return []

        location = result.script_path or "<script>"
        if patch.line_number is not None:
            location = f"{location}:{patch.line_number}"

        return [
            f"{location}: error: {patch.revision}: {format_merge_error(path, error)}"
            for path, error in patch.merge_errors
        ]

    def generate_console_report(self, result: SequenceResult) -> None:
        """Print a summary and, for a stopped run, every failing file."""
        console.print()
        console.print(
            Panel(
                "[bold white]Interactive Rebase Verification[/bold white]",
                style="bold cyan",
                padding=(0, 2),
            )
        )

        summary = Table(show_header=False, box=None, padding=(0, 1))
        summary.add_column("Label", style="dim")
        summary.add_column("Value")
        if result.script_path:
            summary.add_row("Script:", f"[white]{escape(result.script_path)}[/white]")
        if result.onto:
            summary.add_row("Onto:", f"[bright_cyan]{shorten_revision(result.onto)}[/bright_cyan]")
        verified = result.processed_count - (1 if result.failed_patch else 0)
        summary.add_row(
            "Commits:",
            f"[bold magenta]{verified}[/bold magenta] of "
            f"[bold magenta]{result.total_count}[/bold magenta] verified",
        )
        console.print(summary)
        console.print()

        if self.verbose and result.patch_results:
            patches = Table(box=None, padding=(0, 1))
            patches.add_column("#", style="dim")
            patches.add_column("Line", style="dim")
            patches.add_column("Commit")
            patches.add_column("Status")
            for patch_result in result.patch_results:
                style = "bold green" if patch_result.status == STATUS_OK else "bold red"
                patches.add_row(
                    str(patch_result.index + 1),
                    str(patch_result.line_number or ""),
                    f"[bright_cyan]{escape(patch_result.revision)}[/bright_cyan]",
                    f"[{style}]{patch_result.status}[/{style}]",
                )
            console.print(patches)
            console.print()

        patch = result.failed_patch
        if patch is None:
            console.print(
                Panel(
                    "[bold white] [SUCCESS] [/bold white] All commits apply cleanly.",
                    style="bold green",
                    padding=(0, 1),
                )
            )
            console.print()
            return

        for line in self.failure_lines(result):
            console.print(f"[red]{escape(line)}[/red]")

        skipped = result.total_count - result.processed_count
        message = (
            f"[bold white] [STOPPED] [/bold white] Commit [bright_cyan]{escape(patch.revision)}[/bright_cyan] "
            f"({patch.index + 1}/{result.total_count}) will not apply"
        )
        if skipped:
            message += f"; {skipped} later commit(s) not checked"
        console.print()
        console.print(Panel(message, style="bold red", padding=(0, 1)))
        console.print()

    def generate_file_report(self, result: SequenceResult, output_file: str) -> None:
        """Write a plain text report."""
        with open(output_file, "w", encoding="utf-8") as f:
            f.write("Interactive Rebase Verification Report\n")
            f.write("=" * 50 + "\n\n")
            f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
            if result.script_path:
                f.write(f"Script: {result.script_path}\n")
            if result.onto:
                f.write(f"Onto: {result.onto}\n")
            f.write(f"Status: {result.status}\n")
            f.write(f"Commits processed: {result.processed_count}/{result.total_count}\n\n")

            for patch in result.patch_results:
                f.write(f"[{patch.index + 1}/{result.total_count}] {patch.revision}: {patch.status}\n")
                if patch.line_number is not None:
                    f.write(f"  Script line: {patch.line_number}\n")
                for file_result in patch.file_results:
                    symbol = "[+]" if file_result.status == STATUS_OK else "[-]"
                    f.write(f"  {symbol} {file_result.path} ({file_result.kind})\n")
                    if file_result.error is not None:
                        f.write(f"    Error: {file_result.error.code}: {file_result.error.message}\n")
                    for placement in file_result.placements:
                        if placement.offset:
                            f.write(
                                f"    Hunk at line {placement.source_line + 1} "
                                f"applied with offset {placement.offset:+d}\n"
                            )
                f.write("\n")

            failures = self.failure_lines(result)
            if failures:
                f.write("-" * 50 + "\n")
                for line in failures:
                    f.write(line + "\n")

        console.print(
            f"\n[bold green][SAVED][/bold green] [bold white]Report saved to:[/bold white] "
            f"[bright_cyan]{escape(output_file)}[/bright_cyan]"
        )

    def generate_json_report(self, result: SequenceResult, output_file: str) -> None:
        """Write a JSON report for CI/CD integration."""
        data = asdict(result)
        data["processed_count"] = result.processed_count
        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)
        console.print(
            f"\n[bold green][SAVED][/bold green] [bold white]JSON report saved to:[/bold white] "
            f"[bright_cyan]{escape(output_file)}[/bright_cyan]"
        )


def _error_info_for(error: Exception) -> ErrorInfo:
    if isinstance(error, RebaseCheckError) and error.error_info is not None:
        return error.error_info
    if isinstance(error, FileNotFoundError):
        return ErrorInfo(
            code=ERROR_FILE_NOT_FOUND,
            message=str(error),
            suggestion="Run this while an interactive rebase is in progress",
            recoverable=False,
        )
    return ErrorInfo(
        code=ERROR_GIT_COMMAND_FAILED,
        message=str(error),
        suggestion="Check that the repository is accessible",
        context={"error_type": type(error).__name__},
        recoverable=False,
    )


def run_verification(
    script_file: str,
    verbose: bool = False,
    report_file: Optional[str] = None,
    json_report_file: Optional[str] = None,
    hunk_tolerance: Optional[int] = None,
    timeout: int = DEFAULT_SUBPROCESS_TIMEOUT,
    max_file_size: int = MAX_FILE_SIZE_MB,
) -> Dict[str, Any]:
    """Verify a rebase script and return structured results.

    Args:
        script_file: Path of .git/rebase-merge/git-rebase-todo
        verbose: Print every touched file and hunk placement
        report_file: Save a plain text report
        json_report_file: Save a JSON report
        hunk_tolerance: Largest positional fuzz to allow (None: unlimited)
        timeout: Timeout for git operations in seconds
        max_file_size: Maximum blob size to load in MB

    Returns:
        Dict with "success", the run status and, on failure, either the
        failing commit or "error_info"
    """
    try:
        config = Config(
            script_file=script_file,
            verbose=verbose,
            report_file=report_file,
            json_report_file=json_report_file,
            hunk_tolerance=hunk_tolerance,
            timeout=timeout,
            max_file_size=max_file_size,
        )
    except ValueError as e:
        error_info = ErrorInfo(
            code=ERROR_INVALID_CONFIG,
            message=str(e),
            suggestion="Fix the configuration value and retry",
            recoverable=True,
        )
        return {"success": False, "error": str(e), "error_info": asdict(error_info)}

    try:
        result = verify_rebase_interactive(script_file, config)
    except (RebaseCheckError, OSError) as e:
        return {
            "success": False,
            "error": str(e),
            "error_info": asdict(_error_info_for(e)),
        }

    report_gen = ReportGenerator(verbose=config.verbose)
    if config.report_file:
        report_gen.generate_file_report(result, config.report_file)
    if config.json_report_file:
        report_gen.generate_json_report(result, config.json_report_file)

    failed = result.failed_patch
    return {
        "success": result.status == STATUS_COMPLETED,
        "status": result.status,
        "total_commits": result.total_count,
        "processed_commits": result.processed_count,
        "failed_commit": (
            {
                "revision": failed.revision,
                "index": failed.index,
                "line_number": failed.line_number,
                "errors": [
                    {"path": path, **asdict(error)} for path, error in failed.merge_errors
                ],
            }
            if failed is not None
            else None
        ),
        "failure_lines": report_gen.failure_lines(result),
    }


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="rebasecheck",
        description="RebaseCheck - dry-run verification of interactive rebases",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        epilog="""
Examples:
  rebasecheck verify-rebase-interactive .git/rebase-merge/git-rebase-todo
  rebasecheck verify-rebase-interactive -v .git/rebase-merge/git-rebase-todo
  rebasecheck verify-rebase-interactive -t 0 .git/rebase-merge/git-rebase-todo   # exact positions only
  rebasecheck verify-rebase-interactive -j report.json .git/rebase-merge/git-rebase-todo

Run it while an interactive rebase is paused (after an 'edit' or 'break'
line, or from a sequence editor wrapper) to check the remaining todo list.
        """,
    )
    parser.add_argument(
        "-c",
        "--no-color",
        action="store_true",
        help="Disable colored output (useful for logging or CI environments)",
    )
    parser.add_argument("--version", action="version", version=f"RebaseCheck v{__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.add_parser("version", help="Print the version and exit")

    verify = subparsers.add_parser(
        "verify-rebase-interactive",
        help="Check that every commit of a rebase todo script applies",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    verify.add_argument(
        "script_file",
        metavar="SCRIPT_FILE",
        help="Path of .git/rebase-merge/git-rebase-todo",
    )
    verify.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show every touched file and hunk placement",
    )
    verify.add_argument(
        "-r",
        "--report",
        metavar="FILE",
        help="Save a plain text report to the specified file",
    )
    verify.add_argument(
        "-j",
        "--json-report",
        metavar="FILE",
        help="Save a JSON report for CI/CD integration",
    )
    verify.add_argument(
        "-t",
        "--hunk-tolerance",
        type=int,
        default=None,
        metavar="INT",
        help="Largest distance in lines a hunk may be moved from its predicted position; unlimited when omitted",
    )
    verify.add_argument(
        "-T",
        "--timeout",
        type=int,
        default=DEFAULT_SUBPROCESS_TIMEOUT,
        metavar="SECONDS",
        help="Timeout for git operations in seconds",
    )
    verify.add_argument(
        "-M",
        "--max-file-size",
        type=int,
        default=MAX_FILE_SIZE_MB,
        metavar="MB",
        help="Maximum blob size to load in megabytes",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the rebase verification script."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure console based on arguments
    global console
    console = Console(no_color=args.no_color)

    if args.command == "version":
        console.print(f"RebaseCheck v{__version__}")
        return EXIT_OK

    if args.command is None:
        parser.print_help()
        return EXIT_INPUT_ERROR

    try:
        config = Config.from_args(args)
    except ValueError as e:
        print_error(escape(str(e)))
        return EXIT_INPUT_ERROR

    print_header(f"RebaseCheck v{__version__}")
    if config.hunk_tolerance is not None:
        print_info(f"Hunk tolerance: {config.hunk_tolerance} line(s)")

    try:
        result = verify_rebase_interactive(config.script_file, config)
    except (RebaseCheckError, OSError) as e:
        error_info = _error_info_for(e)
        print_error(escape(str(e)))
        console.print(f"[dim]Suggestion: {escape(error_info.suggestion)}[/dim]")
        return EXIT_INPUT_ERROR

    report_generator = ReportGenerator(verbose=config.verbose)
    report_generator.generate_console_report(result)

    if config.report_file:
        report_generator.generate_file_report(result, config.report_file)

    if config.json_report_file:
        report_generator.generate_json_report(result, config.json_report_file)

    return EXIT_OK if result.status == STATUS_COMPLETED else EXIT_STOPPED


if __name__ == "__main__":
    sys.exit(main())
