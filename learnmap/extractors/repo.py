"""Repository cloning and capped source-file selection."""

from __future__ import annotations

import os
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Sequence

from ..config import DEFAULT_EXCLUDED_DIRS, DEFAULT_EXTENSIONS
from ..errors import CloneError
from ..logging import get_logger
from ..models import RepoDigest, SourceFile

CloneRunner = Callable[[str, Path, float], None]


def _git_clone(url: str, dest: Path, timeout: float) -> None:
    env = dict(os.environ)
    env["GIT_TERMINAL_PROMPT"] = "0"
    try:
        subprocess.run(
            ["git", "clone", "--depth", "1", "--", url, str(dest)],
            check=True,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
        )
    except FileNotFoundError as exc:  # pragma: no cover - depends on environment
        raise CloneError("Unable to locate 'git'. Install git to analyse repositories.") from exc
    except subprocess.TimeoutExpired as exc:
        raise CloneError(f"git clone timed out after {timeout:g}s for {url}") from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip() or f"exit code {exc.returncode}"
        raise CloneError(f"git clone failed for {url}: {detail}") from exc


def _iter_candidate_files(
    root: Path, extensions: Sequence[str], excluded_dirs: Iterable[str]
) -> Iterator[Path]:
    """Yield allow-listed regular files under ``root``; symlinks are never followed."""
    excluded = set(excluded_dirs)
    allowed = {ext.lower() for ext in extensions}
    real_root = root.resolve()
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        dirnames[:] = sorted(
            name for name in dirnames if not name.startswith(".") and name not in excluded
        )
        current_dir = Path(dirpath)
        for filename in sorted(filenames):
            if filename.startswith("."):
                continue
            path = current_dir / filename
            if path.suffix.lower() not in allowed or path.is_symlink() or not path.is_file():
                continue
            if path.resolve().is_relative_to(real_root):
                yield path


def collect_source_files(
    root: Path,
    *,
    max_files: int = 10,
    max_chars: int = 2000,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
) -> List[SourceFile]:
    """Return the first ``max_files`` allow-listed files under ``root`` in walk order."""
    files: List[SourceFile] = []
    if max_files <= 0:
        return files
    for path in _iter_candidate_files(root, extensions, excluded_dirs):
        with path.open(encoding="utf-8", errors="ignore") as handle:
            content = handle.read(max_chars)
        files.append(
            SourceFile(
                name=path.name,
                extension=path.suffix.lower(),
                path=path.relative_to(root).as_posix(),
                content=content,
            )
        )
        if len(files) >= max_files:
            break
    return files


class RepoExtractor:
    """Clones a repository into a scoped temp dir and selects source files."""

    def __init__(
        self,
        *,
        max_files: int = 10,
        max_chars: int = 2000,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
        clone_timeout: float = 120.0,
        clone_runner: CloneRunner | None = None,
    ) -> None:
        self.max_files = max_files
        self.max_chars = max_chars
        self.extensions = tuple(extensions)
        self.excluded_dirs = frozenset(excluded_dirs)
        self.clone_timeout = clone_timeout
        self._clone = clone_runner or _git_clone
        self.logger = get_logger("extractors.repo")

    def extract(self, url: str) -> RepoDigest:
        """Clone ``url`` and return a capped digest; the clone never outlives the call."""
        with tempfile.TemporaryDirectory(prefix="learnmap-repo-") as workdir:
            dest = Path(workdir) / "repo"
            self.logger.info("Cloning repository %s", url)
            self._clone(url, dest, self.clone_timeout)
            files = collect_source_files(
                dest,
                max_files=self.max_files,
                max_chars=self.max_chars,
                extensions=self.extensions,
                excluded_dirs=self.excluded_dirs,
            )
        self.logger.debug("Selected %d files from %s", len(files), url)
        return RepoDigest(url=url, files=files)


__all__ = ["RepoExtractor", "collect_source_files"]
