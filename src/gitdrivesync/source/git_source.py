"""Tracked-file enumeration from a git checkout via the git CLI."""

from __future__ import annotations

import os
import re
import subprocess
from typing import NoReturn, Optional, Protocol, Sequence

from gitdrivesync.errors import ConfigurationError, ParseError
from gitdrivesync.models import NO_HASH, FileTag, TrackedFile
from gitdrivesync.runlog import RunLog

from .matcher import PathMatcher

RESERVED_FOLDER: str = ".github"

_HASH_RE = re.compile(r"^[0-9a-f]{40}(?:[0-9a-f]{24})?$")


class SourceEnumerator(Protocol):
    """Anything that can list the files to sync."""

    def list_tracked_files(
        self,
        root: Optional[str],
        origin: str,
        subdirectory: str,
        matcher: PathMatcher,
    ) -> list[TrackedFile]: ...


def decode_tag(letter: str) -> Optional[FileTag]:
    """Map a git status letter (A/M/D) to a FileTag."""
    try:
        return FileTag(letter)
    except ValueError:
        return None


def normalize_subdirectory(subdirectory: Optional[str]) -> str:
    """
    Normalize a repository-relative subdirectory to '' or 'some/path/'.

    Raises:
        ConfigurationError: if the subdirectory is absolute.
    """
    subdir = (subdirectory or "").strip()
    if subdir.startswith("/"):
        raise ConfigurationError(
            "Git subdirectory must not be an absolute path",
            details={"subdirectory": subdir},
        )
    if subdir == ".":
        subdir = ""
    if subdir.startswith("./"):
        subdir = subdir[2:]
    if subdir and not subdir.endswith("/"):
        subdir += "/"
    return subdir


class GitSourceEnumerator:
    """
    List tracked files at a git revision.

    Every file under the subdirectory at `origin` is reported as ADDED with
    its blob hash as fingerprint. When `since` is given, the changes between
    `since` and `origin` refine the tags: modified files become MODIFIED and
    deleted files are reported as DELETED records.
    """

    def __init__(
        self,
        run_log: RunLog,
        *,
        since: Optional[str] = None,
        git_executable: str = "git",
    ) -> None:
        self._log = run_log
        self._since = since or None
        self._git = git_executable

    def list_tracked_files(
        self,
        root: Optional[str],
        origin: str,
        subdirectory: str = "",
        matcher: Optional[PathMatcher] = None,
    ) -> list[TrackedFile]:
        """
        Raises:
            ConfigurationError: if the subdirectory is absolute.
            ParseError: if git fails or its output disagrees with the
                working tree.
        """
        subdir = normalize_subdirectory(subdirectory)
        use_matcher = matcher if matcher is not None else PathMatcher(None)

        listed = self._split_z(
            self._run(root, "ls-tree", "--full-tree", "--name-only", "-r", "-z", origin)
        )

        tracked: dict[str, TrackedFile] = {}
        for full_path in listed:
            relative_path = self._in_scope(full_path, subdir, use_matcher)
            if relative_path is None:
                continue
            if not os.path.isfile(_local_path(root, full_path)):
                self._inconsistent(
                    full_path,
                    "file looks tracked by git, but doesn't exist locally",
                )
            tracked[full_path] = TrackedFile(
                relative_path=relative_path,
                full_path=full_path,
                fingerprint="",
            )

        hashes = self._hash_objects(root, list(tracked))
        result: list[TrackedFile] = []
        for full_path, file_hash in zip(list(tracked), hashes):
            if not _HASH_RE.match(file_hash):
                self._inconsistent(full_path, "can't get a hash from a tracked file")
            result.append(
                TrackedFile(
                    relative_path=tracked[full_path].relative_path,
                    full_path=full_path,
                    fingerprint=file_hash,
                )
            )

        if self._since:
            result = self._apply_changes(root, origin, subdir, use_matcher, result)

        self._log.debug(f"Git file list: {len(result)} tracked file(s) under [{subdir}]")
        return result

    # ----------------------------
    # Internals
    # ----------------------------
    def _in_scope(self, full_path: str, subdir: str, matcher: PathMatcher) -> Optional[str]:
        if not full_path:
            return None
        if subdir and not full_path.startswith(subdir):
            return None
        if full_path.split("/")[0].lower() == RESERVED_FOLDER:
            return None
        relative_path = full_path[len(subdir):]
        if not matcher.matches("/" + relative_path):
            return None
        return relative_path

    def _apply_changes(
        self,
        root: Optional[str],
        origin: str,
        subdir: str,
        matcher: PathMatcher,
        files: list[TrackedFile],
    ) -> list[TrackedFile]:
        raw = self._run(
            root, "diff", "--name-status", "--no-renames", "-z", self._since or "", origin
        )
        fields = self._split_z(raw)
        if len(fields) % 2:
            raise ParseError("Parsing inconsistency in git diff output")

        by_path = {f.full_path: i for i, f in enumerate(files)}
        for letter, full_path in zip(fields[0::2], fields[1::2]):
            tag = decode_tag(letter)
            if tag is None:
                self._log.debug(f"Ignoring git change [{letter}] for [{full_path}]")
                continue
            relative_path = self._in_scope(full_path, subdir, matcher)
            if relative_path is None:
                continue

            if tag is FileTag.DELETED:
                if os.path.exists(_local_path(root, full_path)):
                    self._inconsistent(
                        full_path,
                        "file looks deleted by git, but still exists locally",
                    )
                files.append(
                    TrackedFile(
                        relative_path=relative_path,
                        full_path=full_path,
                        fingerprint=NO_HASH,
                        tag=FileTag.DELETED,
                    )
                )
                continue

            index = by_path.get(full_path)
            if index is None:
                self._inconsistent(full_path, "changed file is missing from the tree listing")
            files[index] = TrackedFile(
                relative_path=files[index].relative_path,
                full_path=full_path,
                fingerprint=files[index].fingerprint,
                tag=tag,
            )
        return files

    def _hash_objects(self, root: Optional[str], full_paths: list[str]) -> list[str]:
        # --stdin-paths is line based: paths holding a newline are hashed one by one.
        batch = [p for p in full_paths if "\n" not in p]
        hashes: dict[str, str] = {}
        if batch:
            output = self._run(
                root,
                "hash-object",
                "--stdin-paths",
                stdin="\n".join(batch) + "\n",
            )
            lines = [line.strip() for line in output.splitlines() if line.strip()]
            if len(lines) != len(batch):
                raise ParseError("Parsing inconsistency in git hash-object output")
            hashes.update(zip(batch, lines))

        for full_path in full_paths:
            if full_path not in hashes:
                hashes[full_path] = self._run(root, "hash-object", "--", full_path).strip()
        return [hashes[p] for p in full_paths]

    def _run(self, root: Optional[str], *args: str, stdin: Optional[str] = None) -> str:
        cmd: Sequence[str] = [self._git, "-c", "core.quotepath=", *args]
        try:
            completed = subprocess.run(
                cmd,
                cwd=root or None,
                input=stdin.encode("utf-8") if stdin is not None else None,
                check=True,
                capture_output=True,
            )
        except subprocess.CalledProcessError as exc:
            stderr = exc.stderr.decode("utf-8", errors="replace").strip()
            self._log.debug(f"git {args[0]} failed: {stderr}")
            raise ParseError(
                f"git {args[0]} failed",
                details={"returncode": exc.returncode},
                cause=exc,
            ) from exc
        except FileNotFoundError as exc:
            raise ParseError("git executable or repository root not found", cause=exc) from exc

        try:
            return completed.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            # Drive names are UTF-8; a path git reports in another encoding can't be mirrored.
            self._log.debug(
                f"Parsing inconsistency (path is not valid UTF-8): {_undecodable_entry(exc)}"
            )
            raise ParseError(
                f"git {args[0]} listed a path that is not valid UTF-8",
                cause=exc,
            ) from exc

    def _inconsistent(self, full_path: str, what: str) -> NoReturn:
        self._log.debug(f"Parsing inconsistency ({what}): {_debug_line(full_path)}")
        raise ParseError(f"Parsing inconsistency in git output: {what}")

    @staticmethod
    def _split_z(output: str) -> list[str]:
        return [item for item in output.split("\0") if item]


def _local_path(root: Optional[str], full_path: str) -> str:
    return os.path.join(root or "", *full_path.split("/"))


def _debug_line(line: str) -> str:
    return "[" + line.replace("\t", "<TAB>") + "]"


def _undecodable_entry(exc: UnicodeDecodeError) -> str:
    # The NUL-separated field holding the bad bytes, escaped for the trail.
    data = exc.object
    start = data.rfind(b"\0", 0, exc.start) + 1
    end = data.find(b"\0", exc.end)
    entry = data[start:] if end < 0 else data[start:end]
    return _debug_line(entry.decode("utf-8", errors="backslashreplace"))
