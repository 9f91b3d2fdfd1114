"""ACL store: files, their direct ACEs, and parent linkage."""

import threading
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..common.logger import get_logger
from .catalog import Effect, Permission
from .errors import CycleDetected, UnknownFile

logger = get_logger("store")


@dataclass(frozen=True)
class ACE:
    """One allow/deny grant of a permission to a principal."""

    principal: str
    permission: Permission
    effect: Effect
    inherited: bool = False

    @property
    def key(self) -> Tuple[str, Permission, Effect]:
        return (self.principal, self.permission, self.effect)

    def as_inherited(self) -> "ACE":
        """Copy of this ACE as seen from a descendant file."""
        return self if self.inherited else replace(self, inherited=True)


@dataclass(eq=False)
class File:
    """A file or folder in the containment tree."""

    path: str
    parent: Optional["File"] = None
    direct_acl: List[ACE] = field(default_factory=list)
    inheritance_enabled: bool = True

    def __repr__(self) -> str:
        return f"File({self.path!r})"


FileRef = Union[str, File]


class AclStore:
    """Holds every file of one ACL domain.

    Writers hold the file's lock for the whole of a mutation; readers take a
    snapshot of a file's ACL under the same lock, so a multi-ACE change is
    never observed half-applied.
    """

    def __init__(self):
        self._files: Dict[str, File] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def add_file(
        self,
        path: str,
        parent: Optional[FileRef] = None,
        inheritance_enabled: bool = True,
        acl: Optional[Iterable[ACE]] = None,
    ) -> File:
        """Register a file.

        Registering an existing path replaces that file; its children are
        re-linked to the replacement.

        Args:
            path: File path
            parent: Parent file or its path
            inheritance_enabled: Whether ancestor ACEs apply to this file
            acl: Initial direct ACEs; duplicates by (principal, permission, effect) collapse

        Returns:
            The new File
        """
        parent_file = self.resolve(parent) if parent is not None else None
        unique: Dict[Tuple[str, Permission, Effect], ACE] = {}
        for ace in acl or ():
            unique.setdefault(ace.key, ace)
        file = File(
            path=path,
            parent=parent_file,
            direct_acl=list(unique.values()),
            inheritance_enabled=inheritance_enabled,
        )
        previous = self._files.get(path)
        if previous is not None:
            logger.warning(f"Replacing existing file: {path}")
            for child in self._files.values():
                if child.parent is previous:
                    child.parent = file
        self._files[path] = file
        logger.debug(f"Registered file {path} (parent={parent_file.path if parent_file else None})")
        return file

    def get_file(self, path: str) -> File:
        """Look up a file by path.

        Raises:
            UnknownFile: If no file has that path
        """
        try:
            return self._files[path]
        except KeyError:
            raise UnknownFile(path) from None

    def resolve(self, file: FileRef) -> File:
        """Accept a File or a path and return the registered File."""
        if isinstance(file, File):
            return file
        return self.get_file(file)

    def __contains__(self, path: object) -> bool:
        return path in self._files

    def paths(self) -> List[str]:
        return list(self._files)

    def ancestors(self, file: FileRef) -> List[File]:
        """Get a file's ancestors, nearest parent first.

        Raises:
            CycleDetected: If the parent chain loops
        """
        file = self.resolve(file)
        chain = []
        seen = {id(file)}
        current = file.parent
        while current is not None:
            if id(current) in seen:
                names = [file.path] + [f.path for f in chain] + [current.path]
                raise CycleDetected("file hierarchy", names)
            seen.add(id(current))
            chain.append(current)
            current = current.parent
        return chain

    def lock_for(self, file: FileRef) -> threading.RLock:
        """Get the writer lock of a file, creating it on first use."""
        path = file.path if isinstance(file, File) else file
        with self._locks_guard:
            lock = self._locks.get(path)
            if lock is None:
                lock = self._locks[path] = threading.RLock()
            return lock

    def snapshot_acl(self, file: FileRef) -> Tuple[ACE, ...]:
        """Copy a file's direct ACL under its lock."""
        file = self.resolve(file)
        with self.lock_for(file):
            return tuple(file.direct_acl)
