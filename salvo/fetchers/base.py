"""Data models and error taxonomy shared by the log retrieval components.

A run moves a pod through three value types:

- ``PodDescriptor``: produced by the pod lister, one per listed pod
- ``LogPayload``: the buffered log content of one pod, handed from the
  log streamer to the log writer and then dropped
- ``OutputTarget``: where the writer put the payload on disk
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class PodDescriptor:
    """A pod as returned by a single list call.

    Attributes:
        name: Pod name, unique within the namespace
        namespace: Namespace the pod was listed from
    """

    name: str
    namespace: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class LogPayload:
    """Fully buffered log content of one pod at retrieval time."""

    pod: PodDescriptor
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class OutputTarget:
    """Resolved location of a written log file.

    Attributes:
        directory: Directory holding the log file
        path: Full path of the ``<pod-name>.log`` file
    """

    directory: Path
    path: Path


class SalvoError(Exception):
    """Base exception for log retrieval operations."""

    pass


class ConfigResolutionError(SalvoError):
    """Raised when the cluster configuration file cannot be located or parsed."""

    pass


class ClientConstructionError(SalvoError):
    """Raised when a cluster client cannot be built from a configuration."""

    pass


class PodListError(SalvoError):
    """Raised when pods cannot be listed in a namespace."""

    def __init__(self, message: str, namespace: str, status: Optional[int] = None):
        super().__init__(message)
        self.namespace = namespace
        self.status = status


class PodError(SalvoError):
    """Base exception for failures tied to a single pod."""

    def __init__(self, message: str, pod: PodDescriptor):
        super().__init__(message)
        self.pod = pod


class LogStreamError(PodError):
    """Raised when a pod's log stream cannot be opened or drained."""

    def __init__(self, message: str, pod: PodDescriptor, status: Optional[int] = None):
        super().__init__(message, pod)
        self.status = status


class LogWriteError(PodError):
    """Raised when a pod's log payload cannot be written to disk."""

    pass
