"""
Cluster access and log retrieval.

Resolves the local cluster configuration, builds a client, lists pods and
streams their logs.
"""

from salvo.fetchers.base import (
    ClientConstructionError,
    ConfigResolutionError,
    LogPayload,
    LogStreamError,
    LogWriteError,
    OutputTarget,
    PodDescriptor,
    PodError,
    PodListError,
    SalvoError,
)

__all__ = [
    "ClientConstructionError",
    "ConfigResolutionError",
    "LogPayload",
    "LogStreamError",
    "LogWriteError",
    "OutputTarget",
    "PodDescriptor",
    "PodError",
    "PodListError",
    "SalvoError",
]
