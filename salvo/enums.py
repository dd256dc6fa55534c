from enum import Enum


class PipelineState(Enum):
    """States of a single log retrieval run."""

    IDLE = "idle"
    CONFIG_RESOLVED = "config_resolved"
    CLIENT_READY = "client_ready"
    PODS_LISTED = "pods_listed"
    STREAMING = "streaming"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"
