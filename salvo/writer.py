"""Writes buffered pod logs to ``<directory>/<pod-name>.log`` files."""

from pathlib import Path
from typing import Optional, Union

from salvo.fetchers.base import LogPayload, LogWriteError, OutputTarget, PodDescriptor
from salvo.utils.logging import ProgressCallback, get_logger, silent_progress

logger = get_logger(__name__)

LOG_FILE_SUFFIX = ".log"


def log_file_path(directory: Union[str, Path], pod: PodDescriptor) -> Path:
    """Return the log file path for a pod inside a directory."""
    return Path(directory) / f"{pod.name}{LOG_FILE_SUFFIX}"


def ensure_directory(directory: Union[str, Path], pod: PodDescriptor) -> Path:
    """Create the output directory and its parents when missing.

    Safe to call concurrently for the same directory.

    Raises:
        LogWriteError: If the path exists and is not a directory, or cannot be created
    """
    path = Path(directory)
    if path.exists() and not path.is_dir():
        raise LogWriteError(f"Output path {path} exists and is not a directory", pod=pod)

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise LogWriteError(f"Failed to create directory {path}: {e}", pod=pod) from e
    return path


def write_log(
    payload: LogPayload,
    pod: PodDescriptor,
    directory: Union[str, Path],
    progress: Optional[ProgressCallback] = None,
) -> OutputTarget:
    """Write a pod's log payload to ``<directory>/<pod-name>.log``.

    Existing files are truncated, never appended to. A failure after part of
    the payload was written leaves the truncated file in place.

    Args:
        payload: Buffered log content
        pod: Pod the payload belongs to
        directory: Output directory, created on demand
        progress: Verbosity-gated progress callback

    Returns:
        OutputTarget with the resolved directory and file path

    Raises:
        LogWriteError: If the directory or file cannot be written
    """
    progress = progress or silent_progress
    progress(f"Writing files to directory {directory}")

    target_dir = ensure_directory(directory, pod)
    path = log_file_path(target_dir, pod)

    try:
        with open(path, "wb") as f:
            f.write(payload.content)
    except OSError as e:
        raise LogWriteError(f"Failed to write log file {path} for pod '{pod.name}': {e}", pod=pod) from e

    progress(f"Created file {path}")
    logger.debug("writer::write_log::log file written", pod=str(pod), path=str(path), size=payload.size)
    return OutputTarget(directory=target_dir.resolve(), path=path.resolve())
