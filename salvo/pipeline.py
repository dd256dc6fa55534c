"""Log retrieval pipeline.

Resolves the cluster configuration, builds a client, lists the pods of one
namespace and then streams and writes the log of every listed pod:

    IDLE -> CONFIG_RESOLVED -> CLIENT_READY -> PODS_LISTED
         -> (STREAMING -> WRITING)* -> DONE

Any failure before the pods are listed is fatal and moves the pipeline to
FAILED. Per-pod failures are recorded in the pod's outcome and the remaining
pods are still processed, unless ``fail_fast`` is set.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from salvo.config import Config
from salvo.enums import PipelineState
from salvo.fetchers.base import OutputTarget, PodDescriptor, PodError, SalvoError
from salvo.fetchers.kubernetes import (
    ClusterClient,
    ClusterConfig,
    build_client,
    list_pods,
    load_cluster_config,
    stream_log,
)
from salvo.utils.logging import (
    ProgressCallback,
    ensure_logging_configured,
    get_logger,
    make_progress_callback,
    silent_progress,
)
from salvo.writer import write_log

logger = get_logger(__name__)

DEFAULT_NAMESPACE = "default"
DEFAULT_LOGS_ROOT = "logs"


def resolve_output_directory(namespace: str, directory: Optional[str] = None) -> Path:
    """Return the output directory, defaulting to ``./logs/<namespace>/``."""
    if directory:
        return Path(directory)
    return Path(".") / DEFAULT_LOGS_ROOT / namespace


@dataclass(frozen=True)
class RunOptions:
    """Everything a single run needs, built once from the parsed flags."""

    namespace: str = DEFAULT_NAMESPACE
    directory: Optional[str] = None
    verbose: bool = False
    kubeconfig: Optional[str] = None
    context: Optional[str] = None
    workers: int = 1
    fail_fast: bool = False
    request_timeout: Optional[float] = None
    page_size: Optional[int] = None

    def __post_init__(self):
        if not self.namespace:
            raise ValueError("namespace must not be empty")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")

    @classmethod
    def from_config(cls, config: Config, verbose: bool = False) -> "RunOptions":
        return cls(
            namespace=config.namespace,
            directory=config.directory,
            verbose=verbose,
            kubeconfig=config.kubeconfig,
            context=config.context,
            workers=config.workers,
            fail_fast=config.fail_fast,
            request_timeout=config.request_timeout,
            page_size=config.page_size,
        )

    @property
    def output_directory(self) -> Path:
        return resolve_output_directory(self.namespace, self.directory)


@dataclass(frozen=True)
class PodOutcome:
    """Result of streaming and writing one pod's log.

    Exactly one of ``target`` and ``error`` is set.
    """

    pod: PodDescriptor
    target: Optional[OutputTarget] = None
    error: Optional[PodError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunResult:
    """Outcomes of a run, in pod listing order."""

    namespace: str
    directory: Path
    outcomes: List[PodOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[PodOutcome]:
        return [outcome for outcome in self.outcomes if outcome.ok]

    @property
    def failed(self) -> List[PodOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    @property
    def files(self) -> List[Path]:
        return [outcome.target.path for outcome in self.succeeded]


class LogPipeline:
    """Runs one log retrieval for a namespace.

    A pipeline instance is single use: it owns the cluster client for the
    duration of ``run`` and closes it before returning.
    """

    def __init__(
        self,
        options: RunOptions,
        progress: Optional[ProgressCallback] = None,
        config_loader: Optional[Callable[..., ClusterConfig]] = None,
        client_factory: Optional[Callable[..., ClusterClient]] = None,
    ):
        self.options = options
        self.progress = progress or silent_progress
        self.config_loader = config_loader or load_cluster_config
        self.client_factory = client_factory or build_client
        self.state = PipelineState.IDLE
        self.error: Optional[SalvoError] = None

    def run(self) -> RunResult:
        """Run the pipeline.

        Returns:
            RunResult with one outcome per listed pod

        Raises:
            ConfigResolutionError: If the kubeconfig cannot be resolved
            ClientConstructionError: If the client cannot be built
            PodListError: If the pods cannot be listed
            LogStreamError: On the first stream failure when fail_fast is set
            LogWriteError: On the first write failure when fail_fast is set
        """
        if self.state is not PipelineState.IDLE:
            raise RuntimeError(f"Pipeline already ran (state: {self.state.value})")
        ensure_logging_configured()

        try:
            return self._run()
        except SalvoError as e:
            self.error = e
            self._transition(PipelineState.FAILED)
            logger.debug("LogPipeline::run::run failed", error=str(e), kind=type(e).__name__)
            raise
        except Exception as e:
            self._transition(PipelineState.FAILED)
            logger.error("LogPipeline::run::unexpected error", error=str(e), kind=type(e).__name__)
            raise

    def _run(self) -> RunResult:
        namespace = self.options.namespace
        directory = self.options.output_directory
        self.progress(f'Using namespace "{namespace}"')
        self.progress(f'Writing to directory "{directory}"')

        cluster_config = self.config_loader(self.options.kubeconfig, self.options.context)
        self._transition(PipelineState.CONFIG_RESOLVED)
        self.progress(f"Using kubeconfig: {cluster_config.path}")

        cluster = self.client_factory(cluster_config, request_timeout=self.options.request_timeout)
        self._transition(PipelineState.CLIENT_READY)

        try:
            pods = list_pods(cluster, namespace, page_size=self.options.page_size)
            self._transition(PipelineState.PODS_LISTED)

            if not pods:
                self.progress(f"No pods found in namespace {namespace}")
                outcomes: List[PodOutcome] = []
            elif self.options.workers > 1 and not self.options.fail_fast:
                outcomes = self._process_concurrently(cluster, pods, directory)
            else:
                outcomes = self._process_sequentially(cluster, pods, directory)
        finally:
            cluster.close()

        self._transition(PipelineState.DONE)
        result = RunResult(namespace=namespace, directory=directory, outcomes=outcomes)
        logger.debug(
            "LogPipeline::run::run finished",
            namespace=namespace,
            pods=len(outcomes),
            failed=len(result.failed),
        )
        return result

    def _process_sequentially(
        self, cluster: ClusterClient, pods: List[PodDescriptor], directory: Path
    ) -> List[PodOutcome]:
        outcomes = []
        for pod in pods:
            self.progress(f"Pod name: {pod.name}")
            outcomes.append(self._process_pod(cluster, pod, directory, track_state=True))
        return outcomes

    def _process_concurrently(
        self, cluster: ClusterClient, pods: List[PodDescriptor], directory: Path
    ) -> List[PodOutcome]:
        workers = min(self.options.workers, len(pods))
        logger.debug("LogPipeline::_process_concurrently::fanning out", pods=len(pods), workers=workers)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="salvo") as executor:
            futures = []
            for pod in pods:
                self.progress(f"Pod name: {pod.name}")
                futures.append(executor.submit(self._process_pod, cluster, pod, directory))
            return [future.result() for future in futures]

    def _process_pod(
        self,
        cluster: ClusterClient,
        pod: PodDescriptor,
        directory: Path,
        track_state: bool = False,
    ) -> PodOutcome:
        try:
            if track_state:
                self._transition(PipelineState.STREAMING)
            payload = stream_log(cluster, pod)
            if track_state:
                self._transition(PipelineState.WRITING)
            target = write_log(payload, pod, directory, progress=self.progress)
        except PodError as e:
            if self.options.fail_fast:
                raise
            logger.info("pod log retrieval failed", pod=pod.name, namespace=pod.namespace, error=str(e))
            return PodOutcome(pod=pod, error=e)
        return PodOutcome(pod=pod, target=target)

    def _transition(self, state: PipelineState) -> None:
        logger.debug("LogPipeline::_transition", source=self.state.value, target=state.value)
        self.state = state


def run(
    namespace: str = DEFAULT_NAMESPACE,
    directory: Optional[str] = None,
    verbose: bool = False,
    **options,
) -> RunResult:
    """Retrieve the logs of every pod in a namespace.

    Args:
        namespace: Namespace to get logs from
        directory: Output directory (default: ./logs/<namespace>/)
        verbose: Print progress lines to stdout
        **options: Further ``RunOptions`` fields (workers, fail_fast, ...)

    Returns:
        RunResult with one outcome per listed pod
    """
    run_options = RunOptions(namespace=namespace, directory=directory, verbose=verbose, **options)
    pipeline = LogPipeline(run_options, progress=make_progress_callback(verbose))
    return pipeline.run()
