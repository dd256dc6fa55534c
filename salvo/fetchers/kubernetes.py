"""Kubernetes access for pod discovery and log streaming.

Delegates authentication to the local kubeconfig (``~/.kube/config`` unless
another file is given) through the official ``kubernetes`` client. Every
library exception is translated into the Salvo error taxonomy at this
boundary so callers only deal with ``SalvoError`` subclasses.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import urllib3
import yaml
from kubernetes import client
from kubernetes import config as kube_config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException

from salvo.fetchers.base import (
    ClientConstructionError,
    ConfigResolutionError,
    LogPayload,
    LogStreamError,
    PodDescriptor,
    PodListError,
)
from salvo.utils.logging import get_logger

logger = get_logger(__name__)

STREAM_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class ClusterConfig:
    """Credentials and endpoint loaded from a kubeconfig file.

    Attributes:
        path: The kubeconfig file the configuration was loaded from
        context: Context requested by the caller (None means current-context)
        configuration: Client configuration produced by the kubeconfig loader
    """

    path: Path
    context: Optional[str]
    configuration: client.Configuration = field(compare=False, repr=False)

    @property
    def host(self) -> str:
        return self.configuration.host


def default_kubeconfig_path() -> Path:
    """Return ``~/.kube/config`` for the current user.

    Raises:
        ConfigResolutionError: If the home directory cannot be determined
    """
    try:
        home = Path.home()
    except RuntimeError as e:
        raise ConfigResolutionError(f"Error getting user home directory: {e}") from e
    return home / ".kube" / "config"


def resolve_kubeconfig_path(path: Optional[Union[str, Path]] = None) -> Path:
    """Resolve the kubeconfig path, falling back to the default location."""
    if path:
        return Path(path).expanduser()
    return default_kubeconfig_path()


def load_cluster_config(
    path: Optional[Union[str, Path]] = None,
    context: Optional[str] = None,
) -> ClusterConfig:
    """Load the cluster configuration from a kubeconfig file.

    Args:
        path: Explicit kubeconfig path (default: ~/.kube/config)
        context: Kubeconfig context to use (default: the file's current-context)

    Returns:
        ClusterConfig holding the loaded client configuration

    Raises:
        ConfigResolutionError: If the file is missing or cannot be parsed
    """
    kubeconfig_path = resolve_kubeconfig_path(path)
    logger.debug("kubernetes::load_cluster_config::loading kubeconfig", path=str(kubeconfig_path), context=context)

    if not kubeconfig_path.is_file():
        raise ConfigResolutionError(f"Kubernetes config file not found: {kubeconfig_path}")

    configuration = client.Configuration()
    try:
        kube_config.load_kube_config(
            config_file=str(kubeconfig_path),
            context=context,
            client_configuration=configuration,
            persist_config=False,
        )
    except (ConfigException, yaml.YAMLError, OSError, ValueError, TypeError) as e:
        raise ConfigResolutionError(
            f"Invalid Kubernetes config file {kubeconfig_path}: {e}"
        ) from e

    return ClusterConfig(path=kubeconfig_path, context=context, configuration=configuration)


class ClusterClient:
    """Handle for namespace-scoped pod listing and log stream requests.

    Built from exactly one ``ClusterConfig`` by ``build_client``. The client is
    read-only once built and may be shared by several worker threads.
    """

    def __init__(
        self,
        core_v1: client.CoreV1Api,
        api_client: Optional[client.ApiClient] = None,
        request_timeout: Optional[float] = None,
    ):
        self.core_v1 = core_v1
        self.api_client = api_client
        self.request_timeout = request_timeout

    def request_options(self) -> Dict[str, Any]:
        """Keyword arguments added to every API call."""
        if self.request_timeout is None:
            return {}
        return {"_request_timeout": self.request_timeout}

    def close(self) -> None:
        """Release the connection pool held by the underlying API client."""
        if self.api_client is not None:
            self.api_client.close()

    def __enter__(self) -> "ClusterClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(request_timeout={self.request_timeout})"


def build_client(cluster_config: ClusterConfig, request_timeout: Optional[float] = None) -> ClusterClient:
    """Build a cluster client from a loaded configuration.

    Reachability is not checked here; connection failures surface on the
    first API call as ``PodListError``.

    Raises:
        ClientConstructionError: If the configuration cannot back a client
    """
    configuration = cluster_config.configuration
    if not getattr(configuration, "host", None):
        raise ClientConstructionError(
            f"Kubernetes config {cluster_config.path} does not define a cluster server"
        )

    try:
        api_client = client.ApiClient(configuration=configuration)
        core_v1 = client.CoreV1Api(api_client)
    except (ValueError, TypeError, OSError, urllib3.exceptions.HTTPError) as e:
        raise ClientConstructionError(
            f"Failed to create Kubernetes client for {configuration.host}: {e}"
        ) from e

    logger.debug("kubernetes::build_client::client ready", host=configuration.host)
    return ClusterClient(core_v1, api_client=api_client, request_timeout=request_timeout)


def _describe_api_error(e: ApiException) -> str:
    if e.status:
        return f"{e.status} {e.reason}"
    return str(e.reason or e)


def list_pods(cluster: ClusterClient, namespace: str, page_size: Optional[int] = None) -> List[PodDescriptor]:
    """List every pod in a namespace.

    Follows continuation tokens until the listing is exhausted and returns the
    pods in the order the API returned them.

    Args:
        cluster: Client to query
        namespace: Namespace to list
        page_size: Maximum pods per request (default: no limit)

    Returns:
        Pod descriptors, empty when the namespace has no pods

    Raises:
        PodListError: If any list request fails
    """
    logger.debug("kubernetes::list_pods::listing pods", namespace=namespace, page_size=page_size)
    pods: List[PodDescriptor] = []
    continue_token: Optional[str] = None

    while True:
        try:
            response = cluster.core_v1.list_namespaced_pod(
                namespace=namespace,
                limit=page_size,
                _continue=continue_token,
                **cluster.request_options(),
            )
        except ApiException as e:
            raise PodListError(
                f"Failed to list pods in namespace '{namespace}': {_describe_api_error(e)}",
                namespace=namespace,
                status=e.status,
            ) from e
        except (urllib3.exceptions.HTTPError, OSError) as e:
            raise PodListError(
                f"Failed to list pods in namespace '{namespace}': {e}",
                namespace=namespace,
            ) from e

        for item in response.items or []:
            pods.append(PodDescriptor(name=item.metadata.name, namespace=namespace))

        continue_token = response.metadata._continue if response.metadata else None
        if not continue_token:
            break

    logger.debug("kubernetes::list_pods::listed pods", namespace=namespace, count=len(pods))
    return pods


def stream_log(cluster: ClusterClient, pod: PodDescriptor) -> LogPayload:
    """Read the current log buffer of a pod to completion.

    The stream is opened without following, drained into memory and always
    released, whether draining succeeds or not.

    Raises:
        LogStreamError: If the stream cannot be opened or fails while draining
    """
    logger.debug("kubernetes::stream_log::opening log stream", pod=str(pod))
    try:
        response = cluster.core_v1.read_namespaced_pod_log(
            name=pod.name,
            namespace=pod.namespace,
            _preload_content=False,
            **cluster.request_options(),
        )
    except ApiException as e:
        raise LogStreamError(
            f"Failed to open log stream for pod '{pod.name}': {_describe_api_error(e)}",
            pod=pod,
            status=e.status,
        ) from e
    except (urllib3.exceptions.HTTPError, OSError) as e:
        raise LogStreamError(f"Failed to open log stream for pod '{pod.name}': {e}", pod=pod) from e

    buffer = bytearray()
    try:
        for chunk in response.stream(STREAM_CHUNK_SIZE):
            buffer.extend(chunk)
    except (urllib3.exceptions.HTTPError, OSError) as e:
        raise LogStreamError(
            f"Failed to read log stream for pod '{pod.name}' after {len(buffer)} bytes: {e}",
            pod=pod,
        ) from e
    finally:
        response.close()
        response.release_conn()

    logger.debug("kubernetes::stream_log::log stream drained", pod=str(pod), size=len(buffer))
    return LogPayload(pod=pod, content=bytes(buffer))
