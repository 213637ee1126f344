from .inspector import ClusterInspector
from .kubernetes import KubernetesClient, KubernetesClientFactory

__all__ = ["ClusterInspector", "KubernetesClient", "KubernetesClientFactory"]
