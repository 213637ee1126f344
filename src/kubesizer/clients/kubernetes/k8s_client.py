# src/kubesizer/clients/kubernetes/k8s_client.py
"""Kubernetes client that supplies observed capacity for sizing."""

from typing import Any, Dict, List, Optional
import yaml
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from kubesizer.clients.inspector import ClusterInspector
from kubesizer.core.exceptions import ClientConnectionException, DiscoveryException
from kubesizer.core.utils import retry_with_backoff
from kubesizer.mappers.resource_mapper import ResourceDataMapper
from kubesizer.models.cluster_models import ClusterSnapshot, HpaStatus, NodeCapacity


class KubernetesClient(ClusterInspector):
    """Reads nodes, pods and HPAs from the current cluster."""

    def __init__(self,
                 kubeconfig_path: Optional[str] = None,
                 context: Optional[str] = None,
                 kubeconfig_data: Optional[bytes] = None):
        super().__init__("KubernetesClient")
        self.kubeconfig_path = kubeconfig_path
        self.context = context
        self.kubeconfig_data = kubeconfig_data
        self.mapper = ResourceDataMapper()

        # API clients
        self.api_client = None
        self.v1 = None
        self.autoscaling_v2 = None

    async def connect(self) -> None:
        """Connect to Kubernetes cluster."""
        try:
            if self.kubeconfig_data:
                kubeconfig_dict = yaml.safe_load(self.kubeconfig_data.decode('utf-8'))
                config.load_kube_config_from_dict(kubeconfig_dict, context=self.context)
                self.logger.info("Loaded kubeconfig from provided data")
            elif self.kubeconfig_path:
                config.load_kube_config(config_file=self.kubeconfig_path, context=self.context)
                self.logger.info(f"Loaded kubeconfig from {self.kubeconfig_path}")
            else:
                config.load_kube_config(context=self.context)
                self.logger.info("Loaded default kubeconfig")

            self.api_client = client.ApiClient()
            self.v1 = client.CoreV1Api(self.api_client)
            self.autoscaling_v2 = client.AutoscalingV2Api(self.api_client)

            self._connected = True
            self.logger.info("Kubernetes client connected", context=self.context)

        except Exception as e:
            raise ClientConnectionException("Kubernetes", f"Connection failed: {e}")

    async def disconnect(self) -> None:
        """Disconnect from Kubernetes cluster."""
        if self.api_client is not None:
            self.api_client.close()
        self._connected = False
        self.logger.info("Kubernetes client disconnected")

    def _require_connection(self) -> None:
        if not self._connected:
            raise DiscoveryException("Kubernetes", "Client not connected")

    @retry_with_backoff(max_retries=3)
    async def _list_nodes(self):
        return self.v1.list_node()

    @retry_with_backoff(max_retries=3)
    async def _list_pods(self, namespace: Optional[str]):
        if namespace:
            return self.v1.list_namespaced_pod(namespace)
        return self.v1.list_pod_for_all_namespaces()

    @retry_with_backoff(max_retries=3)
    async def _list_hpas(self):
        return self.autoscaling_v2.list_horizontal_pod_autoscaler_for_all_namespaces()

    async def discover_nodes(self) -> List[Dict[str, Any]]:
        """Discover cluster nodes."""
        self._require_connection()
        try:
            node_list = await self._list_nodes()
        except ApiException as e:
            raise DiscoveryException("Kubernetes", f"Failed to discover nodes: {e}")

        nodes = []
        for node in node_list.items:
            labels = node.metadata.labels or {}
            capacity = node.status.capacity or {}
            allocatable = node.status.allocatable or {}
            node_data = {
                'name': node.metadata.name,
                'status': self._get_node_status(node),
                'instance_type': labels.get('node.kubernetes.io/instance-type',
                                            labels.get('beta.kubernetes.io/instance-type')),
                'capacity': {
                    'cpu': capacity.get('cpu'),
                    'memory': capacity.get('memory'),
                    'pods': capacity.get('pods'),
                },
                'allocatable': {
                    'cpu': allocatable.get('cpu'),
                    'memory': allocatable.get('memory'),
                    'pods': allocatable.get('pods'),
                },
            }
            nodes.append(node_data)

        self.logger.info(f"Discovered {len(nodes)} nodes")
        return nodes

    async def current_pods(self, namespace: Optional[str] = None) -> int:
        """Count pods in one namespace, or across all namespaces."""
        self._require_connection()
        try:
            pod_list = await self._list_pods(namespace)
        except ApiException as e:
            raise DiscoveryException("Kubernetes", f"Failed to list pods: {e}")

        count = len(pod_list.items)
        self.logger.info("Counted pods", namespace=namespace or "all", pods=count)
        return count

    async def node_capacity(self) -> NodeCapacity:
        """Allocatable capacity of the smallest ready node."""
        nodes = [self.mapper.map_node(n) for n in await self.discover_nodes()]
        ready = [n for n in nodes if n.ready and n.cpu_milli > 0 and n.memory_mi > 0]
        if not ready:
            raise DiscoveryException("Kubernetes", "No ready nodes with allocatable capacity")

        smallest = min(ready, key=lambda n: (n.cpu_milli, n.memory_mi))
        self.logger.info(
            "Selected node capacity",
            node=smallest.name,
            cpu_milli=smallest.cpu_milli,
            memory_mi=smallest.memory_mi,
        )
        return smallest

    async def cluster_snapshot(self, namespace: Optional[str] = None) -> ClusterSnapshot:
        nodes = [self.mapper.map_node(n) for n in await self.discover_nodes()]
        running = await self.current_pods(namespace)
        return ClusterSnapshot(nodes=nodes, running_pods=running, namespace=namespace)

    async def hpa_statuses(self, namespace_filter: str = "", name_filter: str = "") -> List[HpaStatus]:
        """HPAs matching case-insensitive substring filters on namespace and name."""
        self._require_connection()
        try:
            hpa_list = await self._list_hpas()
        except ApiException as e:
            raise DiscoveryException("Kubernetes", f"Failed to discover HPAs: {e}")

        ns_filter = namespace_filter.strip().lower()
        hpa_filter = name_filter.strip().lower()

        statuses = []
        for item in hpa_list.items:
            status = self.mapper.map_hpa(self.api_client.sanitize_for_serialization(item))
            if ns_filter and ns_filter not in status.namespace.lower():
                continue
            if hpa_filter and hpa_filter not in status.name.lower():
                continue
            statuses.append(status)

        self.logger.info(f"Discovered {len(statuses)} HPAs", namespace_filter=ns_filter, name_filter=hpa_filter)
        return statuses

    def _get_node_status(self, node) -> str:
        """Determine node status from conditions."""
        for condition in node.status.conditions or []:
            if condition.type == 'Ready':
                return 'Ready' if condition.status == 'True' else 'NotReady'
        return 'Unknown'
