"""Resource data mapping utilities."""

from typing import Dict, Any, List, Optional

from kubesizer.core.utils import parse_cpu_milli, parse_memory_mi
from kubesizer.models.cluster_models import HpaStatus, NodeCapacity


class ResourceDataMapper:
    """Maps raw Kubernetes API data to cluster models."""

    def map_node(self, node_data: Dict[str, Any]) -> NodeCapacity:
        """Map a node dict (as returned by KubernetesClient) to NodeCapacity."""
        allocatable = node_data.get('allocatable') or {}
        capacity = node_data.get('capacity') or {}

        def resource(key):
            value = allocatable.get(key)
            return value if value is not None else capacity.get(key)

        return NodeCapacity(
            name=node_data.get('name'),
            cpu_milli=int(parse_cpu_milli(resource('cpu'))),
            memory_mi=int(parse_memory_mi(resource('memory'))),
            max_pods=int(resource('pods') or 0),
            ready=node_data.get('status') == 'Ready',
            instance_type=node_data.get('instance_type'),
        )

    def map_hpa(self, hpa_data: Dict[str, Any]) -> HpaStatus:
        """Map an autoscaling/v2 HPA dict (camelCase API form) to HpaStatus."""
        metadata = hpa_data.get('metadata', {})
        spec = hpa_data.get('spec', {})
        status = hpa_data.get('status', {})

        return HpaStatus(
            namespace=metadata.get('namespace', 'n/a'),
            name=metadata.get('name', 'n/a'),
            target=(spec.get('scaleTargetRef') or {}).get('name'),
            min_replicas=spec.get('minReplicas'),
            max_replicas=spec.get('maxReplicas'),
            current_replicas=status.get('currentReplicas'),
            cpu_target_percent=self._resource_utilization(spec.get('metrics'), 'cpu', 'target'),
            cpu_current_percent=self._resource_utilization(status.get('currentMetrics'), 'cpu', 'current'),
            memory_target_percent=self._resource_utilization(spec.get('metrics'), 'memory', 'target'),
            memory_current_percent=self._resource_utilization(status.get('currentMetrics'), 'memory', 'current'),
        )

    def _resource_utilization(self, metrics: Optional[List[Dict[str, Any]]],
                              resource_name: str, key: str) -> Optional[int]:
        for metric in metrics or []:
            resource = metric.get('resource') or {}
            if resource.get('name') == resource_name:
                value = (resource.get(key) or {}).get('averageUtilization')
                if value is not None:
                    return int(value)
        return None
