"""Observed cluster values supplied by a ClusterInspector."""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class NodeCapacity(BaseModel):
    """Schedulable capacity of a single node."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    cpu_milli: int = Field(..., description="Allocatable CPU (m)")
    memory_mi: int = Field(..., description="Allocatable memory (Mi)")
    max_pods: int = Field(0, description="Pod capacity")
    ready: bool = True
    instance_type: Optional[str] = None


class HpaStatus(BaseModel):
    """Current state of one HorizontalPodAutoscaler."""

    namespace: str
    name: str
    target: Optional[str] = None
    min_replicas: Optional[int] = None
    max_replicas: Optional[int] = None
    current_replicas: Optional[int] = None
    cpu_target_percent: Optional[int] = None
    cpu_current_percent: Optional[int] = None
    memory_target_percent: Optional[int] = None
    memory_current_percent: Optional[int] = None


class ClusterSnapshot(BaseModel):
    """Point-in-time view of cluster capacity."""

    nodes: List[NodeCapacity] = Field(default_factory=list)
    running_pods: int = 0
    namespace: Optional[str] = None

    @property
    def ready_nodes(self) -> int:
        return sum(1 for node in self.nodes if node.ready)

    @property
    def total_cpu_cores(self) -> float:
        return sum(node.cpu_milli for node in self.nodes) / 1000

    @property
    def total_memory_gi(self) -> float:
        return sum(node.memory_mi for node in self.nodes) / 1024

    @property
    def max_pods(self) -> int:
        return sum(node.max_pods for node in self.nodes)


class HeadroomAssessment(BaseModel):
    """Pod room left after applying a sizing report to a cluster."""

    model_config = ConfigDict(frozen=True)

    ready_nodes: int
    total_cpu_cores: float
    total_memory_gi: float
    running_pods: int
    max_pods: int
    additional_pods: int
    total_pods_after_scaling: int
    available_pod_room: int

    @property
    def needs_more_nodes(self) -> bool:
        return self.available_pod_room < 0
