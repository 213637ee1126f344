"""
Sizing Data Models
Value records consumed and produced by the capacity sizer
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Tuple
from enum import Enum


class ForecastMode(str, Enum):
    """How the forecast TPS is supplied."""
    DIRECT_TPS = "direct_tps"
    DERIVED_FROM_TOTAL = "derived_from_total"


class DerivationWindow(str, Enum):
    """Business hours per day used when deriving TPS from a transaction total."""
    TWENTY_FOUR_BY_SEVEN = "24x7"
    EIGHT_HOUR_DAY = "8h"

    @property
    def seconds_per_day(self) -> int:
        return 86400 if self is DerivationWindow.TWENTY_FOUR_BY_SEVEN else 28800


class ReportWindow(str, Enum):
    """Window used for the headline transaction count."""
    ONE_MINUTE = "1m"
    ONE_HOUR = "1h"
    EIGHT_HOURS = "8h"

    @property
    def seconds(self) -> int:
        return {"1m": 60, "1h": 3600, "8h": 28800}[self.value]


class ProjectionWindow(str, Enum):
    """Fixed windows for transaction projections."""
    ONE_MINUTE = "1m"
    ONE_HOUR = "1h"
    EIGHT_HOURS = "8h"
    ONE_DAY = "1d"
    THIRTY_DAYS_24H = "30d_24h"
    THIRTY_DAYS_8H = "30d_8h"

    @property
    def seconds(self) -> int:
        return _PROJECTION_SECONDS[self.value]


_PROJECTION_SECONDS = {
    "1m": 60,
    "1h": 3600,
    "8h": 28800,
    "1d": 86400,
    "30d_24h": 30 * 86400,
    "30d_8h": 30 * 28800,
}


class LimitingResource(str, Enum):
    """Resource that determines the recommended node count."""
    CPU = "cpu"
    MEMORY = "memory"
    NONE = "none"


class SizingBaseModel(BaseModel):
    """Base model for immutable sizing records."""

    model_config = ConfigDict(frozen=True)


class PodSpec(SizingBaseModel):
    """Per-pod requests/limits and the Istio sidecar overhead."""

    cpu_request_milli: int = Field(100, description="Application container CPU request (m)")
    cpu_limit_milli: int = Field(1000, description="Application container CPU limit (m)")
    memory_request_mi: int = Field(2000, description="Application container memory request (Mi)")
    memory_limit_mi: int = Field(4000, description="Application container memory limit (Mi)")
    istio_cpu_request_milli: int = Field(150, description="Sidecar CPU request overhead (m)")
    istio_cpu_limit_milli: int = Field(100, description="Sidecar CPU limit overhead (m)")
    istio_memory_request_mi: int = Field(0, description="Sidecar memory request overhead (Mi)")
    istio_memory_limit_mi: int = Field(0, description="Sidecar memory limit overhead (Mi)")


class SizingPolicy(SizingBaseModel):
    """Policy knobs that differ between environments."""

    hpa_min_floor: int = Field(0, description="Lowest HPA min replicas; 0 disables the floor")
    hpa_max_cap: Optional[int] = Field(None, description="Highest HPA max replicas; None disables the cap")
    cpu_buffer_factor: float = Field(1.3, description="Scheduling slack applied to requested cores")
    cpu_trigger_percent: int = Field(60, description="HPA target CPU utilization")
    cost_low_per_core: float = Field(107.0, description="Low monthly cost per buffered core")
    cost_high_per_core: float = Field(285.0, description="High monthly cost per buffered core")

    @classmethod
    def production(cls, **overrides) -> "SizingPolicy":
        """Production standard: HPA min floor of 3 and max cap of 64."""
        values = {"hpa_min_floor": 3, "hpa_max_cap": 64}
        values.update(overrides)
        return cls(**values)


class SizingInput(SizingBaseModel):
    """One complete set of sizing inputs."""

    forecast_mode: ForecastMode = ForecastMode.DIRECT_TPS
    additional_tps: float = 0.0
    total_transactions: float = 0.0
    period_days: Optional[float] = None
    derivation_window: DerivationWindow = DerivationWindow.TWENTY_FOUR_BY_SEVEN
    tps_per_pod: float = 400.0
    current_pods: int = 0
    namespace_pod_limit: Optional[int] = None
    istio_enabled: bool = True
    node_cpu_capacity_milli: int = 4000
    node_mem_capacity_mi: int = 16384
    hpa_burst_factor: float = 2.0
    report_window: ReportWindow = ReportWindow.ONE_HOUR
    pod_spec: PodSpec = Field(default_factory=PodSpec)
    policy: SizingPolicy = Field(default_factory=SizingPolicy)


class ResourceFootprint(SizingBaseModel):
    """Per-pod and total resource requests/limits for a pod count."""

    pods: int
    per_pod_cpu_request_milli: int
    per_pod_cpu_limit_milli: int
    per_pod_mem_request_mi: int
    per_pod_mem_limit_mi: int
    total_cpu_request_milli: int
    total_cpu_limit_milli: int
    total_mem_request_mi: int
    total_mem_limit_mi: int

    @property
    def total_cpu_request_cores(self) -> float:
        return self.total_cpu_request_milli / 1000

    @property
    def total_cpu_limit_cores(self) -> float:
        return self.total_cpu_limit_milli / 1000


class Projection(SizingBaseModel):
    """Transactions expected over one projection window."""

    window: ProjectionWindow
    transactions: float


class SizingReport(SizingBaseModel):
    """Everything derived from one SizingInput."""

    # Traffic
    tps: float
    forecast_mode: ForecastMode
    derivation_window: Optional[DerivationWindow] = None
    tps_per_pod: float
    total_capacity_tps: float
    required_pods: int
    extra_pods_needed: int
    utilization_percent: Optional[float] = None

    # HPA
    hpa_min: int
    hpa_max: int
    hpa_capped: bool = False
    cpu_trigger_percent: int

    # Per pod
    istio_enabled: bool
    per_pod_cpu_request_milli: int
    per_pod_cpu_limit_milli: int
    per_pod_mem_request_mi: int
    per_pod_mem_limit_mi: int

    # Cluster totals
    total_cpu_request_milli: int
    total_cpu_request_cores: float
    buffered_cpu_request_cores: float
    total_mem_request_mi: int
    istio_inclusive_cpu_limit_milli: int

    # Nodes
    node_cpu_capacity_milli: int
    node_mem_capacity_mi: int
    nodes_needed_by_cpu: int
    nodes_needed_by_memory: int
    recommended_nodes: int
    limited_by: LimitingResource

    # Cost
    estimated_monthly_cost_low: float
    estimated_monthly_cost_high: float

    # Projections
    projected_transactions: Tuple[Projection, ...]
    report_window: ReportWindow
    window_transactions: float
    window_capacity_transactions: float

    # Namespace limit
    namespace_pod_limit: Optional[int] = None
    scaling_blocked: bool = False
    tps_per_pod_to_fit_limit: Optional[float] = None

    def projected(self, window: ProjectionWindow) -> float:
        """Projected transactions for one window."""
        for projection in self.projected_transactions:
            if projection.window == window:
                return projection.transactions
        raise KeyError(window)
