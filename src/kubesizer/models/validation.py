"""Validation guards for sizing inputs."""

import math
from typing import Optional

from kubesizer.core.exceptions import InvalidInput
from .sizing_models import PodSpec, SizingInput, SizingPolicy


def _require_finite(field: str, value: float) -> None:
    if not math.isfinite(value):
        raise InvalidInput(field, "must be a finite number", value)


def require_positive(field: str, value: Optional[float]) -> None:
    """Raise InvalidInput unless value is a finite number > 0."""
    if value is None:
        raise InvalidInput(field, "must be > 0", value)
    _require_finite(field, value)
    if value <= 0:
        raise InvalidInput(field, "must be > 0", value)


def require_non_negative(field: str, value: Optional[float]) -> None:
    """Raise InvalidInput if value is negative or not finite. None passes."""
    if value is None:
        return
    _require_finite(field, value)
    if value < 0:
        raise InvalidInput(field, "must be >= 0", value)


def validate_pod_spec(pod_spec: PodSpec) -> None:
    for field, value in pod_spec.model_dump().items():
        require_non_negative(f"pod_spec.{field}", value)


def validate_policy(policy: SizingPolicy) -> None:
    require_non_negative("policy.hpa_min_floor", policy.hpa_min_floor)
    if policy.hpa_max_cap is not None:
        require_positive("policy.hpa_max_cap", policy.hpa_max_cap)
        if policy.hpa_min_floor > policy.hpa_max_cap:
            raise InvalidInput(
                "policy.hpa_min_floor", f"must be <= hpa_max_cap ({policy.hpa_max_cap})", policy.hpa_min_floor
            )
    require_positive("policy.cpu_buffer_factor", policy.cpu_buffer_factor)
    require_non_negative("policy.cpu_trigger_percent", policy.cpu_trigger_percent)
    require_non_negative("policy.cost_low_per_core", policy.cost_low_per_core)
    require_non_negative("policy.cost_high_per_core", policy.cost_high_per_core)


def validate_sizing_input(sizing_input: SizingInput) -> None:
    """Check every field of a SizingInput, raising on the first bad one."""
    require_non_negative("additional_tps", sizing_input.additional_tps)
    require_non_negative("total_transactions", sizing_input.total_transactions)
    require_non_negative("period_days", sizing_input.period_days)
    require_positive("tps_per_pod", sizing_input.tps_per_pod)
    require_non_negative("current_pods", sizing_input.current_pods)
    require_non_negative("namespace_pod_limit", sizing_input.namespace_pod_limit)
    require_positive("node_cpu_capacity_milli", sizing_input.node_cpu_capacity_milli)
    require_positive("node_mem_capacity_mi", sizing_input.node_mem_capacity_mi)
    require_positive("hpa_burst_factor", sizing_input.hpa_burst_factor)
    validate_pod_spec(sizing_input.pod_spec)
    validate_policy(sizing_input.policy)
