# src/kubesizer/sizing/calculator.py
"""
Capacity sizing calculator.

Maps a forecast (transactions per second) to the pods, HPA bounds, node count
and monthly cost needed to serve it. Every function here is pure: inputs are
validated synchronously and any problem raises ``InvalidInput`` naming the
offending field. Nothing is logged or printed.
"""

from decimal import Decimal, ROUND_CEILING
from typing import Dict, Iterable, Optional, Tuple

from kubesizer.core.exceptions import InvalidInput
from kubesizer.models.sizing_models import (
    ForecastMode,
    LimitingResource,
    PodSpec,
    Projection,
    ProjectionWindow,
    ResourceFootprint,
    SizingInput,
    SizingReport,
)
from kubesizer.models.validation import (
    require_non_negative,
    require_positive,
    validate_sizing_input,
)


def _ceil(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_CEILING))


def _dec(value: float) -> Decimal:
    # str() keeps 0.1 as 0.1 instead of its binary expansion
    return Decimal(str(value))


def derive_tps(sizing_input: SizingInput) -> float:
    """Return the forecast TPS, deriving it from a transaction total if asked."""
    if sizing_input.forecast_mode == ForecastMode.DIRECT_TPS:
        return sizing_input.additional_tps

    period_days = sizing_input.period_days or 1
    require_non_negative("period_days", period_days)
    seconds = period_days * sizing_input.derivation_window.seconds_per_day
    return sizing_input.total_transactions / seconds


def required_pods(tps: float, tps_per_pod: float) -> int:
    """Smallest pod count whose combined TPS meets the forecast."""
    require_positive("tps_per_pod", tps_per_pod)
    require_non_negative("tps", tps)
    if tps <= 0:
        return 0
    return _ceil(_dec(tps) / _dec(tps_per_pod))


def hpa_bounds(
    required: int,
    burst_factor: float,
    min_floor: int = 0,
    max_cap: Optional[int] = None,
) -> Tuple[int, int]:
    """
    HPA min/max replicas for a required pod count.

    ``min_floor`` of 0 means no production floor. The max is
    ``ceil(min * burst_factor)``, never below 1. When ``max_cap`` is set both
    bounds are clamped to it, so min never exceeds max.
    """
    require_positive("hpa_burst_factor", burst_factor)
    require_non_negative("hpa_min_floor", min_floor)

    hpa_min = max(min_floor, required)
    hpa_max = _ceil(_dec(hpa_min) * _dec(burst_factor))
    if max_cap is not None:
        require_positive("hpa_max_cap", max_cap)
        if min_floor > max_cap:
            raise InvalidInput("hpa_min_floor", f"must be <= hpa_max_cap ({max_cap})", min_floor)
        hpa_min = min(hpa_min, max_cap)
        hpa_max = min(hpa_max, max_cap)
    return hpa_min, max(hpa_max, 1)


def resource_footprint(pods: int, istio_enabled: bool, pod_spec: PodSpec) -> ResourceFootprint:
    """Per-pod requests/limits (with sidecar overhead) and totals for ``pods``."""
    require_non_negative("required_pods", pods)

    cpu_request = pod_spec.cpu_request_milli
    cpu_limit = pod_spec.cpu_limit_milli
    mem_request = pod_spec.memory_request_mi
    mem_limit = pod_spec.memory_limit_mi

    if istio_enabled:
        cpu_request += pod_spec.istio_cpu_request_milli
        cpu_limit += pod_spec.istio_cpu_limit_milli
        mem_request += pod_spec.istio_memory_request_mi
        mem_limit += pod_spec.istio_memory_limit_mi

    return ResourceFootprint(
        pods=pods,
        per_pod_cpu_request_milli=cpu_request,
        per_pod_cpu_limit_milli=cpu_limit,
        per_pod_mem_request_mi=mem_request,
        per_pod_mem_limit_mi=mem_limit,
        total_cpu_request_milli=cpu_request * pods,
        total_cpu_limit_milli=cpu_limit * pods,
        total_mem_request_mi=mem_request * pods,
        total_mem_limit_mi=mem_limit * pods,
    )


def nodes_needed(total_request: float, per_node_capacity: float, field: str = "per_node_capacity") -> int:
    """Nodes required to hold ``total_request`` of one resource."""
    require_positive(field, per_node_capacity)
    require_non_negative("total_request", total_request)
    if total_request <= 0:
        return 0
    return _ceil(_dec(total_request) / _dec(per_node_capacity))


def recommend_nodes(by_cpu: int, by_memory: int, pods: int) -> Tuple[int, LimitingResource]:
    """Pick the larger node count and the resource that forced it."""
    recommended = max(by_cpu, by_memory)
    if pods > 0:
        recommended = max(recommended, 1)

    if recommended == 0:
        return 0, LimitingResource.NONE
    if by_cpu > by_memory:
        return recommended, LimitingResource.CPU
    return recommended, LimitingResource.MEMORY


def project_transactions(
    tps: float,
    windows: Iterable[ProjectionWindow] = tuple(ProjectionWindow),
) -> Dict[ProjectionWindow, float]:
    return {window: tps * window.seconds for window in windows}


def estimate_cost(buffered_cores: float, low_rate: float, high_rate: float) -> Tuple[float, float]:
    """Monthly cost range for a buffered core count."""
    require_non_negative("buffered_cpu_request_cores", buffered_cores)
    return buffered_cores * low_rate, buffered_cores * high_rate


class CapacitySizer:
    """Runs the full sizing pipeline for one SizingInput."""

    def size(self, sizing_input: SizingInput) -> SizingReport:
        validate_sizing_input(sizing_input)
        policy = sizing_input.policy

        tps = derive_tps(sizing_input)
        pods = required_pods(tps, sizing_input.tps_per_pod)
        extra_pods = max(pods - sizing_input.current_pods, 0)

        capacity_tps = sizing_input.tps_per_pod * sizing_input.current_pods
        utilization = (tps / capacity_tps) * 100 if capacity_tps > 0 else None

        hpa_min, hpa_max = hpa_bounds(
            pods,
            sizing_input.hpa_burst_factor,
            min_floor=policy.hpa_min_floor,
            max_cap=policy.hpa_max_cap,
        )

        footprint = resource_footprint(pods, sizing_input.istio_enabled, sizing_input.pod_spec)
        buffered_cores = footprint.total_cpu_request_cores * policy.cpu_buffer_factor

        by_cpu = nodes_needed(
            footprint.total_cpu_request_milli,
            sizing_input.node_cpu_capacity_milli,
            "node_cpu_capacity_milli",
        )
        by_memory = nodes_needed(
            footprint.total_mem_request_mi,
            sizing_input.node_mem_capacity_mi,
            "node_mem_capacity_mi",
        )
        recommended, limited_by = recommend_nodes(by_cpu, by_memory, pods)

        cost_low, cost_high = estimate_cost(
            buffered_cores, policy.cost_low_per_core, policy.cost_high_per_core
        )

        window_seconds = sizing_input.report_window.seconds

        limit = sizing_input.namespace_pod_limit
        scaling_blocked = limit is not None and pods > limit
        tps_to_fit = tps / limit if scaling_blocked and limit > 0 else None

        derived = sizing_input.forecast_mode == ForecastMode.DERIVED_FROM_TOTAL

        return SizingReport(
            tps=tps,
            forecast_mode=sizing_input.forecast_mode,
            derivation_window=sizing_input.derivation_window if derived else None,
            tps_per_pod=sizing_input.tps_per_pod,
            total_capacity_tps=capacity_tps,
            required_pods=pods,
            extra_pods_needed=extra_pods,
            utilization_percent=utilization,
            hpa_min=hpa_min,
            hpa_max=hpa_max,
            hpa_capped=policy.hpa_max_cap is not None and pods > policy.hpa_max_cap,
            cpu_trigger_percent=policy.cpu_trigger_percent,
            istio_enabled=sizing_input.istio_enabled,
            per_pod_cpu_request_milli=footprint.per_pod_cpu_request_milli,
            per_pod_cpu_limit_milli=footprint.per_pod_cpu_limit_milli,
            per_pod_mem_request_mi=footprint.per_pod_mem_request_mi,
            per_pod_mem_limit_mi=footprint.per_pod_mem_limit_mi,
            total_cpu_request_milli=footprint.total_cpu_request_milli,
            total_cpu_request_cores=footprint.total_cpu_request_cores,
            buffered_cpu_request_cores=buffered_cores,
            total_mem_request_mi=footprint.total_mem_request_mi,
            istio_inclusive_cpu_limit_milli=footprint.per_pod_cpu_limit_milli * hpa_max,
            node_cpu_capacity_milli=sizing_input.node_cpu_capacity_milli,
            node_mem_capacity_mi=sizing_input.node_mem_capacity_mi,
            nodes_needed_by_cpu=by_cpu,
            nodes_needed_by_memory=by_memory,
            recommended_nodes=recommended,
            limited_by=limited_by,
            estimated_monthly_cost_low=cost_low,
            estimated_monthly_cost_high=cost_high,
            projected_transactions=tuple(
                Projection(window=window, transactions=count)
                for window, count in project_transactions(tps).items()
            ),
            report_window=sizing_input.report_window,
            window_transactions=tps * window_seconds,
            window_capacity_transactions=capacity_tps * window_seconds,
            namespace_pod_limit=limit,
            scaling_blocked=scaling_blocked,
            tps_per_pod_to_fit_limit=tps_to_fit,
        )
