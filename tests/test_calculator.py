import pytest

from kubesizer.core.exceptions import InvalidInput
from kubesizer.models.sizing_models import (
    DerivationWindow,
    ForecastMode,
    LimitingResource,
    PodSpec,
    ProjectionWindow,
    SizingInput,
)
from kubesizer.sizing.calculator import (
    derive_tps,
    estimate_cost,
    hpa_bounds,
    nodes_needed,
    project_transactions,
    recommend_nodes,
    required_pods,
    resource_footprint,
)


class TestDeriveTps:
    """Forecast TPS from direct input or a transaction total."""

    def test_direct_mode_returns_additional_tps(self):
        assert derive_tps(SizingInput(additional_tps=123.5)) == 123.5

    def test_total_over_thirty_days_24x7(self):
        sizing_input = SizingInput(
            forecast_mode=ForecastMode.DERIVED_FROM_TOTAL,
            total_transactions=2_592_000,
            period_days=30,
            derivation_window=DerivationWindow.TWENTY_FOUR_BY_SEVEN,
        )
        assert derive_tps(sizing_input) == 1.0

    def test_total_over_thirty_days_eight_hour_day(self):
        sizing_input = SizingInput(
            forecast_mode=ForecastMode.DERIVED_FROM_TOTAL,
            total_transactions=2_592_000,
            period_days=30,
            derivation_window=DerivationWindow.EIGHT_HOUR_DAY,
        )
        assert derive_tps(sizing_input) == 3.0

    @pytest.mark.parametrize("period_days", [None, 0])
    def test_missing_or_zero_period_counts_as_one_day(self, period_days):
        sizing_input = SizingInput(
            forecast_mode=ForecastMode.DERIVED_FROM_TOTAL,
            total_transactions=86_400,
            period_days=period_days,
        )
        assert derive_tps(sizing_input) == 1.0

    def test_negative_period_is_rejected(self):
        sizing_input = SizingInput(
            forecast_mode=ForecastMode.DERIVED_FROM_TOTAL,
            total_transactions=86_400,
            period_days=-2,
        )
        with pytest.raises(InvalidInput) as exc:
            derive_tps(sizing_input)
        assert exc.value.field == "period_days"

    def test_is_repeatable(self):
        sizing_input = SizingInput(
            forecast_mode=ForecastMode.DERIVED_FROM_TOTAL,
            total_transactions=1_000_000,
            period_days=7,
        )
        first = required_pods(derive_tps(sizing_input), 0.5)
        second = required_pods(derive_tps(sizing_input), 0.5)
        assert first == second


class TestRequiredPods:

    def test_rounds_up_partial_pod(self):
        assert required_pods(1000, 400) == 3

    def test_exact_quotient_is_not_bumped(self):
        assert required_pods(800, 400) == 2

    def test_zero_traffic_needs_no_pods(self):
        assert required_pods(0, 400) == 0

    def test_decimal_inputs_do_not_pick_up_float_error(self):
        assert required_pods(1.1, 0.1) == 11
        assert required_pods(0.3, 0.1) == 3

    @pytest.mark.parametrize("tps_per_pod", [0, -5])
    def test_non_positive_tps_per_pod_fails(self, tps_per_pod):
        with pytest.raises(InvalidInput) as exc:
            required_pods(1000, tps_per_pod)
        assert exc.value.field == "tps_per_pod"
        assert "must be > 0" in str(exc.value)

    def test_zero_divisor_fails_even_without_traffic(self):
        with pytest.raises(InvalidInput):
            required_pods(0, 0)

    @pytest.mark.parametrize("tps,tps_per_pod", [
        (1, 400), (399.99, 400), (400.01, 400), (12345.6, 17.3), (0.001, 1000), (50, 0.7),
    ])
    def test_ceiling_property(self, tps, tps_per_pod):
        pods = required_pods(tps, tps_per_pod)
        assert pods * tps_per_pod >= tps
        assert (pods - 1) * tps_per_pod < tps


class TestHpaBounds:

    def test_burst_doubles_required_pods(self):
        assert hpa_bounds(3, 2.0) == (3, 6)

    def test_no_floor_keeps_required_pods_as_min(self):
        assert hpa_bounds(1, 2.0, min_floor=0) == (1, 2)

    def test_production_floor(self):
        assert hpa_bounds(2, 2.0, min_floor=3) == (3, 6)

    def test_zero_pods_without_floor_keeps_max_at_one(self):
        assert hpa_bounds(0, 2.0) == (0, 1)

    def test_cap_limits_max(self):
        assert hpa_bounds(40, 2.0, max_cap=64) == (40, 64)

    def test_cap_also_limits_min(self):
        assert hpa_bounds(100, 2.0, min_floor=3, max_cap=64) == (64, 64)

    def test_floor_above_cap_fails(self):
        with pytest.raises(InvalidInput) as exc:
            hpa_bounds(1, 2.0, min_floor=10, max_cap=5)
        assert exc.value.field == "hpa_min_floor"

    def test_non_finite_burst_fails(self):
        with pytest.raises(InvalidInput):
            hpa_bounds(3, float("nan"))

    def test_fractional_burst_rounds_up(self):
        assert hpa_bounds(10, 1.1) == (10, 11)
        assert hpa_bounds(5, 1.5) == (5, 8)

    def test_non_positive_burst_fails(self):
        with pytest.raises(InvalidInput) as exc:
            hpa_bounds(3, 0)
        assert exc.value.field == "hpa_burst_factor"


class TestResourceFootprint:

    def test_without_istio(self):
        footprint = resource_footprint(3, False, PodSpec())
        assert footprint.per_pod_cpu_request_milli == 100
        assert footprint.per_pod_cpu_limit_milli == 1000
        assert footprint.total_cpu_request_milli == 300
        assert footprint.total_mem_request_mi == 6000
        assert footprint.total_mem_limit_mi == 12000
        assert footprint.total_cpu_request_cores == pytest.approx(0.3)

    def test_istio_adds_sidecar_overhead(self):
        footprint = resource_footprint(3, True, PodSpec())
        assert footprint.per_pod_cpu_request_milli == 250
        assert footprint.per_pod_cpu_limit_milli == 1100
        assert footprint.per_pod_mem_request_mi == 2000
        assert footprint.total_cpu_request_milli == 750
        assert footprint.total_cpu_limit_milli == 3300

    def test_sidecar_memory_overhead_is_configurable(self):
        spec = PodSpec(memory_limit_mi=2000, istio_memory_request_mi=128, istio_memory_limit_mi=256)
        footprint = resource_footprint(2, True, spec)
        assert footprint.per_pod_mem_request_mi == 2128
        assert footprint.per_pod_mem_limit_mi == 2256
        assert footprint.total_mem_request_mi == 4256

    def test_zero_pods(self):
        footprint = resource_footprint(0, True, PodSpec())
        assert footprint.total_cpu_request_milli == 0
        assert footprint.total_mem_request_mi == 0


class TestNodesNeeded:

    def test_partial_node_rounds_up(self):
        assert nodes_needed(1000, 4000) == 1

    def test_exact_fit(self):
        assert nodes_needed(8000, 4000) == 2

    def test_one_over_needs_another_node(self):
        assert nodes_needed(8001, 4000) == 3

    def test_nothing_requested(self):
        assert nodes_needed(0, 4000) == 0

    def test_zero_capacity_names_the_field(self):
        with pytest.raises(InvalidInput) as exc:
            nodes_needed(1000, 0, "node_cpu_capacity_milli")
        assert exc.value.field == "node_cpu_capacity_milli"

    @pytest.mark.parametrize("total,capacity", [(1, 4000), (16385, 16384), (200000, 16384), (7.5, 2.5)])
    def test_capacity_covers_total(self, total, capacity):
        assert nodes_needed(total, capacity) * capacity >= total


class TestRecommendNodes:

    def test_memory_bound(self):
        assert recommend_nodes(7, 13, 100) == (13, LimitingResource.MEMORY)

    def test_cpu_bound(self):
        assert recommend_nodes(5, 2, 10) == (5, LimitingResource.CPU)

    def test_no_pods_no_nodes(self):
        assert recommend_nodes(0, 0, 0) == (0, LimitingResource.NONE)

    def test_at_least_one_node_when_pods_are_required(self):
        nodes, _ = recommend_nodes(0, 0, 3)
        assert nodes == 1


class TestProjectionsAndCost:

    def test_projection_windows(self):
        projections = project_transactions(1.0)
        assert projections == {
            ProjectionWindow.ONE_MINUTE: 60,
            ProjectionWindow.ONE_HOUR: 3600,
            ProjectionWindow.EIGHT_HOURS: 28800,
            ProjectionWindow.ONE_DAY: 86400,
            ProjectionWindow.THIRTY_DAYS_24H: 2_592_000,
            ProjectionWindow.THIRTY_DAYS_8H: 864_000,
        }

    def test_selected_windows_only(self):
        projections = project_transactions(2.5, [ProjectionWindow.ONE_MINUTE])
        assert projections == {ProjectionWindow.ONE_MINUTE: 150}

    def test_cost_is_linear_in_cores(self):
        assert estimate_cost(2.0, 107, 285) == (214, 570)
        assert estimate_cost(0, 107, 285) == (0, 0)
