import json

import pytest
from click.testing import CliRunner

from kubesizer import cli as cli_module
from kubesizer.cli import cli


@pytest.fixture
def runner(monkeypatch):
    for name in ("ENVIRONMENT", "K8S_NAMESPACE", "SIZING_TPS_PER_POD", "SIZING_HPA_MIN_FLOOR"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


def invoke(runner, *args, **kwargs):
    return runner.invoke(cli, list(args), obj={}, **kwargs)


class TestSizeCommand:

    def test_direct_tps(self, runner):
        result = invoke(runner, "size", "--tps", "1000", "--tps-per-pod", "400", "--current-pods", "2")
        assert result.exit_code == 0, result.output
        assert "Pods required           : 3" in result.output
        assert "Action required: add 1 pod(s)" in result.output
        assert "HPA min / max           : 3 / 6" in result.output

    def test_prompts_for_tps(self, runner):
        result = invoke(runner, "size", "--tps-per-pod", "400", input="800\n")
        assert result.exit_code == 0, result.output
        assert "Forecasted TPS" in result.output
        assert "Pods required           : 2" in result.output

    def test_derived_from_total(self, runner):
        result = invoke(runner, "size", "--total-transactions", "2592000", "--period-days", "30",
                        "--window", "8h", "--tps-per-pod", "1")
        assert result.exit_code == 0, result.output
        assert "Required TPS            : 3.00" in result.output
        assert "mode: 8h" in result.output

    def test_json_output(self, runner):
        result = invoke(runner, "size", "--tps", "40000", "--json")
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["sizing_report"]["required_pods"] == 100
        assert payload["sizing_report"]["recommended_nodes"] == 13

    def test_report_file(self, runner, tmp_path):
        output = tmp_path / "reports" / "sizing.json"
        result = invoke(runner, "size", "--tps", "1000", "--output", str(output))
        assert result.exit_code == 0, result.output
        payload = json.loads(output.read_text())
        assert payload["sizing_report"]["required_pods"] == 3

    def test_production_policy(self, runner):
        result = invoke(runner, "size", "--tps", "0", "--production-policy")
        assert result.exit_code == 0, result.output
        assert "HPA min / max           : 3 / 6" in result.output

    def test_namespace_limit_warning(self, runner):
        result = invoke(runner, "size", "--tps", "1000", "--namespace-pod-limit", "2")
        assert result.exit_code == 0, result.output
        assert "exceed the namespace limit of 2" in result.output
        assert "500.00 TPS" in result.output

    def test_invalid_tps_per_pod(self, runner):
        result = invoke(runner, "size", "--tps", "1000", "--tps-per-pod", "0")
        assert result.exit_code == 1
        assert "tps_per_pod must be > 0" in result.output

    @pytest.mark.parametrize("value", ["nan", "inf"])
    def test_non_finite_tps(self, runner, value):
        result = invoke(runner, "size", "--tps", value)
        assert result.exit_code == 1
        assert "Invalid input: additional_tps must be a finite number" in result.output

    def test_capped_hpa_warning(self, runner):
        result = invoke(runner, "size", "--tps", "40000", "--production-policy")
        assert result.exit_code == 0, result.output
        assert "HPA min / max           : 64 / 64" in result.output
        assert "100 pods required but HPA max is capped at 64" in result.output


class TestAssessCommand:

    @pytest.fixture(autouse=True)
    def fake_cluster(self, monkeypatch, fake_inspector):
        class FakeFactory:
            def __init__(self, config):
                self.config = config

            def create_client(self):
                return fake_inspector

        monkeypatch.setattr(cli_module, "KubernetesClientFactory", FakeFactory)

    def test_workload_pods_drive_extra_pods(self, runner):
        result = invoke(runner, "assess", "--tps", "1000", "--tps-per-pod", "400", "--current-pods", "1")
        assert result.exit_code == 0, result.output
        assert "Action required: add 2 pod(s)" in result.output
        assert "Current running pods    : 200" in result.output
        assert "Pods after scaling      : 202" in result.output
        assert "Available pod room      : 18" in result.output
        assert "payments-api" in result.output

    def test_prompts_for_workload_pods(self, runner):
        result = invoke(runner, "assess", "--tps", "1000", "--tps-per-pod", "400", input="1\n")
        assert result.exit_code == 0, result.output
        assert "Current pods for the workload" in result.output
        assert "Available pod room      : 18" in result.output

    def test_running_pods_counted_across_all_namespaces(self, runner, fake_inspector):
        result = invoke(runner, "assess", "--tps", "1000", "--current-pods", "3", "--namespace", "payments")
        assert result.exit_code == 0, result.output
        assert fake_inspector.snapshot_namespaces == [None]
        assert "payments-api" in result.output
        assert "orders-worker" not in result.output
        assert "Available pod room      : 20" in result.output

    def test_hpa_filter(self, runner):
        result = invoke(runner, "assess", "--tps", "1000", "--current-pods", "0", "--hpa-filter", "worker")
        assert result.exit_code == 0, result.output
        assert "orders-worker" in result.output
        assert "payments-api" not in result.output

    def test_json_includes_cluster_assessment(self, runner):
        result = invoke(runner, "assess", "--tps", "1000", "--current-pods", "0", "--json")
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["cluster_assessment"]["max_pods"] == 220
        assert payload["cluster_assessment"]["additional_pods"] == 3
        assert len(payload["hpas"]) == 2
