# src/kubesizer/cli.py
"""Capacity sizing CLI."""

import asyncio
import functools
import json
from pathlib import Path
from typing import Any, Dict, Optional

import click
import structlog

from kubesizer.clients.kubernetes import KubernetesClientFactory
from kubesizer.config.settings import Settings
from kubesizer.core.exceptions import InvalidInput, KubeSizerException
from kubesizer.core.utils import format_cpu, setup_logging
from kubesizer.models.cluster_models import HeadroomAssessment
from kubesizer.models.sizing_models import (
    DerivationWindow,
    ForecastMode,
    ReportWindow,
    SizingInput,
    SizingReport,
)
from kubesizer.sizing import CapacitySizer, assess_headroom

logger = structlog.get_logger(__name__)


def sizing_options(func):
    """Options shared by every command that builds a SizingInput."""
    options = [
        click.option('--tps', type=float, help='Forecasted additional TPS'),
        click.option('--total-transactions', type=float, help='Derive TPS from this transaction total'),
        click.option('--period-days', type=float, help='Days covered by --total-transactions (0 or unset = 1)'),
        click.option('--window', type=click.Choice([w.value for w in DerivationWindow]), default='24x7',
                     help='Traffic hours per day when deriving TPS (default: 24x7)'),
        click.option('--tps-per-pod', type=float, help='Tested TPS one pod can handle'),
        click.option('--namespace-pod-limit', type=int, help='Namespace pod limit to check against'),
        click.option('--istio/--no-istio', default=None, help='Add Istio sidecar overhead'),
        click.option('--burst', type=float, help='HPA burst factor (default: 2.0)'),
        click.option('--report-window', type=click.Choice([w.value for w in ReportWindow]), default='1h',
                     help='Window for the headline transaction count (default: 1h)'),
        click.option('--production-policy', is_flag=True, help='Apply HPA min floor 3 / max cap 64'),
        click.option('--output', '-o', help='Write the report as JSON to this file'),
        click.option('--json', 'as_json', is_flag=True, help='Print the report as JSON'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_sizing_input(settings: Settings, params: Dict[str, Any],
                       current_pods: int, node_cpu: int, node_mem: int) -> SizingInput:
    """Merge command line values over settings defaults."""
    defaults = settings.sizing

    if params.get('total_transactions') is not None:
        forecast = {
            'forecast_mode': ForecastMode.DERIVED_FROM_TOTAL,
            'total_transactions': params['total_transactions'],
            'period_days': params.get('period_days'),
            'derivation_window': DerivationWindow(params['window']),
        }
    else:
        tps = params.get('tps')
        if tps is None:
            tps = click.prompt('Forecasted TPS', type=float, default=0.0)
        forecast = {'forecast_mode': ForecastMode.DIRECT_TPS, 'additional_tps': tps}

    istio = params.get('istio')
    return SizingInput(
        **forecast,
        tps_per_pod=_first(params.get('tps_per_pod'), defaults.tps_per_pod),
        current_pods=current_pods,
        namespace_pod_limit=params.get('namespace_pod_limit'),
        istio_enabled=defaults.istio_enabled if istio is None else istio,
        node_cpu_capacity_milli=node_cpu,
        node_mem_capacity_mi=node_mem,
        hpa_burst_factor=_first(params.get('burst'), defaults.hpa_burst_factor),
        report_window=ReportWindow(params['report_window']),
        pod_spec=settings.pod_spec(),
        policy=settings.policy(production=params.get('production_policy', False)),
    )


def _first(value, default):
    return default if value is None else value


def _write_report(report: SizingReport, output: Optional[str], as_json: bool,
                  extra: Optional[Dict[str, Any]] = None) -> None:
    payload = {"sizing_report": report.model_dump(mode="json")}
    if extra:
        payload.update(extra)

    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w') as f:
            json.dump(payload, f, indent=2, default=str)
        click.echo(f"📁 Report saved to: {output_path}")

    if as_json:
        click.echo(json.dumps(payload, indent=2, default=str))


def echo_report(report: SizingReport) -> None:
    """Print the sizing report summary."""
    mode = report.derivation_window.value if report.derivation_window else "custom"
    click.echo("📊 Production Cluster Sizing Report")
    click.echo(f"   Traffic forecast (mode: {mode})")
    click.echo(f"   • Required TPS            : {report.tps:.2f}")
    click.echo(f"   • TPS per pod             : {report.tps_per_pod:.2f}")
    click.echo(f"   • Cluster capacity (TPS)  : {report.total_capacity_tps:.2f}")
    click.echo(f"   • Pods required           : {report.required_pods}")
    click.echo(f"   • Extra pods needed       : {report.extra_pods_needed}")
    if report.utilization_percent is not None:
        click.echo(f"   • Utilization             : {report.utilization_percent:.2f}%")

    click.echo("   Horizontal Pod Autoscaler")
    click.echo(f"   • HPA min / max           : {report.hpa_min} / {report.hpa_max}")
    click.echo(f"   • CPU trigger             : {report.cpu_trigger_percent}%")
    if report.hpa_capped:
        click.echo(f"   ⚠️  {report.required_pods} pods required but HPA max is capped at {report.hpa_max}")

    click.echo(f"   Per-pod resources (Istio: {'yes' if report.istio_enabled else 'no'})")
    click.echo(f"   • CPU request / limit     : {report.per_pod_cpu_request_milli}m / {report.per_pod_cpu_limit_milli}m")
    click.echo(f"   • Memory request / limit  : {report.per_pod_mem_request_mi}Mi / {report.per_pod_mem_limit_mi}Mi")

    click.echo("   Cluster totals (requests)")
    click.echo(f"   • CPU                     : {format_cpu(report.total_cpu_request_milli)}")
    click.echo(f"   • CPU (+buffer)           : {report.buffered_cpu_request_cores:.2f} cores")
    click.echo(f"   • Memory                  : {report.total_mem_request_mi}Mi")
    click.echo(f"   • CPU limit at HPA max    : {format_cpu(report.istio_inclusive_cpu_limit_milli)}")

    click.echo("   Node sizing")
    click.echo(f"   • Nodes needed (CPU)      : {report.nodes_needed_by_cpu}")
    click.echo(f"   • Nodes needed (memory)   : {report.nodes_needed_by_memory}")
    click.echo(f"   • ➜ Recommended nodes     : {report.recommended_nodes} (limited by {report.limited_by.value})")

    click.echo(f"   💰 Monthly cost (est)     : ${report.estimated_monthly_cost_low:.2f} – "
               f"${report.estimated_monthly_cost_high:.2f}")

    click.echo(f"   Transactions in {report.report_window.value}: ~{report.window_transactions:.2f} "
               f"(capacity ~{report.window_capacity_transactions:.2f})")
    for projection in report.projected_transactions:
        click.echo(f"   • {projection.window.value:<8}: ~{projection.transactions:.2f}")

    if report.extra_pods_needed > 0:
        click.echo(f"⚠️  Action required: add {report.extra_pods_needed} pod(s) to meet forecast.")
    else:
        click.echo(f"✅ Current pods are sufficient (need {report.required_pods}).")

    if report.scaling_blocked:
        needed = (f"{report.tps_per_pod_to_fit_limit:.2f}"
                  if report.tps_per_pod_to_fit_limit is not None else "n/a")
        click.echo(f"⛔ Required pods exceed the namespace limit of {report.namespace_pod_limit}; "
                   f"each pod would need {needed} TPS to fit.")


def echo_headroom(assessment: HeadroomAssessment) -> None:
    click.echo("🌐 Cluster Assessment")
    click.echo(f"   • Nodes ready             : {assessment.ready_nodes}")
    click.echo(f"   • Total CPU (cores)       : {assessment.total_cpu_cores:.2f}")
    click.echo(f"   • Total memory (Gi)       : {assessment.total_memory_gi:.0f}")
    click.echo(f"   • Current running pods    : {assessment.running_pods}")
    click.echo(f"   • Estimated max pods      : {assessment.max_pods}")
    click.echo(f"   • Additional pods needed  : {assessment.additional_pods}")
    click.echo(f"   • Pods after scaling      : {assessment.total_pods_after_scaling}")
    click.echo(f"   • Available pod room      : {assessment.available_pod_room}")
    if assessment.needs_more_nodes:
        click.echo("⚠️  Cluster may need additional nodes to support scaling.")
    else:
        click.echo("✅ Cluster has enough capacity (no node increase required).")


def echo_hpas(hpas) -> None:
    click.echo("📈 HPA Status")
    click.echo(f"   {'NAMESPACE':<18} {'HPA NAME':<40} {'CPU(%)':<7} {'MEM(%)':<7} {'MIN':<4} {'CUR':<4} {'MAX':<4}")
    for hpa in hpas:
        cells = [hpa.cpu_current_percent, hpa.memory_current_percent,
                 hpa.min_replicas, hpa.current_replicas, hpa.max_replicas]
        cpu, mem, low, cur, high = ["n/a" if c is None else str(c) for c in cells]
        click.echo(f"   {hpa.namespace:<18} {hpa.name:<40} {cpu:<7} {mem:<7} {low:<4} {cur:<4} {high:<4}")


def handle_errors(func):
    """Turn kubesizer errors into a message and exit code 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except InvalidInput as e:
            logger.debug("Sizing input rejected", field=e.field, value=e.value)
            click.echo(f"❌ Invalid input: {e}")
            raise SystemExit(1)
        except KubeSizerException as e:
            logger.error("Command failed", error=str(e))
            click.echo(f"❌ {e}")
            raise SystemExit(1)
    return wrapper


@click.group()
@click.option('--log-config', help='YAML logging configuration file')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.pass_context
def cli(ctx, log_config, debug, verbose):
    """Kubernetes capacity sizing from traffic forecasts."""
    ctx.ensure_object(dict)

    settings = Settings.create_from_env()
    if debug:
        settings.debug = True

    log_level = "DEBUG" if verbose or debug else settings.log_level.value
    setup_logging(
        log_level=log_level,
        config_path=log_config or settings.log_config_path,
        json_logs=settings.log_json,
    )

    ctx.obj['settings'] = settings
    ctx.obj['verbose'] = verbose


@cli.command()
@sizing_options
@click.option('--current-pods', type=int, default=0, help='Pods currently running for the workload')
@click.option('--node-cpu', type=int, help='Node CPU capacity in millicores (default: 4000)')
@click.option('--node-mem', type=int, help='Node memory capacity in Mi (default: 16384)')
@click.pass_context
@handle_errors
def size(ctx, output, as_json, current_pods, node_cpu, node_mem, **params):
    """
    Size pods, HPA bounds, nodes and cost for a traffic forecast.

    Example:
        kubesizer size --tps 1000 --tps-per-pod 400 --current-pods 2
        kubesizer size --total-transactions 2592000 --period-days 30 --window 8h
    """
    settings = ctx.obj['settings']
    sizing_input = build_sizing_input(
        settings,
        params,
        current_pods=current_pods,
        node_cpu=_first(node_cpu, settings.sizing.node_cpu_capacity_milli),
        node_mem=_first(node_mem, settings.sizing.node_mem_capacity_mi),
    )

    report = CapacitySizer().size(sizing_input)
    logger.debug("Sizing completed", required_pods=report.required_pods, nodes=report.recommended_nodes)

    if not as_json:
        echo_report(report)
    _write_report(report, output, as_json)


@cli.command()
@sizing_options
@click.option('--namespace', '-n', help='Show HPAs in namespaces containing this text')
@click.option('--hpa-filter', default='', help='Show HPAs whose name contains this text')
@click.option('--current-pods', type=int, prompt='Current pods for the workload',
              help='Pods currently running for the workload being sized')
@click.pass_context
@handle_errors
def assess(ctx, output, as_json, namespace, hpa_filter, current_pods, **params):
    """
    Size a forecast against the live cluster and report remaining pod room.

    Running pods (all namespaces), pod capacity and node size are read from
    the current kubeconfig context (K8S_KUBECONFIG_PATH / K8S_CONTEXT override
    it). The workload's own pod count comes from --current-pods.
    """
    settings = ctx.obj['settings']
    verbose = ctx.obj.get('verbose', False)
    namespace = namespace or settings.kubernetes.namespace

    async def inspect_cluster():
        factory = KubernetesClientFactory(settings.kubernetes.model_dump())
        async with factory.create_client() as k8s:
            if verbose:
                click.echo("🔍 Reading cluster capacity...")
            snapshot = await k8s.cluster_snapshot()
            node = await k8s.node_capacity()
            hpas = await k8s.hpa_statuses(namespace or "", hpa_filter)
            return snapshot, node, hpas

    snapshot, node, hpas = asyncio.run(inspect_cluster())

    sizing_input = build_sizing_input(
        settings,
        params,
        current_pods=current_pods,
        node_cpu=node.cpu_milli,
        node_mem=node.memory_mi,
    )
    report = CapacitySizer().size(sizing_input)
    assessment = assess_headroom(report, snapshot)

    if not as_json:
        echo_report(report)
        echo_headroom(assessment)
        echo_hpas(hpas)

    _write_report(report, output, as_json, extra={
        "cluster_assessment": assessment.model_dump(mode="json"),
        "hpas": [h.model_dump(mode="json") for h in hpas],
    })


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
