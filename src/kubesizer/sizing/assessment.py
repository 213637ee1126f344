"""Compare a sizing report with an observed cluster."""

from kubesizer.models.cluster_models import ClusterSnapshot, HeadroomAssessment
from kubesizer.models.sizing_models import SizingReport


def assess_headroom(report: SizingReport, snapshot: ClusterSnapshot) -> HeadroomAssessment:
    """Pod room left on the cluster once the report's extra pods are scheduled."""
    additional = report.extra_pods_needed
    total_after = snapshot.running_pods + additional

    return HeadroomAssessment(
        ready_nodes=snapshot.ready_nodes,
        total_cpu_cores=snapshot.total_cpu_cores,
        total_memory_gi=snapshot.total_memory_gi,
        running_pods=snapshot.running_pods,
        max_pods=snapshot.max_pods,
        additional_pods=additional,
        total_pods_after_scaling=total_after,
        available_pod_room=snapshot.max_pods - total_after,
    )
