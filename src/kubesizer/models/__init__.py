from .sizing_models import *
from .cluster_models import *
from .validation import *

__all__ = [
    "ForecastMode",
    "DerivationWindow",
    "ReportWindow",
    "ProjectionWindow",
    "LimitingResource",
    "PodSpec",
    "SizingPolicy",
    "SizingInput",
    "ResourceFootprint",
    "Projection",
    "SizingReport",
    "NodeCapacity",
    "HpaStatus",
    "ClusterSnapshot",
    "HeadroomAssessment",
    "validate_sizing_input",
    "require_positive",
    "require_non_negative",
]
