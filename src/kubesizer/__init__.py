"""Kubernetes capacity sizing from traffic forecasts."""

__version__ = "0.1.0"
