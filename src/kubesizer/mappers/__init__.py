from .resource_mapper import ResourceDataMapper

__all__ = ["ResourceDataMapper"]
