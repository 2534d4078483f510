"""Location adapters - Implementations of DeviceLocationSourcePort.

Available implementations:
- StaticLocationSource: preset coordinate, optional permission denial
"""

from .static_source import StaticLocationSource

__all__ = ["StaticLocationSource"]
