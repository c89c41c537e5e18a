"""Infrastructure wiring."""

from blob_quickstart.infrastructure.factory import InfrastructureFactory

__all__ = ["InfrastructureFactory"]
