"""Platform clients."""

from bgdeploy.clients.cf import CloudFoundryCourier

__all__ = ["CloudFoundryCourier"]
