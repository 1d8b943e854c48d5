"""Platform control contract consumed by the deployment executor."""

from abc import ABC, abstractmethod


class Courier(ABC):
    """Abstract base class for platform couriers.

    Every command method returns the raw output of the platform command.
    A failed command raises :class:`~bgdeploy.core.exceptions.CourierError`
    carrying whatever output was produced.
    """

    @abstractmethod
    def login(
        self,
        foundation_url: str,
        username: str,
        password: str,
        org: str,
        space: str,
        skip_ssl: bool,
    ) -> bytes:
        """Authenticate against a foundation."""
        pass

    @abstractmethod
    def rename(self, app_name: str, new_app_name: str) -> bytes:
        """Rename an application."""
        pass

    @abstractmethod
    def push(self, app_name: str, app_path: str, instances: int) -> bytes:
        """Transfer and start the application bits."""
        pass

    @abstractmethod
    def map_route(self, app_name: str, domain: str) -> bytes:
        """Bind the application to a route on ``domain``."""
        pass

    @abstractmethod
    def delete(self, app_name: str) -> bytes:
        """Delete an application. Fails when the app does not exist."""
        pass

    @abstractmethod
    def exists(self, app_name: str) -> bool:
        """Check whether an application exists.

        Side-effect free and must not raise, even after a prior failure.
        """
        pass

    @abstractmethod
    def logs(self, app_name: str) -> bytes:
        """Fetch recent platform-side logs for an application."""
        pass

    @abstractmethod
    def clean_up(self) -> None:
        """Release any staging resources held by the courier."""
        pass
