"""Blue-green deployment executor.

Blue-green is done by renaming the live application to ``<app>-venerable``,
pushing the new bits under the original name and mapping its route. The
venerable app keeps serving traffic until the new one is routable, after
which it is deleted. A failed push is rolled back by deleting the new app and
renaming the venerable app back.
"""

import logging
from typing import IO

from bgdeploy.core.exceptions import (
    AuthenticationError,
    CourierError,
    DeleteVenerableError,
    PushError,
    RenameConflictError,
)
from bgdeploy.core.logging import get_logger
from bgdeploy.deploy.courier import Courier
from bgdeploy.deploy.models import DeploymentInfo

logger = get_logger(__name__)

CANNOT_DELETE = "cannot delete"
CANNOT_LOGIN = "cannot login to"
CANNOT_RENAME_APP = "cannot rename, app already exists"
OUTPUT_MESSAGE = "output from Cloud Foundry:\n"


def _text(output: bytes | None) -> str:
    return (output or b"").decode("utf-8", errors="replace")


class DeploymentExecutor:
    """Runs the push, rollback and cleanup steps against a courier.

    The executor keeps no state between calls. Calls for distinct app names
    may run concurrently; calls for the same app name must be serialized by
    the caller.
    """

    def __init__(self, courier: Courier, log: logging.Logger | None = None):
        """Initialize executor.

        Args:
            courier: Platform courier used for every remote operation
            log: Logger for progress messages, defaults to the module logger
        """
        self._courier = courier
        self._log = log or logger

    @property
    def courier(self) -> Courier:
        return self._courier

    def login(self, foundation_url: str, info: DeploymentInfo, out: IO[bytes]) -> None:
        """Log in to a foundation with the credentials in ``info``.

        Raw login output is written to ``out`` whether or not login succeeds.

        Raises:
            AuthenticationError: If the courier could not log in
        """
        self._log.debug(
            "logging into cloud foundry with parameters: "
            "foundation URL: %s, username: %s, org: %s, space: %s",
            foundation_url,
            info.username,
            info.org,
            info.space,
        )

        try:
            login_output = self._courier.login(
                foundation_url,
                info.username,
                info.password,
                info.org,
                info.space,
                info.skip_ssl,
            )
        except CourierError as e:
            out.write(e.output)
            raise AuthenticationError(
                f"{CANNOT_LOGIN} {foundation_url}: {e}",
                foundation_url=foundation_url,
            ) from e

        out.write(login_output)
        self._log.info("logged into cloud foundry %s", foundation_url)

    def push(
        self,
        app_path: str,
        domain: str,
        info: DeploymentInfo,
        out: IO[bytes],
    ) -> None:
        """Push an application using blue-green deployment.

        Args:
            app_path: Directory holding the application bits
            domain: Domain the new app's route is mapped on
            info: Target application and credentials
            out: Sink receiving raw push and map-route output

        Raises:
            RenameConflictError: The live app exists but could not be renamed.
                Nothing was pushed.
            PushError: Pushing or route mapping failed. ``logs`` holds the
                platform logs when they could be fetched.
        """
        app_name = info.app_name
        venerable_name = info.venerable_name

        self._log.info("renaming app from %s to %s", app_name, venerable_name)
        try:
            self._courier.rename(app_name, venerable_name)
        except CourierError as e:
            if self._courier.exists(app_name):
                self._log.error(CANNOT_RENAME_APP)
                raise RenameConflictError(
                    f"{CANNOT_RENAME_APP}: {_text(e.output) or e}",
                ) from e
            self._log.info("new app detected")
        else:
            self._log.info("renamed app from %s to %s", app_name, venerable_name)

        self._log.info("pushing new app %s to %s", app_name, domain)
        self._log.debug("using tempdir for app %s %s", app_name, app_path)
        try:
            push_output = self._courier.push(app_name, app_path, info.instances)
        except CourierError as e:
            out.write(e.output)
            try:
                logs = self._courier.logs(app_name)
            except CourierError as logs_error:
                raise PushError(
                    str(logs_error), logs=logs_error.output or None, step="push",
                ) from e
            raise PushError(OUTPUT_MESSAGE + _text(e.output), logs=logs, step="push") from e

        out.write(push_output)
        self._log.info(OUTPUT_MESSAGE + _text(push_output))

        self._log.debug("mapping route for %s to %s", app_name, domain)
        try:
            map_route_output = self._courier.map_route(app_name, domain)
        except CourierError as e:
            out.write(e.output)
            try:
                logs = self._courier.logs(app_name)
            except CourierError:
                # Fall back to the push output so the operator still gets context
                raise PushError(_text(push_output), logs=None, step="map-route") from e
            raise PushError(str(e), logs=logs, step="map-route") from e

        out.write(map_route_output)
        self._log.debug(_text(map_route_output))
        self._log.info("application route created at %s.%s", app_name, domain)

    def delete_venerable(self, info: DeploymentInfo, foundation_url: str) -> None:
        """Delete the venerable copy of an app after a successful push.

        Raises:
            DeleteVenerableError: If the venerable app could not be deleted
        """
        venerable_name = info.venerable_name

        try:
            self._courier.delete(venerable_name)
        except CourierError as e:
            raise DeleteVenerableError(
                f"{CANNOT_DELETE} {venerable_name}: {e}",
                venerable_name=venerable_name,
            ) from e

        self._log.info("deleted %s", venerable_name)
        self._log.info("finished push successfully on %s", foundation_url)

    def rollback(self, info: DeploymentInfo, first_deploy: bool) -> None:
        """Roll back a failed push.

        Deletes the new app and, unless this was the first deploy, renames the
        venerable app back to the original name. Failures are logged and never
        raised.
        """
        app_name = info.app_name
        venerable_name = info.venerable_name
        self._log.error("rolling back deploy of %s", app_name)

        try:
            self._courier.delete(app_name)
        except CourierError as e:
            self._log.info("unable to delete %s: %s", app_name, e)
        else:
            self._log.info("deleted %s", app_name)

        if first_deploy:
            return

        try:
            self._courier.rename(venerable_name, app_name)
        except CourierError as e:
            self._log.info("unable to rename venerable app %s: %s", venerable_name, e)
        else:
            self._log.info("renamed app from %s to %s", venerable_name, app_name)

    def clean_up(self) -> None:
        """Release the courier's staging resources."""
        self._courier.clean_up()

    def exists(self, app_name: str) -> bool:
        """Check whether an app exists on the logged-in foundation."""
        return self._courier.exists(app_name)
