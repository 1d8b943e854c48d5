"""Single-foundation blue-green deployment run."""

from datetime import datetime, timezone
from typing import IO

from bgdeploy.core.exceptions import (
    AuthenticationError,
    BGDeployError,
    DeleteVenerableError,
    PushError,
    RenameConflictError,
)
from bgdeploy.core.logging import StructuredLogger
from bgdeploy.deploy.executor import DeploymentExecutor
from bgdeploy.deploy.models import DeploymentInfo, DeploymentResult, DeploymentStatus


class BlueGreenDeployer:
    """Drives a DeploymentExecutor through one deployment.

    Logs in, pushes, then deletes the venerable app on success or rolls back
    on failure. The courier is always cleaned up afterwards.
    """

    def __init__(self, executor: DeploymentExecutor):
        self._executor = executor
        self._logger = StructuredLogger(__name__)

    def deploy(
        self,
        foundation_url: str,
        app_path: str,
        info: DeploymentInfo,
        out: IO[bytes],
    ) -> DeploymentResult:
        """Deploy ``app_path`` as ``info.app_name`` to one foundation.

        Args:
            foundation_url: API endpoint of the target foundation
            app_path: Directory holding the application bits
            info: Target application and credentials
            out: Sink receiving raw platform output

        Returns:
            DeploymentResult describing the outcome
        """
        log = self._logger.bind(app=info.app_name, foundation=foundation_url)
        result = DeploymentResult(app_name=info.app_name, foundation_url=foundation_url)
        result.started_at = datetime.now(timezone.utc)
        result.status = DeploymentStatus.IN_PROGRESS
        self._record(log, result, "started", f"Deploying {info.app_name} to {foundation_url}")

        try:
            self._run(foundation_url, app_path, info, out, result, log)
        finally:
            try:
                self._executor.clean_up()
                self._record(log, result, "cleaned_up", "Released staging resources")
            except (BGDeployError, OSError) as e:
                log.error("clean up failed", step="clean-up", error=e)
                result.add_event("cleanup_failed", f"Clean up failed: {e}")

        result.completed_at = datetime.now(timezone.utc)
        return result

    def _run(
        self,
        foundation_url: str,
        app_path: str,
        info: DeploymentInfo,
        out: IO[bytes],
        result: DeploymentResult,
        log: StructuredLogger,
    ) -> None:
        try:
            self._executor.login(foundation_url, info, out)
        except AuthenticationError as e:
            self._fail(log, result, "login_failed", str(e))
            return
        self._record(log, result, "logged_in", f"Logged into {foundation_url}")

        result.first_deploy = not self._executor.exists(info.app_name)
        if result.first_deploy:
            self._record(log, result, "first_deploy", f"{info.app_name} does not exist yet")

        try:
            self._executor.push(app_path, info.domain, info, out)
        except RenameConflictError as e:
            # Nothing has changed on the platform, so there is nothing to roll back
            self._fail(log, result, "rename_conflict", str(e))
            return
        except PushError as e:
            result.logs = e.logs
            log.warning("push failed, rolling back", step=e.step)
            result.add_event("push_failed", f"Push failed at {e.step}: {e}")
            self._executor.rollback(info, result.first_deploy)
            result.status = DeploymentStatus.ROLLED_BACK
            result.message = str(e)
            self._record(log, result, "rolled_back", f"Rolled back {info.app_name}")
            return
        self._record(log, result, "pushed", f"Pushed {info.app_name} and mapped route on {info.domain}")

        if not result.first_deploy:
            try:
                self._executor.delete_venerable(info, foundation_url)
            except DeleteVenerableError as e:
                self._fail(log, result, "delete_venerable_failed", str(e))
                return
            self._record(log, result, "deleted_venerable", f"Deleted {info.venerable_name}")

        result.status = DeploymentStatus.SUCCEEDED
        self._record(log, result, "completed", "Deployment completed successfully")

    def _record(
        self,
        log: StructuredLogger,
        result: DeploymentResult,
        event_type: str,
        message: str,
    ) -> None:
        result.add_event(event_type, message)
        log.debug(message, step=event_type)

    def _fail(
        self,
        log: StructuredLogger,
        result: DeploymentResult,
        event_type: str,
        message: str,
    ) -> None:
        result.status = DeploymentStatus.FAILED
        result.message = message
        result.add_event(event_type, message)
        log.error("deployment failed", step=event_type, error=message)
