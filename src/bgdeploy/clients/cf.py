"""Courier backed by the Cloud Foundry CLI."""

import os
import shutil
import subprocess
import tempfile

from bgdeploy.config import CloudFoundryConfig
from bgdeploy.core.exceptions import CourierError
from bgdeploy.core.logging import get_logger
from bgdeploy.deploy.courier import Courier

logger = get_logger(__name__)


class CloudFoundryCourier(Courier):
    """Runs ``cf`` commands in an isolated CF_HOME.

    Each courier gets its own temporary CF_HOME so the login session and
    target of one courier never leak into another. ``clean_up`` removes it.
    """

    def __init__(self, config: CloudFoundryConfig | None = None):
        self._config = config or CloudFoundryConfig()
        self._cf_home: str | None = None

    @property
    def cf_home(self) -> str:
        """Temporary CF_HOME, created on first use."""
        if self._cf_home is None:
            self._cf_home = tempfile.mkdtemp(prefix="bgdeploy-cf-")
            logger.debug("created CF_HOME %s", self._cf_home)
        return self._cf_home

    def _check_cf(self) -> str:
        """Check if the cf CLI is installed and return its path."""
        cf_path = shutil.which(self._config.binary)
        if not cf_path:
            raise CourierError(
                f"Cloud Foundry CLI '{self._config.binary}' not found. "
                "Install from: https://github.com/cloudfoundry/cli"
            )
        return cf_path

    def _run(
        self,
        args: list[str],
        redact: int | None = None,
        cwd: str | None = None,
    ) -> bytes:
        """Run a cf command and return its combined output.

        Args:
            args: Arguments after the cf binary
            redact: Index into ``args`` whose value is hidden in errors and logs
            cwd: Working directory, cf push reads manifest.yml from here

        Raises:
            CourierError: If the command cannot run or exits non-zero
        """
        cmd = [self._check_cf()] + args

        shown = list(args)
        if redact is not None:
            shown[redact] = "********"
        command = "cf " + " ".join(shown)
        logger.debug("running %s", command)

        run_env = os.environ.copy()
        run_env["CF_HOME"] = self.cf_home
        run_env["CF_COLOR"] = "false"

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                cwd=cwd,
                env=run_env,
                timeout=self._config.timeout,
            )
        except subprocess.TimeoutExpired as e:
            output = (e.stdout or b"") + (e.stderr or b"")
            raise CourierError(
                f"{command} timed out after {self._config.timeout}s",
                output=output,
            )
        except (subprocess.SubprocessError, OSError) as e:
            raise CourierError(f"Failed to run {command}: {e}")

        output = result.stdout + result.stderr
        if result.returncode != 0:
            raise CourierError(
                f"{command} exited with status {result.returncode}",
                output=output,
            )
        return output

    def login(
        self,
        foundation_url: str,
        username: str,
        password: str,
        org: str,
        space: str,
        skip_ssl: bool,
    ) -> bytes:
        args = [
            "login",
            "-a", foundation_url,
            "-u", username,
            "-p", password,
            "-o", org,
            "-s", space,
        ]
        if skip_ssl:
            args.append("--skip-ssl-validation")
        return self._run(args, redact=6)

    def rename(self, app_name: str, new_app_name: str) -> bytes:
        return self._run(["rename", app_name, new_app_name])

    def push(self, app_name: str, app_path: str, instances: int) -> bytes:
        return self._run(
            ["push", app_name, "-p", app_path, "-i", str(instances)],
            cwd=app_path,
        )

    def map_route(self, app_name: str, domain: str) -> bytes:
        return self._run(["map-route", app_name, domain, "--hostname", app_name])

    def delete(self, app_name: str) -> bytes:
        # cf delete exits 0 for a missing app
        if not self.exists(app_name):
            raise CourierError(f"cannot delete {app_name}: app does not exist")
        return self._run(["delete", app_name, "-f"])

    def exists(self, app_name: str) -> bool:
        try:
            self._run(["app", app_name])
        except CourierError as e:
            logger.debug("app %s not found: %s", app_name, e)
            return False
        return True

    def logs(self, app_name: str) -> bytes:
        return self._run(["logs", app_name, "--recent"])

    def clean_up(self) -> None:
        if self._cf_home is None:
            return
        shutil.rmtree(self._cf_home)
        logger.debug("removed CF_HOME %s", self._cf_home)
        self._cf_home = None
