"""Click context object for sharing state across commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from bgdeploy.config import BGDeployConfig, get_default_config
from bgdeploy.core.logging import LogLevel, StructuredLogger, setup_logging
from bgdeploy.core.output import OutputFormatter

if TYPE_CHECKING:
    from bgdeploy.deploy.courier import Courier


class BGDeployContext:
    """Shared context object for bgdeploy commands.

    This object is passed through Click's context mechanism and provides
    access to configuration, the courier, and output utilities.
    """

    def __init__(
        self,
        config: BGDeployConfig | None = None,
        verbose: int = 0,
        quiet: bool = False,
        color: bool | None = None,
        courier: Courier | None = None,
    ):
        self._config = config or get_default_config()

        # Determine log level from verbosity
        if verbose >= 2:
            log_level = LogLevel.DEBUG
        elif verbose == 1:
            log_level = LogLevel.INFO
        elif quiet:
            log_level = LogLevel.ERROR
        else:
            log_level = self._config.global_settings.verbosity

        setup_logging(log_level, rich_output=color is not False)
        self._logger = StructuredLogger("commands")

        self._output = OutputFormatter(color=color, quiet=quiet)

        # Lazy-loaded courier
        self._courier = courier

    @property
    def config(self) -> BGDeployConfig:
        """Get the loaded configuration."""
        return self._config

    @property
    def output(self) -> OutputFormatter:
        """Get the output formatter."""
        return self._output

    @property
    def logger(self) -> StructuredLogger:
        """Logger for command-level messages."""
        return self._logger

    @property
    def courier(self) -> Courier:
        """Get or create the Cloud Foundry courier."""
        if self._courier is None:
            from bgdeploy.clients.cf import CloudFoundryCourier

            self._courier = CloudFoundryCourier(self._config.cf)
        return self._courier


# Click decorator for passing context
pass_context = click.make_pass_decorator(BGDeployContext, ensure=True)
