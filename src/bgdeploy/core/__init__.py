"""Core utilities and shared components for bgdeploy."""

# Note: Import context lazily to avoid circular imports
# Use: from bgdeploy.core.context import BGDeployContext, pass_context
from bgdeploy.core.exceptions import BGDeployError, ConfigError, CourierError
from bgdeploy.core.output import OutputFormatter

__all__ = [
    "BGDeployError",
    "ConfigError",
    "CourierError",
    "OutputFormatter",
]
