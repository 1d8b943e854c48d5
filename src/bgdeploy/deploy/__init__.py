"""Blue-green deployment orchestration."""

from bgdeploy.deploy.bluegreen import BlueGreenDeployer
from bgdeploy.deploy.courier import Courier
from bgdeploy.deploy.executor import DeploymentExecutor
from bgdeploy.deploy.models import (
    DeploymentEvent,
    DeploymentInfo,
    DeploymentResult,
    DeploymentStatus,
)

__all__ = [
    "BlueGreenDeployer",
    "Courier",
    "DeploymentEvent",
    "DeploymentExecutor",
    "DeploymentInfo",
    "DeploymentResult",
    "DeploymentStatus",
]
