"""bgdeploy - zero-downtime blue-green deployments for Cloud Foundry."""

__version__ = "0.1.0"
