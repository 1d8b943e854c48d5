"""Artifact preparation."""

from bgdeploy.artifacts.extractor import Extractor

__all__ = ["Extractor"]
