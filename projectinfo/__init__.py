"""Workspace language, framework and line-statistics detection."""

from .models import LineStats, ProjectDetectionResult
from .orchestrator import Orchestrator

__all__ = ["LineStats", "Orchestrator", "ProjectDetectionResult"]

__version__ = "0.1.0"
