"""Tiled2Unity export job front end."""

from .app import APP_VERSION as __version__
from .diagnostics import DiagnosticBroadcaster, DiagnosticLine, Severity
from .errors import FailureKind, ResolutionFailure
from .job import ExportConfiguration, exported_filename
from .options import parse_options
from .resolver import JobResolver, ProjectFilesystem, Resolution
from .vector3d import Vector3D

__all__ = [
    "DiagnosticBroadcaster",
    "DiagnosticLine",
    "Severity",
    "FailureKind",
    "ResolutionFailure",
    "ExportConfiguration",
    "exported_filename",
    "parse_options",
    "JobResolver",
    "ProjectFilesystem",
    "Resolution",
    "Vector3D",
]
