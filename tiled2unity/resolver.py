"""
Job resolver - turns raw invocation tokens into a validated export job.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence
import logging

from .app import APP_VERSION
from .diagnostics import DiagnosticBroadcaster
from .errors import FailureKind, ResolutionFailure, make_failure
from .job import DEFAULT_SCALE, PROJECT_MARKER, ExportConfiguration
from .options import OptionSyntaxError, help_lines, parse_float_default, parse_options
from .settings import LAST_VERTEX_SCALE_KEY, SettingsStore

logger = logging.getLogger(__name__)

MISSING_INPUT_HINTS = (
    "  If using the GUI, try opening a TMX file now",
    "  If using the command line, provide a path to a TMX file",
    "  If using from Tiled Map Editor, try adding %mapfile to the command",
)


class ProjectFilesystem:
    """Host filesystem checks used during resolution."""

    def __init__(self, marker: str = PROJECT_MARKER):
        self.marker = marker

    def absolute(self, token: str) -> str:
        return os.path.abspath(token)

    def file_exists(self, path: str) -> bool:
        return Path(path).is_file()

    def dir_exists(self, path: str) -> bool:
        return Path(path).is_dir()

    def has_project_marker(self, path: str) -> bool:
        return (Path(path) / self.marker).is_dir()


@dataclass
class Resolution:
    configuration: ExportConfiguration
    failure: Optional[ResolutionFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class JobResolver:
    """Validate and complete an export job, reporting through a broadcaster.

    Each failure writes an error line and the full help text before the
    failed Resolution is returned, so a non-interactive run always leaves
    an explanation in the log.
    """

    def __init__(
        self,
        broadcaster: DiagnosticBroadcaster,
        settings: SettingsStore,
        filesystem: Optional[ProjectFilesystem] = None,
        version: str = APP_VERSION,
    ):
        self.broadcaster = broadcaster
        self.settings = settings
        self.filesystem = filesystem if filesystem is not None else ProjectFilesystem()
        self.version = version

    def resolve(self, args: Sequence[str]) -> Resolution:
        config = ExportConfiguration()
        try:
            config, leftovers = parse_options(args, config)
        except OptionSyntaxError as e:
            return self._fail(config, make_failure(FailureKind.INVALID_OPTION, detail=str(e)))

        self.broadcaster.verbose_enabled = config.verbose
        self._resolve_scale(config)

        # First leftover is the TMX file being exported
        if not leftovers:
            return self._fail(config, make_failure(FailureKind.MISSING_INPUT), MISSING_INPUT_HINTS)

        tmx_path = self.filesystem.absolute(leftovers.pop(0))
        if not self.filesystem.file_exists(tmx_path):
            return self._fail(config, make_failure(FailureKind.INPUT_NOT_FOUND, token=tmx_path, path=tmx_path))
        config.tmx_path = tmx_path

        # Next leftover is the project we are exporting to
        if leftovers:
            export_dir = self.filesystem.absolute(leftovers.pop(0))
            if not self.filesystem.dir_exists(export_dir):
                failure = make_failure(FailureKind.OUTPUT_DIR_NOT_FOUND, token=export_dir, path=export_dir)
                return self._fail(config, failure)
            if not self.filesystem.has_project_marker(export_dir):
                failure = make_failure(FailureKind.OUTPUT_DIR_INVALID, token=export_dir, path=export_dir)
                return self._fail(config, failure)
            config.export_dir = export_dir
        elif config.auto_export:
            return self._fail(config, make_failure(FailureKind.OUTPUT_DIR_REQUIRED))

        if leftovers:
            extra = leftovers[0]
            return self._fail(config, make_failure(FailureKind.TOO_MANY_ARGUMENTS, token=extra))

        if config.help:
            self.print_help()

        self.broadcaster.verbose("Scale: {0}", config.scale)
        self.broadcaster.verbose("Texel bias: {0}", config.texel_bias)
        self.broadcaster.verbose("TMX path: {0}", config.tmx_path)
        self.broadcaster.verbose("Export directory: {0}", config.export_dir or "(none)")
        logger.info(f"Resolved export job for {config.tmx_path}")
        return Resolution(configuration=config)

    def print_help(self):
        for line in help_lines(self.version):
            self.broadcaster.info(line)

    def _resolve_scale(self, config: ExportConfiguration):
        # Non-positive means the scale was not overridden
        if config.scale <= 0:
            persisted = self._persisted_scale()
            config.scale = persisted if persisted > 0 else DEFAULT_SCALE
        else:
            self.settings.set_and_persist(LAST_VERTEX_SCALE_KEY, config.scale)

    def _persisted_scale(self) -> float:
        value = self.settings.get(LAST_VERTEX_SCALE_KEY, 0.0)
        if value is None:
            return 0.0
        return parse_float_default(str(value), 0.0)

    def _fail(
        self,
        config: ExportConfiguration,
        failure: ResolutionFailure,
        hints: Iterable[str] = (),
    ) -> Resolution:
        self.broadcaster.error(failure.message)
        for hint in hints:
            self.broadcaster.info(hint)
        self.print_help()
        logger.info(f"Export job resolution failed: {failure.kind.value}")
        return Resolution(configuration=config, failure=failure)
