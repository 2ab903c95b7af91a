"""
Export runner - resolves GUI export requests and hands them to the conversion engine
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, List, Optional
import logging

from tiled2unity.diagnostics import DiagnosticBroadcaster
from tiled2unity.job import ExportConfiguration
from tiled2unity.resolver import JobResolver

logger = logging.getLogger(__name__)

ConversionEngine = Callable[[ExportConfiguration, DiagnosticBroadcaster], None]

ENGINE_FAILED = "ENGINE_FAILED"


@dataclass
class ExportRequest:
    """Export parameters as collected from the GUI"""

    tmx_path: str = ""
    export_dir: str = ""
    scale: Optional[float] = None
    texel_bias: Optional[float] = None
    auto_export: bool = False
    verbose: bool = False

    def to_args(self) -> List[str]:
        """Render the request as the same tokens the command line accepts"""
        args: List[str] = []
        if self.auto_export:
            args.append("--auto-export")
        if self.verbose:
            args.append("--verbose")
        if self.scale is not None:
            args.append(f"--scale={float(self.scale)!r}")
        if self.texel_bias is not None:
            args.append(f"--texel-bias={float(self.texel_bias)!r}")
        if self.tmx_path:
            args.append(self.tmx_path)
            if self.export_dir:
                args.append(self.export_dir)
        return args


class ExportRunner:
    """Runs resolution and export in a background thread so the UI stays responsive.

    Completion is reported via callbacks rather than Qt signals to keep this
    class independent of PySide6; ``ui.diagnostics_bridge`` forwards the
    transcript to the GUI thread.
    """

    def __init__(self, resolver: JobResolver, engine: ConversionEngine):
        self._resolver = resolver
        self._engine = engine
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def export(
        self,
        request: ExportRequest,
        on_success: Optional[Callable[[ExportConfiguration], None]] = None,
        on_error: Optional[Callable[[str, str], None]] = None,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> bool:
        """Start an export in a background thread.

        Args:
            request: Export parameters from the GUI.
            on_success: Called with the resolved configuration after the engine returns.
            on_error: Called with (error_code, message) for resolution or engine failures.
            on_finished: Called last, whatever the outcome.

        Returns:
            False when another export is still running.
        """
        if self.is_running:
            logger.warning("Export already in progress")
            return False

        args = request.to_args()

        def _run():
            try:
                resolution = self._resolver.resolve(args)
                if not resolution.ok:
                    if on_error:
                        on_error(resolution.failure.kind.value, resolution.failure.message)
                    return

                try:
                    self._engine(resolution.configuration, self._resolver.broadcaster)
                except Exception as e:
                    logger.error(f"Conversion engine failed: {e}", exc_info=True)
                    self._resolver.broadcaster.error("Export failed: {0}", e)
                    if on_error:
                        on_error(ENGINE_FAILED, str(e))
                    return

                if on_success:
                    on_success(resolution.configuration)
            finally:
                try:
                    if on_finished:
                        on_finished()
                finally:
                    self._thread = None

        self._thread = threading.Thread(target=_run, daemon=True)
        self._thread.start()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the current export finishes; True if nothing is running afterwards."""
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        return not self.is_running
