"""
Diagnostics bridge - re-emits broadcaster lines as Qt signals.
"""
from __future__ import annotations

from functools import partial
from typing import List

from PySide6.QtCore import QObject, Signal

from tiled2unity.diagnostics import DiagnosticBroadcaster, Severity


class DiagnosticsBridge(QObject):
    """Observer for every severity that forwards lines to the GUI thread.

    Lines may be broadcast from the export runner's worker thread; Qt queues
    the signal to receivers living on the GUI thread.
    """

    line_received = Signal(str, str)  # severity value, text

    def __init__(self, broadcaster: DiagnosticBroadcaster, parent=None):
        super().__init__(parent)
        self._broadcaster = broadcaster
        self._tokens: List[int] = []

    @property
    def attached(self) -> bool:
        return bool(self._tokens)

    def attach(self):
        if self._tokens:
            return
        for severity in Severity:
            self._tokens.append(self._broadcaster.register(severity, partial(self._forward, severity)))

    def detach(self):
        for token in self._tokens:
            self._broadcaster.unregister(token)
        self._tokens = []

    def _forward(self, severity: Severity, text: str):
        self.line_received.emit(severity.value, text)
