"""Resolution failure kinds with user-facing messages and suggestions."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FailureKind(Enum):
    MISSING_INPUT = "MISSING_INPUT"
    INPUT_NOT_FOUND = "INPUT_NOT_FOUND"
    OUTPUT_DIR_NOT_FOUND = "OUTPUT_DIR_NOT_FOUND"
    OUTPUT_DIR_INVALID = "OUTPUT_DIR_INVALID"
    OUTPUT_DIR_REQUIRED = "OUTPUT_DIR_REQUIRED"
    TOO_MANY_ARGUMENTS = "TOO_MANY_ARGUMENTS"
    INVALID_OPTION = "INVALID_OPTION"


ERROR_DEFINITIONS = {
    FailureKind.MISSING_INPUT: {
        "message": "Missing TMXPATH argument.",
        "suggestion": "Open a TMX file in the GUI, pass a TMX path on the command line, "
        "or add %mapfile to the Tiled command",
    },
    FailureKind.INPUT_NOT_FOUND: {
        "message": "TMXPATH file '{path}' does not exist.",
        "suggestion": "Check the path to the TMX file",
    },
    FailureKind.OUTPUT_DIR_NOT_FOUND: {
        "message": "UNITYDIR Unity Project Directory '{path}' does not exist",
        "suggestion": "Check the path to the Unity project",
    },
    FailureKind.OUTPUT_DIR_INVALID: {
        "message": "UNITYDIR '{path}' is not a Unity Project folder",
        "suggestion": "Point UNITYDIR at the folder that contains 'Assets'",
    },
    FailureKind.OUTPUT_DIR_REQUIRED: {
        "message": "Auto-exporting is enabled but UNITYDIR is missing",
        "suggestion": "Pass a Unity project directory after TMXPATH",
    },
    FailureKind.TOO_MANY_ARGUMENTS: {
        "message": "Too many arguments. Can't parse '{token}'",
        "suggestion": "Only TMXPATH and UNITYDIR may follow the options",
    },
    FailureKind.INVALID_OPTION: {
        "message": "Invalid option: {detail}",
        "suggestion": "Options that take a value are written as --name=value",
    },
}


@dataclass(frozen=True)
class ResolutionFailure:
    kind: FailureKind
    message: str
    suggestion: str
    token: Optional[str] = None


def make_failure(kind: FailureKind, token: Optional[str] = None, **fields) -> ResolutionFailure:
    details = ERROR_DEFINITIONS[kind]
    return ResolutionFailure(
        kind=kind,
        message=details["message"].format(token=token, **fields),
        suggestion=details["suggestion"],
        token=token,
    )
