"""
Option schema - flag syntax and its effect on an ExportConfiguration.

Parsing here is purely syntactic: no filesystem checks and no cross-field
validation. Tokens the schema does not recognize are handed back, in order,
for the resolver to interpret as positional arguments.
"""
from __future__ import annotations

import argparse
import math
import re
from typing import List, Optional, Sequence, Tuple

from .job import DEFAULT_TEXEL_BIAS, ExportConfiguration

PROGRAM_NAME = "tiled2unity"
VALUE_FLAGS = ("-s", "--scale", "-t", "--texel-bias")

_DECIMAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

PREFAB_PROPERTIES = (
    "unity:sortingLayerName",
    "unity:sortingOrder",
    "unity:layer",
    "unity:tag",
    "unity:scale",
    "unity:isTrigger",
    "unity:ignore",
    "unity:collisionOnly",
)


class OptionSyntaxError(ValueError):
    """A flag was written in a form the schema cannot parse (e.g. missing value)."""


class _OptionParser(argparse.ArgumentParser):
    def error(self, message):
        raise OptionSyntaxError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _OptionParser(
        prog=PROGRAM_NAME,
        usage=argparse.SUPPRESS,
        add_help=False,
        allow_abbrev=False,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "-a",
        "--auto-export",
        dest="auto_export",
        action="store_true",
        help="Automatically export to UNITYDIR and close.",
    )
    parser.add_argument(
        "-s",
        "--scale",
        dest="scale",
        metavar="VALUE",
        help="Scale the output vertices by a value.\n"
        "A value of 0.01 is popular for many Unity projects that use 'Pixels Per Unit' of 100 for sprites.\n"
        "Default is 1 (no scaling).",
    )
    parser.add_argument(
        "-t",
        "--texel-bias",
        dest="texel_bias",
        metavar="VALUE",
        help="Bias for texel sampling.\n"
        "Texels are offset by 1 / value.\n"
        "Default value is 8192.\n"
        "A value of 2048 has been useful for shaders that show seams.",
    )
    parser.add_argument("-v", "--verbose", dest="verbose", action="store_true", help="Print verbose messages.")
    parser.add_argument("-h", "--help", dest="help", action="store_true", help="Display this help message.")
    return parser


def parse_float_default(text: Optional[str], default: float) -> float:
    """Parse ``text`` with '.' as the decimal separator, whatever the locale.

    Anything that is not a plain ASCII decimal (optionally with an exponent)
    or that overflows to infinity yields ``default``.
    """
    if text is None or not _DECIMAL.fullmatch(text):
        return default
    try:
        value = float(text)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value):
        return default
    return value


def parse_options(
    args: Sequence[str], configuration: Optional[ExportConfiguration] = None
) -> Tuple[ExportConfiguration, List[str]]:
    """Apply recognized flags to ``configuration`` and return the leftovers.

    Raises:
        OptionSyntaxError: a recognized flag is malformed, such as ``--scale``
            with no value after it.
    """
    config = configuration if configuration is not None else ExportConfiguration()
    namespace, leftovers = build_parser().parse_known_args(_attach_values(args))

    if namespace.auto_export:
        config.auto_export = True
    if namespace.scale is not None:
        # Unparsable leaves the prior value, so the persisted scale still applies
        config.scale = parse_float_default(namespace.scale, config.scale)
    if namespace.texel_bias is not None:
        texel_bias = parse_float_default(namespace.texel_bias, DEFAULT_TEXEL_BIAS)
        config.texel_bias = texel_bias if texel_bias > 0 else DEFAULT_TEXEL_BIAS
    if namespace.verbose:
        config.verbose = True
    if namespace.help:
        config.help = True

    return config, leftovers


def option_descriptions() -> str:
    return build_parser().format_help().rstrip()


def help_lines(version: str) -> List[str]:
    """Full help text, one entry per emitted line."""
    lines = [
        f"Tiled2Unity Utility, Version: {version}",
        f"Usage: {PROGRAM_NAME} [OPTIONS]+ TMXPATH [UNITYDIR]",
        f"Example: {PROGRAM_NAME} --verbose -s=0.01 MyTiledMap.tmx ../../MyUnityProjectFolder",
        "",
        "Options:",
    ]
    lines.extend(option_descriptions().splitlines())
    lines.append("")
    lines.append("Prefab object properties (set in TMX file for each layer/object)")
    lines.extend(f"  {name}" for name in PREFAB_PROPERTIES)
    lines.append("  (Other properties are exported for custom scripting in your Unity project)")
    return lines


def _attach_values(args: Sequence[str]) -> List[str]:
    """Fold ``--scale VALUE`` into ``--scale=VALUE``.

    The next token is always the value, even when it looks like a flag
    (``-1e-3``, ``-abc``); only a trailing value flag stays bare.
    """
    tokens = list(args)
    attached: List[str] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token in VALUE_FLAGS and index + 1 < len(tokens):
            attached.append(f"{token}={tokens[index + 1]}")
            index += 2
        else:
            attached.append(token)
            index += 1
    return attached
