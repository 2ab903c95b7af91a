"""
Export job configuration record
"""
from __future__ import annotations

from dataclasses import asdict, dataclass

DEFAULT_SCALE = 1.0
DEFAULT_TEXEL_BIAS = 8192.0
PROJECT_MARKER = "Assets"

# Scale stays at this sentinel until an explicit, positive override is parsed
UNSET_SCALE = -1.0


@dataclass
class ExportConfiguration:
    """Fully resolved parameters for one conversion run.

    A fresh instance is created per invocation. Paths are absolute strings
    once resolution has succeeded; ``export_dir`` stays empty when no
    target project was given.
    """

    auto_export: bool = False
    scale: float = UNSET_SCALE
    texel_bias: float = DEFAULT_TEXEL_BIAS
    verbose: bool = False
    help: bool = False
    tmx_path: str = ""
    export_dir: str = ""

    def to_dict(self) -> dict:
        """Fields the conversion engine consumes"""
        data = asdict(self)
        return {
            "scale": data["scale"],
            "texelBias": data["texel_bias"],
            "tmxPath": data["tmx_path"],
            "exportDir": data["export_dir"],
            "autoExport": data["auto_export"],
        }


def exported_filename(map_name: str) -> str:
    return f"{map_name}.tiled2unity.xml"
