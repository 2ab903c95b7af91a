"""
Tiled2Unity - Main Entry Point
"""
import sys
import logging
from pathlib import Path
from typing import Optional, Sequence

from config import Config
from core.export_runner import ConversionEngine
from tiled2unity.app import APP_VERSION
from tiled2unity.diagnostics import DiagnosticBroadcaster
from tiled2unity.options import OptionSyntaxError, parse_options
from tiled2unity.resolver import JobResolver

VERSION_FILE_NAME = "t2u-version.txt"

logger = logging.getLogger(__name__)


def _wants_verbose(args: Sequence[str]) -> bool:
    try:
        config, _ = parse_options(args)
    except OptionSyntaxError:
        return False
    return config.verbose


def _configure_logging(args: Sequence[str]):
    logging.basicConfig(
        level=logging.DEBUG if _wants_verbose(args) else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def write_version_file(directory: Optional[Path] = None) -> Path:
    """Write the bare version string for build scripts"""
    target = (directory or Path.cwd()) / VERSION_FILE_NAME
    target.write_text(APP_VERSION, encoding="utf-8")
    return target


def main(
    argv: Optional[Sequence[str]] = None,
    engine: Optional[ConversionEngine] = None,
    config: Optional[Config] = None,
    log_dir: Optional[Path] = None,
) -> int:
    """Resolve the export job and run the conversion engine on it.

    Returns the process exit code.
    """
    args = list(sys.argv[1:] if argv is None else argv)

    if args == ["--write-version-file"]:
        write_version_file()
        return 0

    _configure_logging(args)

    broadcaster = DiagnosticBroadcaster()
    broadcaster.initialize_log(args, directory=log_dir)

    settings = config if config is not None else Config()
    resolution = JobResolver(broadcaster, settings).resolve(args)
    if not resolution.ok:
        return 1

    job = resolution.configuration
    if not job.export_dir:
        broadcaster.warning("No UNITYDIR given. Export job resolved for '{0}' but nothing was exported.", job.tmx_path)
        return 0

    if engine is None:
        broadcaster.success("Export job ready: '{0}' -> '{1}'", job.tmx_path, job.export_dir)
        return 0

    try:
        engine(job, broadcaster)
    except Exception as e:
        logger.critical(f"Export failed: {e}", exc_info=True)
        broadcaster.error("Export failed: {0}", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
