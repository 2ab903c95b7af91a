"""Tests for tiled2unity/resolver.py - export job resolution."""
from __future__ import annotations

import io
import os
import shutil
import tempfile
import unittest
from pathlib import Path

from tiled2unity.diagnostics import ConsoleSink, DiagnosticBroadcaster, Severity
from tiled2unity.errors import FailureKind
from tiled2unity.resolver import JobResolver, ProjectFilesystem
from tiled2unity.settings import LAST_VERTEX_SCALE_KEY, MemorySettings


class ResolverTestCase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.base = Path(self.tmp)

        self.tmx = self.base / "map.tmx"
        self.tmx.write_text("<map/>", encoding="utf-8")
        self.project = self.base / "ProjectDir"
        (self.project / "Assets").mkdir(parents=True)
        self.not_a_project = self.base / "Plain"
        self.not_a_project.mkdir()

        self.console = io.StringIO()
        self.broadcaster = DiagnosticBroadcaster(console=ConsoleSink(self.console))
        self.errors = []
        self.broadcaster.register(Severity.ERROR, self.errors.append)
        self.settings = MemorySettings()
        self.resolver = JobResolver(self.broadcaster, self.settings)

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def resolve(self, *args):
        return self.resolver.resolve([str(arg) for arg in args])

    def assertHelpPrinted(self):
        self.assertIn("Usage: tiled2unity [OPTIONS]+ TMXPATH [UNITYDIR]", self.console.getvalue())


class TestScaleResolution(ResolverTestCase):
    def test_explicit_positive_scale_is_used_and_persisted(self):
        for value in (0.01, 0.5, 3.0):
            with self.subTest(value=value):
                resolution = self.resolve(f"--scale={value}", self.tmx)
                self.assertTrue(resolution.ok)
                self.assertEqual(resolution.configuration.scale, value)
                self.assertEqual(self.settings.get(LAST_VERTEX_SCALE_KEY), value)

    def test_persisted_scale_used_when_not_overridden(self):
        self.resolve("-s=0.25", self.tmx)
        resolution = self.resolve(self.tmx)
        self.assertEqual(resolution.configuration.scale, 0.25)

    def test_non_positive_or_unparsable_scale_falls_back_without_persisting(self):
        self.settings.set_and_persist(LAST_VERTEX_SCALE_KEY, 0.1)
        writes = self.settings.persist_count
        for value in ("0", "-1", "abc", "nan"):
            with self.subTest(value=value):
                resolution = self.resolve(f"--scale={value}", self.tmx)
                self.assertEqual(resolution.configuration.scale, 0.1)
                self.assertEqual(self.settings.get(LAST_VERTEX_SCALE_KEY), 0.1)
        self.assertEqual(self.settings.persist_count, writes)

    def test_flag_like_separate_values_fall_back(self):
        self.settings.set_and_persist(LAST_VERTEX_SCALE_KEY, 0.25)
        writes = self.settings.persist_count
        for args in (["--scale", "-1e-3"], ["--scale", "-abc"], ["-s", "-inf"]):
            with self.subTest(args=args):
                resolution = self.resolve(*args, self.tmx)
                self.assertTrue(resolution.ok)
                self.assertEqual(resolution.configuration.scale, 0.25)
        self.assertEqual(self.settings.persist_count, writes)

        for args in (["--texel-bias", "-5e0"], ["-t", "-x"]):
            with self.subTest(args=args):
                resolution = self.resolve(*args, self.tmx)
                self.assertTrue(resolution.ok)
                self.assertEqual(resolution.configuration.texel_bias, 8192.0)

    def test_underscored_scale_not_persisted(self):
        resolution = self.resolve("--scale=1_0", self.tmx)
        self.assertEqual(resolution.configuration.scale, 1.0)
        self.assertIsNone(self.settings.get(LAST_VERTEX_SCALE_KEY))

    def test_default_scale_when_nothing_persisted(self):
        resolution = self.resolve("--scale=-3", self.tmx)
        self.assertEqual(resolution.configuration.scale, 1.0)
        self.assertIsNone(self.settings.get(LAST_VERTEX_SCALE_KEY))

    def test_non_positive_persisted_value_ignored(self):
        self.settings.values[LAST_VERTEX_SCALE_KEY] = -4.0
        resolution = self.resolve(self.tmx)
        self.assertEqual(resolution.configuration.scale, 1.0)

    def test_scale_resolved_even_when_input_missing(self):
        resolution = self.resolve("--scale=2")
        self.assertEqual(resolution.failure.kind, FailureKind.MISSING_INPUT)
        self.assertEqual(self.settings.get(LAST_VERTEX_SCALE_KEY), 2.0)

    def test_bad_texel_bias_uses_default(self):
        resolution = self.resolve("--texel-bias=zero", self.tmx)
        self.assertEqual(resolution.configuration.texel_bias, 8192.0)


class TestInputValidation(ResolverTestCase):
    def test_missing_input(self):
        resolution = self.resolve("-v")
        self.assertFalse(resolution.ok)
        self.assertEqual(resolution.failure.kind, FailureKind.MISSING_INPUT)
        self.assertEqual(resolution.configuration.tmx_path, "")
        self.assertEqual(self.errors, ["Missing TMXPATH argument.\n"])
        self.assertIn("%mapfile", self.console.getvalue())
        self.assertHelpPrinted()

    def test_input_not_found(self):
        missing = self.base / "nope.tmx"
        for extra in ([], ["-a"], ["--scale=2", "-v"]):
            with self.subTest(extra=extra):
                resolution = self.resolve(*extra, missing, self.project)
                self.assertEqual(resolution.failure.kind, FailureKind.INPUT_NOT_FOUND)
                self.assertEqual(resolution.failure.token, str(missing))
        self.assertHelpPrinted()

    def test_directory_is_not_an_input_file(self):
        resolution = self.resolve(self.project)
        self.assertEqual(resolution.failure.kind, FailureKind.INPUT_NOT_FOUND)

    def test_relative_paths_become_absolute(self):
        cwd = os.getcwd()
        os.chdir(self.tmp)
        try:
            resolution = self.resolve("-s=0.5", "map.tmx", "ProjectDir")
            expected_tmx = os.path.abspath("map.tmx")
            expected_dir = os.path.abspath("ProjectDir")
        finally:
            os.chdir(cwd)
        self.assertTrue(resolution.ok)
        config = resolution.configuration
        self.assertEqual(config.tmx_path, expected_tmx)
        self.assertEqual(config.export_dir, expected_dir)
        self.assertEqual(
            config.to_dict(),
            {
                "scale": 0.5,
                "texelBias": 8192.0,
                "tmxPath": config.tmx_path,
                "exportDir": config.export_dir,
                "autoExport": False,
            },
        )


class TestExportDirValidation(ResolverTestCase):
    def test_export_dir_not_found(self):
        resolution = self.resolve(self.tmx, self.base / "Missing")
        self.assertEqual(resolution.failure.kind, FailureKind.OUTPUT_DIR_NOT_FOUND)
        self.assertIn("does not exist", self.errors[0])
        self.assertHelpPrinted()

    def test_export_dir_without_marker(self):
        resolution = self.resolve(self.tmx, self.not_a_project)
        self.assertEqual(resolution.failure.kind, FailureKind.OUTPUT_DIR_INVALID)
        self.assertIn("is not a Unity Project folder", self.errors[0])

    def test_marker_must_be_a_directory(self):
        (self.not_a_project / "Assets").write_text("", encoding="utf-8")
        resolution = self.resolve(self.tmx, self.not_a_project)
        self.assertEqual(resolution.failure.kind, FailureKind.OUTPUT_DIR_INVALID)

    def test_auto_export_requires_export_dir(self):
        resolution = self.resolve("-a", self.tmx)
        self.assertEqual(resolution.failure.kind, FailureKind.OUTPUT_DIR_REQUIRED)
        self.assertEqual(resolution.configuration.tmx_path, str(self.tmx))
        self.assertHelpPrinted()

    def test_export_dir_optional_without_auto_export(self):
        resolution = self.resolve(self.tmx)
        self.assertTrue(resolution.ok)
        self.assertEqual(resolution.configuration.export_dir, "")

    def test_auto_export_success(self):
        resolution = self.resolve("--auto-export", self.tmx, self.project)
        self.assertTrue(resolution.ok)
        self.assertTrue(resolution.configuration.auto_export)
        self.assertEqual(resolution.configuration.export_dir, str(self.project))

    def test_custom_marker(self):
        (self.not_a_project / "Content").mkdir()
        resolver = JobResolver(self.broadcaster, self.settings, ProjectFilesystem(marker="Content"))
        resolution = resolver.resolve([str(self.tmx), str(self.not_a_project)])
        self.assertTrue(resolution.ok)


class TestArgumentsAndHelp(ResolverTestCase):
    def test_too_many_arguments_names_first_excess(self):
        resolution = self.resolve(self.tmx, self.project, "third", "fourth")
        self.assertEqual(resolution.failure.kind, FailureKind.TOO_MANY_ARGUMENTS)
        self.assertEqual(resolution.failure.token, "third")
        self.assertEqual(self.errors, ["Too many arguments. Can't parse 'third'\n"])

    def test_unknown_flag_is_a_leftover(self):
        resolution = self.resolve(self.tmx, self.project, "--frobnicate")
        self.assertEqual(resolution.failure.token, "--frobnicate")

    def test_malformed_flag_reported(self):
        resolution = self.resolve(self.tmx, "--scale")
        self.assertEqual(resolution.failure.kind, FailureKind.INVALID_OPTION)
        self.assertEqual(len(self.errors), 1)
        self.assertHelpPrinted()

    def test_help_printed_on_success_when_requested(self):
        resolution = self.resolve("-h", self.tmx)
        self.assertTrue(resolution.ok)
        self.assertHelpPrinted()

    def test_no_help_on_plain_success(self):
        resolution = self.resolve(self.tmx, self.project)
        self.assertTrue(resolution.ok)
        self.assertNotIn("Usage:", self.console.getvalue())
        self.assertEqual(self.errors, [])

    def test_help_printed_once_on_failure(self):
        self.resolve("--help")
        self.assertEqual(self.console.getvalue().count("Usage:"), 1)

    def test_verbose_flag_opens_verbose_channel(self):
        verbose = []
        self.broadcaster.register(Severity.VERBOSE, verbose.append)
        self.resolve(self.tmx)
        self.assertEqual(verbose, [])

        self.resolve("-v", self.tmx)
        self.assertIn(f"TMX path: {self.tmx}\n", verbose)


if __name__ == "__main__":
    unittest.main()
