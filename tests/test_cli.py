"""
Integration tests for the copyfiles CLI and config loading.

Tests:
  - .copyfiles discovery: searching parent directories upward
  - profile loading and build_config clamping/normalization
  - copyfiles init: creates valid YAML, refuses overwrite without --force
  - copyfiles copy: flags, profile files, exit status on failure
"""
import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path

import yaml


# ── Helpers ───────────────────────────────────────────────────────────────────

REPO_ROOT = Path(__file__).parent.parent


def run_copyfiles(*args, cwd=None, config_home=None):
    """Run the copyfiles CLI and return (returncode, stdout, stderr)."""
    env = {**os.environ, "PYTHONPATH": str(REPO_ROOT)}
    if config_home:
        env["XDG_CONFIG_HOME"] = str(config_home)
    result = subprocess.run(
        [sys.executable, "-m", "copyfiles", *args],
        cwd=str(cwd or REPO_ROOT),
        capture_output=True,
        text=True,
        stdin=subprocess.DEVNULL,
        env=env,
    )
    return result.returncode, result.stdout, result.stderr


# ── Tests: .copyfiles discovery ───────────────────────────────────────────────

class TestFindCopyfiles(unittest.TestCase):
    """Tests for find_copyfiles(): upward search through parent directories."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name).resolve()

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_find_in_same_directory(self):
        from copyfiles.config import find_copyfiles
        (self.root / ".copyfiles").write_text("profiles: []\n", encoding="utf-8")
        self.assertEqual(find_copyfiles(self.root), self.root / ".copyfiles")

    def test_find_in_parent_directory(self):
        from copyfiles.config import find_copyfiles
        (self.root / ".copyfiles").write_text("profiles: []\n", encoding="utf-8")
        subdir = self.root / "a" / "b"
        subdir.mkdir(parents=True)
        self.assertEqual(find_copyfiles(subdir), self.root / ".copyfiles")

    def test_finds_nearest(self):
        from copyfiles.config import find_copyfiles
        (self.root / ".copyfiles").write_text("profiles: []\n", encoding="utf-8")
        sub_a = self.root / "a"
        (sub_a / "b").mkdir(parents=True)
        (sub_a / ".copyfiles").write_text("profiles: []\n", encoding="utf-8")
        self.assertEqual(find_copyfiles(sub_a / "b"), sub_a / ".copyfiles")


# ── Tests: config loading ─────────────────────────────────────────────────────

class TestConfig(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name).resolve()

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_profile_by_name_with_defaults(self):
        import copyfiles.config as cfg
        p = self.root / ".copyfiles"
        p.write_text(
            "defaults:\n"
            "  retry_count: 3\n"
            "profiles:\n"
            "  - name: docs\n"
            "    source: docs\n"
            "    target: out/docs\n"
            "  - name: bin\n"
            "    source: build\n"
            "    target: out/bin\n"
            "    overwrite: true\n",
            encoding="utf-8",
        )
        data = cfg.load_copyfiles_file(p)
        profile = cfg.get_profile(data, "bin")
        self.assertEqual(profile["source"], "build")
        self.assertTrue(profile["overwrite"])
        self.assertEqual(profile["retry_count"], 3)
        # unknown name falls back to the first profile
        self.assertEqual(cfg.get_profile(data, "nope")["name"], "docs")

    def test_relative_paths_resolve_against_config_folder(self):
        import copyfiles.config as cfg
        resolved = cfg.resolve_profile_paths({"source": "src", "target": "/abs/out"}, self.root)
        self.assertEqual(resolved["source"], str(self.root / "src"))
        self.assertEqual(resolved["target"], "/abs/out")

    def test_build_config_clamps_retry_settings(self):
        from copyfiles.config import build_config
        for raw in (-1, "-5", "-2.5", "abc", "nan", "inf", None, True):
            with self.subTest(raw=raw):
                config = build_config({"source": "/s", "target": "/t",
                                       "retry_count": raw, "retry_delay_ms": raw})
                self.assertEqual(config.retry_count, 0)
                self.assertEqual(config.retry_delay_ms, 0)
        config = build_config({"source": "/s", "target": "/t"}, retry_count="4", retry_delay_ms=250)
        self.assertEqual((config.retry_count, config.retry_delay_ms), (4, 250))

    def test_build_config_truncates_fractional_retry_settings(self):
        import copyfiles.config as cfg
        p = self.root / ".copyfiles"
        p.write_text(
            "profiles:\n"
            "  - name: default\n"
            "    source: /s\n"
            "    target: /t\n"
            "    retry_count: 2.0\n"
            "    retry_delay_ms: '150.9'\n",
            encoding="utf-8",
        )
        config = cfg.build_config(cfg.get_profile(cfg.load_copyfiles_file(p)))
        self.assertEqual(config.retry_count, 2)
        self.assertEqual(config.retry_delay_ms, 150)

    def test_build_config_normalizes_roots(self):
        from copyfiles.config import build_config
        config = build_config({"source": str(self.root) + os.sep, "target": str(self.root / "out")})
        self.assertEqual(config.source_root, str(self.root))
        self.assertFalse(config.source_root.endswith(os.sep))
        self.assertEqual(config.contents, ("**",))

    def test_overrides_win_and_none_is_ignored(self):
        from copyfiles.config import build_config
        config = build_config({"source": "/s", "target": "/t", "flatten": True, "overwrite": "yes"},
                              flatten=None, clean=True, contents="*.txt\n!tmp/**")
        self.assertTrue(config.flatten_folders)
        self.assertTrue(config.overwrite)
        self.assertTrue(config.clean_target_folder)
        self.assertEqual(config.contents, ("*.txt", "!tmp/**"))

    def test_missing_roots_are_config_errors(self):
        from copyfiles.config import build_config
        from copyfiles.errors import ConfigError
        with self.assertRaises(ConfigError):
            build_config({"target": "/t"})
        with self.assertRaises(ConfigError):
            build_config({"source": "/s"})


# ── Tests: copyfiles init ─────────────────────────────────────────────────────

class TestInitCommand(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.cwd = Path(self.tmpdir.name) / "project"
        self.cwd.mkdir()
        self.config_home = Path(self.tmpdir.name) / "config"

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_init_creates_valid_yaml(self):
        rc, out, err = run_copyfiles("init", "--source", "src", "--target", "out",
                                     "--contents", "**/*.txt", "!tmp/**",
                                     cwd=self.cwd, config_home=self.config_home)
        self.assertEqual(rc, 0, msg=f"stderr: {err}")
        data = yaml.safe_load((self.cwd / ".copyfiles").read_text(encoding="utf-8"))
        profile = data["profiles"][0]
        self.assertEqual(profile["name"], "default")
        self.assertEqual(profile["source"], "src")
        self.assertEqual(profile["target"], "out")
        self.assertEqual(profile["contents"], ["**/*.txt", "!tmp/**"])
        self.assertEqual(profile["retry_count"], 0)

    def test_init_refuses_overwrite(self):
        (self.cwd / ".copyfiles").write_text("profiles: []\n", encoding="utf-8")
        rc, out, err = run_copyfiles("init", "--target", "out",
                                     cwd=self.cwd, config_home=self.config_home)
        self.assertNotEqual(rc, 0)
        self.assertIn("already exists", err)

    def test_init_force_overwrites(self):
        (self.cwd / ".copyfiles").write_text("profiles: []\n", encoding="utf-8")
        rc, out, err = run_copyfiles("init", "--target", "newout", "--force",
                                     cwd=self.cwd, config_home=self.config_home)
        self.assertEqual(rc, 0, msg=f"stderr: {err}")
        self.assertIn("newout", (self.cwd / ".copyfiles").read_text(encoding="utf-8"))

    def test_init_dry_run_does_not_write(self):
        rc, out, err = run_copyfiles("init", "--target", "out", "--dry-run",
                                     cwd=self.cwd, config_home=self.config_home)
        self.assertEqual(rc, 0, msg=f"stderr: {err}")
        self.assertFalse((self.cwd / ".copyfiles").exists())
        self.assertIn("dry-run", out)

    def test_init_uses_global_defaults(self):
        global_dir = self.config_home / "copyfiles"
        global_dir.mkdir(parents=True)
        (global_dir / "config.yaml").write_text(
            "defaults:\n  target: /mnt/drop\n  retry_count: 5\n", encoding="utf-8")
        rc, out, err = run_copyfiles("init", cwd=self.cwd, config_home=self.config_home)
        self.assertEqual(rc, 0, msg=f"stderr: {err}")
        profile = yaml.safe_load((self.cwd / ".copyfiles").read_text(encoding="utf-8"))["profiles"][0]
        self.assertEqual(profile["target"], "/mnt/drop")
        self.assertEqual(profile["retry_count"], 5)


# ── Tests: copyfiles copy ─────────────────────────────────────────────────────

class TestCopyCommand(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.base = Path(self.tmpdir.name).resolve()
        self.src = self.base / "src"
        self.dst = self.base / "dst"
        (self.src / "a").mkdir(parents=True)
        (self.src / "b").mkdir(parents=True)
        (self.src / "a" / "f1.txt").write_text("one", encoding="utf-8")
        (self.src / "b" / "f2.txt").write_text("two", encoding="utf-8")
        (self.src / "b" / "notes.log").write_text("log", encoding="utf-8")
        self.config_home = self.base / "config"

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_copy_with_flags(self):
        rc, out, err = run_copyfiles("copy", "--source", str(self.src), "--target", str(self.dst),
                                     "--contents", "**/*.txt",
                                     cwd=self.base, config_home=self.config_home)
        self.assertEqual(rc, 0, msg=f"stdout: {out}\nstderr: {err}")
        self.assertEqual((self.dst / "a" / "f1.txt").read_text(encoding="utf-8"), "one")
        self.assertEqual((self.dst / "b" / "f2.txt").read_text(encoding="utf-8"), "two")
        self.assertFalse((self.dst / "b" / "notes.log").exists())
        self.assertIn("Found 2 files", out)
        self.assertIn("SUMMARY", out)

    def test_copy_flatten_with_profile_file(self):
        (self.base / ".copyfiles").write_text(
            "profiles:\n"
            "  - name: default\n"
            "    source: src\n"
            "    target: dst\n"
            "    contents: ['**/*.txt']\n"
            "    flatten: true\n",
            encoding="utf-8",
        )
        rc, out, err = run_copyfiles("copy", cwd=self.base, config_home=self.config_home)
        self.assertEqual(rc, 0, msg=f"stdout: {out}\nstderr: {err}")
        self.assertEqual(sorted(p.name for p in self.dst.iterdir()), ["f1.txt", "f2.txt"])

    def test_copy_requires_target(self):
        rc, out, err = run_copyfiles("copy", "--source", str(self.src),
                                     cwd=self.base, config_home=self.config_home)
        self.assertNotEqual(rc, 0)
        self.assertIn("target folder is required", err)

    def test_target_is_directory_exits_nonzero(self):
        (self.dst / "a" / "f1.txt").mkdir(parents=True)
        rc, out, err = run_copyfiles("copy", "--source", str(self.src), "--target", str(self.dst),
                                     "--overwrite", "--retry-count", "2",
                                     cwd=self.base, config_home=self.config_home)
        self.assertEqual(rc, 1)
        self.assertIn("FAILED", out)

    def test_missing_source_exits_nonzero(self):
        rc, out, err = run_copyfiles("copy", "--source", str(self.base / "nope"),
                                     "--target", str(self.dst),
                                     cwd=self.base, config_home=self.config_home)
        self.assertEqual(rc, 1)
        self.assertFalse(self.dst.exists())


if __name__ == "__main__":
    unittest.main()
