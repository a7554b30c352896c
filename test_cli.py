"""Tests for the fs command line entry point and source resolution."""

import contextlib
import io
import json
import logging
import os
import tempfile
import unittest
import zipfile

from backend import MemoryBackend
from fscmd import Config, ResolveError, detect_source_type, main, resolve_source


def run_main(argv, **kwargs):
    out = io.BytesIO()
    err = io.StringIO()
    with contextlib.redirect_stderr(err):
        code = main(argv, out=out, **kwargs)
    return code, out.getvalue(), err.getvalue()


class TestDetectSourceType(unittest.TestCase):
    def test_extensions(self):
        self.assertEqual(detect_source_type("a.zip"), "zip")
        self.assertEqual(detect_source_type("a.TAR.GZ"), "tar")
        self.assertEqual(detect_source_type("a.tgz"), "tar")
        self.assertEqual(detect_source_type("a.json"), "json")

    def test_directory(self):
        with tempfile.TemporaryDirectory() as d:
            self.assertEqual(detect_source_type(d), "dir")

    def test_unknown(self):
        with self.assertRaises(ResolveError):
            detect_source_type("a.rar")


class TestMainWithDirectory(unittest.TestCase):
    def setUp(self):
        self._dir = tempfile.TemporaryDirectory()
        self.root = self._dir.name
        os.mkdir(os.path.join(self.root, "folder"))
        with open(os.path.join(self.root, "foo"), "wb") as f:
            f.write(b"foo")
        with open(os.path.join(self.root, "folder", "bar"), "wb") as f:
            f.write(b"bar")

    def tearDown(self):
        self._dir.cleanup()

    def test_ls(self):
        code, out, _ = run_main(["--source", self.root, "ls"])
        self.assertEqual(code, 0)
        self.assertEqual(out, b"folder/\nfoo\n")

    def test_tree(self):
        code, out, _ = run_main(["-s", self.root, "tree"])
        self.assertEqual(code, 0)
        self.assertEqual(out.decode(), ".\n├── folder\n│   └── bar\n└── foo\n")

    def test_tree_keeps_argument_label(self):
        code, out, _ = run_main(["-s", self.root, "tree", "folder/"])
        self.assertEqual(code, 0)
        self.assertEqual(out.decode(), "folder/\n└── bar\n")

    def test_cat(self):
        code, out, _ = run_main(["-s", self.root, "cat", "foo", "/folder/bar"])
        self.assertEqual(code, 0)
        self.assertEqual(out, b"foobar")

    def test_stat(self):
        code, out, _ = run_main(["-s", self.root, "stat", "foo"])
        self.assertEqual(code, 0)
        lines = out.decode().splitlines()
        self.assertEqual(lines[:3], ["Name: foo", "Size: 3", "IsDir: false"])
        self.assertTrue(lines[3].startswith("Mode: -"))
        self.assertTrue(lines[4].startswith("Modified: "))

    def test_undecodable_file_name(self):
        try:
            with open(os.path.join(os.fsencode(self.root), b"bad\xff"), "wb") as f:
                f.write(b"x")
        except OSError:
            self.skipTest("filesystem rejects non-UTF-8 names")
        code, out, _ = run_main(["-s", self.root, "ls"])
        self.assertEqual(code, 0)
        self.assertEqual(out, b"bad\xff\nfolder/\nfoo\n")
        code, out, _ = run_main(["-s", self.root, "tree"])
        self.assertEqual(code, 0)
        self.assertIn("└── foo\n".encode(), out)
        self.assertIn("├── bad\udcff\n".encode("utf-8", "surrogateescape"), out)

    def test_json_unaddressable_keys(self):
        path = os.path.join(self.root, "doc.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"": {"x": 1}, ".": 2, "a/b": 3, "a": 1}, f)
        code, out, _ = run_main(["-s", path, "tree"])
        self.assertEqual(code, 0)
        self.assertEqual(out.decode(), ".\n└── a\n")
        code, out, _ = run_main(["-s", path, "ls"])
        self.assertEqual(out, b"a\n")

    def test_missing_path_is_fatal(self):
        code, out, err = run_main(["-s", self.root, "cat", "foo", "missing"])
        self.assertEqual(code, 1)
        self.assertEqual(out, b"foo")
        self.assertIn("Error: ", err)
        self.assertIn("missing", err)

    def test_missing_source(self):
        code, out, err = run_main(["-s", os.path.join(self.root, "nope.zip"), "ls"])
        self.assertEqual(code, 1)
        self.assertEqual(out, b"")
        self.assertIn("not found", err)

    def test_unknown_source_type(self):
        code, _, err = run_main(["-s", os.path.join(self.root, "foo"), "ls"])
        self.assertEqual(code, 1)
        self.assertIn("Cannot detect source type", err)

    def test_no_command(self):
        code, out, _ = run_main([])
        self.assertEqual(code, 1)
        self.assertEqual(out, b"")


class TestMainWithArchive(unittest.TestCase):
    def setUp(self):
        f = tempfile.NamedTemporaryFile(suffix=".zip", delete=False)
        with zipfile.ZipFile(f, "w") as zf:
            zf.writestr("foo", b"foo")
            zf.writestr("folder/bar", b"bar")
        f.close()
        self.path = f.name

    def tearDown(self):
        os.unlink(self.path)

    def test_hashsum(self):
        code, out, _ = run_main(["-s", self.path, "hashsum", "foo"])
        self.assertEqual(code, 0)
        self.assertEqual(out.decode().splitlines()[0], "MD5: acbd18db4cc2f85cedef654fccc4a4d8")

    def test_file(self):
        code, out, _ = run_main(["-s", self.path, "file", "foo"])
        self.assertEqual(code, 0)
        self.assertEqual(out, b"foo: text/plain\n")

    def test_forced_type(self):
        code, out, _ = run_main(["-s", self.path, "-t", "zip", "ls", "folder"])
        self.assertEqual(code, 0)
        self.assertEqual(out, b"bar\n")

    def test_wrong_forced_type(self):
        code, _, err = run_main(["-s", self.path, "-t", "tar", "ls"])
        self.assertEqual(code, 1)
        self.assertIn("Cannot open TAR file", err)

    def test_resolve_source(self):
        backend, names = resolve_source(Config(source=self.path), ["./folder/", "/foo"])
        with backend:
            self.assertEqual(names, ["./folder/", "/foo"])
            self.assertTrue(backend.stat(names[0]).is_dir)
            self.assertEqual(backend.stat(names[1]).name, "foo")


class TestInjectedResolver(unittest.TestCase):
    def test_memory_source(self):
        seen = []

        def resolver(config, args):
            seen.append(config)
            return MemoryBackend({"foo": "foo", "folder": {"bar": "bar"}}), args

        code, out, _ = run_main(["ls"], resolver=resolver)
        self.assertEqual(code, 0)
        self.assertEqual(out, b"folder/\nfoo\n")
        self.assertFalse(seen[0].debug)

    def test_resolution_error_is_fatal(self):
        def resolver(config, args):
            raise ResolveError("no such source")

        code, out, err = run_main(["tree"], resolver=resolver)
        self.assertEqual(code, 1)
        self.assertEqual(out, b"")
        self.assertIn("Error: no such source", err)

    def test_debug_flag(self):
        seen = []

        def resolver(config, args):
            seen.append(config)
            return MemoryBackend({}), args

        code, _, err = run_main(["--debug", "ls"], resolver=resolver)
        self.assertEqual(code, 0)
        self.assertTrue(seen[0].debug)
        self.assertIn("commands.py", err)
        run_main(["ls"], resolver=resolver)

    def test_leaves_other_loggers_alone(self):
        host = logging.getLogger("host.app")
        enabled = host.isEnabledFor(logging.ERROR)

        def resolver(config, args):
            return MemoryBackend({"a": "a"}), args

        run_main(["ls"], resolver=resolver)
        self.assertEqual(host.isEnabledFor(logging.ERROR), enabled)
        self.assertEqual(logging.root.manager.disable, logging.NOTSET)


if __name__ == "__main__":
    unittest.main()
