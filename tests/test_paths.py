import io
import os
import tempfile
import unittest
from pathlib import Path

from fnr.paths import PathMatcher, read_paths, walk_paths


class PathMatcherTests(unittest.TestCase):
    def test_empty_included_set(self):
        matcher = PathMatcher(include=None, exclude=[])
        self.assertTrue(matcher.path_matches("foo"))

    def test_included_set(self):
        matcher = PathMatcher(include=["foo", "bar"])
        self.assertTrue(matcher.path_matches("foo.rs"))
        self.assertTrue(matcher.path_matches("bar.rs"))
        self.assertFalse(matcher.path_matches("baz.rs"))

    def test_excluded_set(self):
        matcher = PathMatcher(exclude=["foo", "bar"])
        self.assertFalse(matcher.path_matches("foo.rs"))
        self.assertFalse(matcher.path_matches("bar.rs"))
        self.assertTrue(matcher.path_matches("baz.rs"))

    def test_included_and_excluded_set(self):
        matcher = PathMatcher(include=["foo", "bar"], exclude=["foo", "bar"])
        self.assertTrue(matcher.path_matches("foo.rs"))
        self.assertTrue(matcher.path_matches("bar.rs"))
        self.assertFalse(matcher.path_matches("baz.rs"))

    def test_patterns_are_not_regular_expressions(self):
        matcher = PathMatcher(include=["a.c"])
        self.assertTrue(matcher.path_matches("src/a.c"))
        self.assertFalse(matcher.path_matches("src/abc"))


class WalkPathsTests(unittest.TestCase):
    def setUp(self):
        self._tmp_dir = tempfile.TemporaryDirectory()
        self.root = self._tmp_dir.name
        tree = {
            "a.txt": "a",
            ".hidden.txt": "h",
            ".gitignore": "*.log\nbuild/\n",
            "ignored.log": "log",
            "sub/b.txt": "b",
            "build/out.txt": "o",
            ".git/config": "c",
        }
        for relative, content in tree.items():
            path = Path(self.root) / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")

    def tearDown(self):
        self._tmp_dir.cleanup()

    def relative(self, paths):
        return [os.path.relpath(path, self.root).replace(os.sep, "/") for path in paths]

    def test_default_walk_skips_hidden_and_ignored(self):
        self.assertEqual(self.relative(walk_paths([self.root])), ["a.txt", "sub/b.txt"])

    def test_hidden_walk_still_honors_ignore_files(self):
        self.assertEqual(
            self.relative(walk_paths([self.root], hidden=True)),
            [".gitignore", ".hidden.txt", "a.txt", "sub/b.txt"],
        )

    def test_all_files_walk_includes_everything(self):
        self.assertEqual(
            self.relative(walk_paths([self.root], all_files=True)),
            [
                ".gitignore",
                ".hidden.txt",
                "a.txt",
                "ignored.log",
                ".git/config",
                "build/out.txt",
                "sub/b.txt",
            ],
        )

    def test_paths_are_deduplicated(self):
        target = os.path.join(self.root, "a.txt")
        self.assertEqual(list(walk_paths([target, self.root])), [target, os.path.join(self.root, "sub", "b.txt")])

    def test_missing_root_is_passed_through(self):
        missing = os.path.join(self.root, "missing.txt")
        self.assertEqual(list(walk_paths([missing])), [missing])

    def test_read_paths_skips_blank_lines(self):
        self.assertEqual(read_paths(io.StringIO("a.py\n\nsrc/b.py\r\n")), ["a.py", "src/b.py"])


if __name__ == "__main__":
    unittest.main()
