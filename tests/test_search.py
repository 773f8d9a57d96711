import tempfile
import unittest
from pathlib import Path

from fnr.errors import FileReadError
from fnr.models import Decision
from fnr.pattern import compile_pattern, compile_template
from fnr.search import read_text, scan_file


class ScanFileTests(unittest.TestCase):
    def setUp(self):
        self._tmp_dir = tempfile.TemporaryDirectory()
        self.tmp_dir = Path(self._tmp_dir.name)
        self.pattern = compile_pattern(r"const (\w+) = \d+;")
        self.template = compile_template("const $1 = 42;", self.pattern)

    def tearDown(self):
        self._tmp_dir.cleanup()

    def test_scan_builds_pending_edits(self):
        target = self.tmp_dir / "a.js"
        target.write_text("const x = 7;\nconst y = 8;\n", encoding="utf-8")

        change_set = scan_file(str(target), self.pattern, self.template)

        self.assertEqual(change_set.path, str(target))
        self.assertEqual([edit.replacement for edit in change_set.edits], ["const x = 42;", "const y = 42;"])
        self.assertTrue(all(edit.decision is Decision.PENDING for edit in change_set.edits))
        self.assertEqual(change_set.fingerprint.size, len(b"const x = 7;\nconst y = 8;\n"))

    def test_binary_file_is_refused(self):
        target = self.tmp_dir / "blob.bin"
        target.write_bytes(b"const x = 7;\x00\x01")

        with self.assertRaises(FileReadError) as ctx:
            scan_file(str(target), self.pattern, self.template)
        self.assertEqual(ctx.exception.reason, "binary")

    def test_undecodable_file_is_refused(self):
        target = self.tmp_dir / "latin1.txt"
        target.write_bytes("café".encode("latin-1"))

        with self.assertRaises(FileReadError) as ctx:
            read_text(str(target))
        self.assertEqual(ctx.exception.reason, "binary")

    def test_missing_file_is_unreadable(self):
        with self.assertRaises(FileReadError) as ctx:
            read_text(str(self.tmp_dir / "missing.txt"))
        self.assertTrue(ctx.exception.reason.startswith("unreadable"))


if __name__ == "__main__":
    unittest.main()
