"""Tests for document assembly and output writing."""

from __future__ import annotations

import os
import stat
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from mdcombine.combine import (
    TITLE,
    CombineRequest,
    build_document,
    combine,
    read_entry,
    render_body,
    section_header,
    write_document,
)
from mdcombine.errors import OutputWriteError, SourceNotFoundError, SourceReadError
from mdcombine.selection import CONTENT_MIXED, CONTENT_UNIFORM, DENYLIST_POLICY, MARKDOWN_POLICY
from mdcombine.types import CombinedDocument, FileEntry


class SectionTests(unittest.TestCase):
    def test_section_header_layout(self) -> None:
        self.assertEqual(section_header("docs/a.md"), "\n---\n## Source: docs/a.md\n---\n")

    def test_uniform_mode_keeps_every_body_raw(self) -> None:
        body = render_body(FileEntry(parent="", name="a.txt"), "plain\n", CONTENT_UNIFORM)
        self.assertEqual(body, "plain\n")

    def test_mixed_mode_fences_only_non_markdown(self) -> None:
        markdown = render_body(FileEntry(parent="", name="a.md"), "# A\n", CONTENT_MIXED)
        text = render_body(FileEntry(parent="", name="b.txt"), "plain\n", CONTENT_MIXED)
        self.assertEqual(markdown, "# A\n")
        self.assertEqual(text, "```text\nplain\n```")


class BuildDocumentTests(unittest.TestCase):
    def test_build_document_orders_title_headers_and_bodies(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "docs").mkdir()
            (root / "a.md").write_text("# A\n", encoding="utf-8")
            (root / "docs" / "b.md").write_text("# B\n", encoding="utf-8")
            entries = [FileEntry(parent="", name="a.md"), FileEntry(parent="docs", name="b.md")]
            seen: list[str] = []

            document = build_document(root, entries, CONTENT_UNIFORM, progress=lambda item: seen.append(item.name))

            self.assertEqual(document.file_count, 2)
            self.assertEqual(seen, ["a.md", "b.md"])
            self.assertEqual(
                document.text(),
                "# Combined Documentation\n\n"
                "\n---\n## Source: a.md\n---\n\n# A\n\n"
                "\n---\n## Source: docs/b.md\n---\n\n# B\n",
            )

    def test_crlf_line_endings_are_kept_verbatim(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a.md").write_bytes(b"line1\r\nline2\r\nlone\rend\n")

            self.assertEqual(read_entry(root, FileEntry(parent="", name="a.md")), "line1\r\nline2\r\nlone\rend\n")

            output = root / "out" / "combined.md"
            combine(CombineRequest(source=root, output=output, policy=MARKDOWN_POLICY))
            self.assertIn(b"---\n\nline1\r\nline2\r\nlone\rend\n", output.read_bytes())

    def test_non_utf8_file_raises_read_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "bad.md").write_bytes(b"\xff\xfe\x00bad")
            with self.assertRaises(SourceReadError) as ctx:
                read_entry(root, FileEntry(parent="", name="bad.md"))
            self.assertIn("Failed to read", str(ctx.exception))


class WriteDocumentTests(unittest.TestCase):
    def test_write_creates_parent_directories(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "dist" / "nested" / "bundle.md"
            write_document(target, CombinedDocument(fragments=(TITLE, "body"), file_count=1))
            self.assertEqual(target.read_text(encoding="utf-8"), TITLE + "\nbody")
            self.assertEqual(list(target.parent.iterdir()), [target])

    @unittest.skipUnless(os.name == "posix", "POSIX permission bits")
    def test_new_output_uses_umask_default_mode(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "bundle.md"
            previous_umask = os.umask(0o022)
            try:
                write_document(target, CombinedDocument(fragments=(TITLE,), file_count=0))
            finally:
                os.umask(previous_umask)

            self.assertEqual(stat.S_IMODE(target.stat().st_mode), 0o644)

    @unittest.skipUnless(os.name == "posix", "POSIX permission bits")
    def test_overwrite_keeps_existing_mode(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "bundle.md"
            target.write_text("previous\n", encoding="utf-8")
            os.chmod(target, 0o640)

            write_document(target, CombinedDocument(fragments=(TITLE,), file_count=0))

            self.assertEqual(stat.S_IMODE(target.stat().st_mode), 0o640)
            self.assertEqual(target.read_text(encoding="utf-8"), TITLE)

    def test_failed_replace_leaves_target_and_removes_temp_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "bundle.md"
            target.write_text("previous\n", encoding="utf-8")
            with mock.patch("mdcombine.combine.os.replace", side_effect=OSError("disk full")):
                with self.assertRaises(OutputWriteError):
                    write_document(target, CombinedDocument(fragments=(TITLE,), file_count=0))

            self.assertEqual(target.read_text(encoding="utf-8"), "previous\n")
            self.assertEqual(list(Path(tmp).iterdir()), [target])


class CombineTests(unittest.TestCase):
    def test_combine_returns_none_and_writes_nothing_when_no_candidates(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "notes.txt").write_text("plain\n", encoding="utf-8")
            output = root / "combined.md"

            with self.assertLogs("mdcombine", level="WARNING") as logs:
                result = combine(CombineRequest(source=root, output=output, policy=MARKDOWN_POLICY))

            self.assertIsNone(result)
            self.assertFalse(output.exists())
            self.assertTrue(any("No matching files found" in line for line in logs.output))

    def test_combine_skips_output_inside_source(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a.md").write_text("# A\n", encoding="utf-8")
            output = root / "combined.md"
            output.write_text("stale\n", encoding="utf-8")

            result = combine(CombineRequest(source=root, output=output, policy=MARKDOWN_POLICY))

            self.assertIsNotNone(result)
            self.assertEqual([item.name for item in result.files], ["a.md"])
            self.assertNotIn("stale", output.read_text(encoding="utf-8"))

    def test_combine_mixed_policy_fences_text_and_keeps_markdown(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp) / "src"
            (root / "node_modules").mkdir(parents=True)
            (root / "a.md").write_text("# A\n", encoding="utf-8")
            (root / "b.txt").write_text("plain\n", encoding="utf-8")
            (root / "node_modules" / "c.md").write_text("# C\n", encoding="utf-8")
            output = Path(tmp) / "out.md"

            combine(CombineRequest(source=root, output=output, policy=DENYLIST_POLICY))

            text = output.read_text(encoding="utf-8")
            self.assertIn("## Source: a.md\n---\n\n# A\n", text)
            self.assertIn("## Source: b.txt\n---\n\n```text\nplain\n```", text)
            self.assertNotIn("node_modules", text)

    def test_combine_read_failure_discards_output(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp) / "src"
            root.mkdir()
            (root / "a.md").write_text("# A\n", encoding="utf-8")
            (root / "b.md").write_bytes(b"\xff\xfe")
            output = Path(tmp) / "out.md"

            with self.assertRaises(SourceReadError):
                combine(CombineRequest(source=root, output=output, policy=MARKDOWN_POLICY))

            self.assertFalse(output.exists())

    def test_combine_missing_source_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / "missing"
            with self.assertRaises(SourceNotFoundError):
                combine(CombineRequest(source=missing, output=Path(tmp) / "out.md", policy=MARKDOWN_POLICY))


if __name__ == "__main__":
    unittest.main()
