"""Tests for diff_parser module."""

from docdiff.config import DocDiffConfig
from docdiff.diff_parser import (
    DiffScanner,
    HunkCursor,
    classify_line,
    parse_diff,
    parse_hunk_header,
    path_from_git_header,
)
from docdiff.models import HunkHeader

DOC_DIFF = """\
diff --git a/src/api.js b/src/api.js
index 3b18e51..a9c4f3d 100644
--- a/src/api.js
+++ b/src/api.js
@@ -8,3 +8,6 @@ export class Api {
 const x = 1;
+/** Does X.
+ * @param a desc
+ */
 function f(a) {
   return a;
"""


def test_parse_hunk_header_full():
    assert parse_hunk_header("@@ -1,2 +3,4 @@") == HunkHeader(1, 2, 3, 4)


def test_parse_hunk_header_counts_default_to_one():
    assert parse_hunk_header("@@ -7 +9 @@ def foo():") == HunkHeader(7, 1, 9, 1)


def test_parse_hunk_header_zero_count_sides():
    assert parse_hunk_header("@@ -0,0 +1,4 @@") == HunkHeader(0, 0, 1, 4)
    assert parse_hunk_header("@@ -3,2 +2,0 @@") == HunkHeader(3, 2, 2, 0)


def test_parse_hunk_header_malformed():
    assert parse_hunk_header("@@ garbage @@") is None
    assert parse_hunk_header("@@ -a,b +c,d @@") is None


def test_classify_line():
    assert classify_line("+new") == ("added", "new")
    assert classify_line("-old") == ("removed", "old")
    assert classify_line(" same") == ("context", "same")
    assert classify_line("") == ("context", "")
    assert classify_line("\\ No newline at end of file") is None


def test_path_from_git_header_uses_old_side():
    assert path_from_git_header("diff --git a/src/x.js b/src/y.js") == "src/x.js"
    assert path_from_git_header("diff --git") is None


def test_cursor_numbers_added_and_context_lines():
    cursor = HunkCursor.from_header(HunkHeader(10, 3, 20, 4))
    first = cursor.take("context", "a")
    second = cursor.take("added", "b")
    third = cursor.take("context", "c")
    assert [first.line_no, second.line_no, third.line_no] == [20, 21, 22]


def test_cursor_removed_line_takes_position_without_advancing():
    cursor = HunkCursor.from_header(HunkHeader(10, 3, 20, 2))
    cursor.take("context", "a")
    removed = cursor.take("removed", "b")
    added = cursor.take("added", "c")
    assert removed.line_no == 21
    assert added.line_no == 21
    assert cursor.line_no == 22


def test_cursor_exhausted_after_declared_lines():
    cursor = HunkCursor.from_header(HunkHeader(1, 1, 1, 2))
    cursor.take("context", "a")
    assert not cursor.exhausted
    cursor.take("added", "b")
    assert cursor.exhausted


def test_doc_block_reported_with_absolute_lines():
    result = parse_diff(DOC_DIFF, DocDiffConfig())
    assert result.has_documentation_change
    records = result.changes["src/api.js"]
    assert len(records) == 1
    assert (records[0].start, records[0].end) == (9, 11)
    assert "Does X." in records[0].context[0].start


def test_tag_marker_outside_block_sets_flag():
    diff = """\
diff --git a/lib.js b/lib.js
--- a/lib.js
+++ b/lib.js
@@ -4,2 +4,3 @@
  * Existing description.
+ * @example foo()
  */
"""
    result = parse_diff(diff)
    assert result.has_documentation_change
    records = result.changes["lib.js"]
    assert [(r.start, r.end) for r in records] == [(5, 5)]
    assert records[0].context[0].start == "* @example foo()"


def test_plain_code_change_is_not_reported():
    diff = """\
diff --git a/lib.js b/lib.js
--- a/lib.js
+++ b/lib.js
@@ -1,2 +1,2 @@
-let a = 1;
+let a = 2;
 let b = 3;
"""
    result = parse_diff(diff)
    assert result.changes == {}
    assert not result.has_documentation_change


def test_removed_doc_line_suppressed_near_added_block():
    diff = """\
diff --git a/lib.js b/lib.js
--- a/lib.js
+++ b/lib.js
@@ -47,3 +47,8 @@
+/**
+ * New text.
+ * More.
+ * Even more.
+ * End.
+ */
 function a() {}
- * @param stale
 function b() {}
"""
    result = parse_diff(diff)
    records = result.changes["lib.js"]
    # Block spans 47-52; the removed line sits at 54, within 3 of 52
    assert [(r.start, r.end) for r in records] == [(47, 52)]


def test_removed_doc_lines_recorded_without_added_counterpart():
    diff = """\
diff --git a/lib.js b/lib.js
--- a/lib.js
+++ b/lib.js
@@ -10,4 +10,1 @@
-/**
- * Gone.
- */
 function a() {}
"""
    result = parse_diff(diff)
    assert result.has_documentation_change
    records = result.changes["lib.js"]
    # All three removed lines sit at line 10; the first suppresses the rest
    assert [(r.start, r.end) for r in records] == [(10, 10)]
    assert records[0].context[0].start == "/**"


def test_unclosed_block_dropped_at_file_boundary():
    diff = """\
diff --git a/a.js b/a.js
--- a/a.js
+++ b/a.js
@@ -1,1 +1,3 @@
 x();
+/**
+ * never closed
diff --git a/b.js b/b.js
--- a/b.js
+++ b/b.js
@@ -1,1 +1,2 @@
 y();
+ */
"""
    result = parse_diff(diff)
    # The block opened in a.js must not be closed by b.js
    assert "a.js" not in result.changes
    assert "b.js" not in result.changes
    assert result.has_documentation_change


def test_unclosed_block_dropped_at_hunk_boundary():
    diff = """\
diff --git a/lib.js b/lib.js
--- a/lib.js
+++ b/lib.js
@@ -1,3 +1,3 @@
-/** Old summary
+/** New summary
  * body
  */
@@ -100,2 +100,3 @@
 a();
+ * @param b new tag far away
 b();
@@ -198,2 +201,3 @@
+/** Another block. */
 c();
 d();
"""
    result = parse_diff(diff)
    records = result.changes["lib.js"]
    assert [(r.start, r.end) for r in records] == [(1, 1), (101, 101), (201, 201)]
    assert records[1].context[0].start == "* @param b new tag far away"
    assert records[2].context[0].start == "Another block."
    assert result.hunks_seen == 3


def test_hunks_seen_counts_only_valid_headers():
    diff = """\
diff --git a/a.js b/a.js
--- a/a.js
+++ b/a.js
@@ broken @@
@@ -1,1 +1,1 @@
 a();
"""
    assert parse_diff(diff).hunks_seen == 1
    assert parse_diff("not a diff at all\n").hunks_seen == 0


def test_single_line_doc_block():
    diff = """\
diff --git a/a.js b/a.js
--- a/a.js
+++ b/a.js
@@ -1,1 +1,2 @@
+/** Short one. */
 x();
"""
    records = parse_diff(diff).changes["a.js"]
    assert [(r.start, r.end) for r in records] == [(1, 1)]
    assert records[0].context[0].start == "Short one."


def test_malformed_hunk_header_does_not_move_cursor(capsys):
    diff = """\
diff --git a/a.js b/a.js
--- a/a.js
+++ b/a.js
@@ -1,3 +1,4 @@
 a();
@@ this is not a header @@
+/** Doc. */
 b();
"""
    result = parse_diff(diff)
    records = result.changes["a.js"]
    assert [(r.start, r.end) for r in records] == [(2, 2)]
    assert "malformed hunk header" in capsys.readouterr().err


def test_content_before_any_hunk_is_ignored():
    diff = """\
diff --git a/a.js b/a.js
+/** Not in a hunk. */
+ * @param nope
"""
    result = parse_diff(diff)
    assert result.changes == {}
    assert not result.has_documentation_change


def test_no_newline_marker_ignored():
    diff = """\
diff --git a/a.js b/a.js
--- a/a.js
+++ b/a.js
@@ -1,1 +1,2 @@
 a();
+/** Doc. */
\\ No newline at end of file
"""
    records = parse_diff(diff).changes["a.js"]
    assert [(r.start, r.end) for r in records] == [(2, 2)]


def test_plain_unified_diff_without_git_header():
    diff = """\
--- a/a.js
+++ b/a.js
@@ -1,2 +1,3 @@
 x();
+ * @return value
 y();
--- a/b.js
+++ b/b.js
@@ -5,2 +5,3 @@
 z();
+ * @param p
 w();
"""
    result = parse_diff(diff)
    assert list(result.changes) == ["a.js", "b.js"]
    assert result.changes["b.js"][0].start == 6


def test_new_file_uses_new_side_path_without_git_header():
    diff = """\
--- /dev/null
+++ b/new.js
@@ -0,0 +1,1 @@
+/** Fresh. */
"""
    assert list(parse_diff(diff).changes) == ["new.js"]


def test_removed_line_looking_like_file_header_is_content():
    diff = """\
diff --git a/a.md b/a.md
--- a/a.md
+++ b/a.md
@@ -1,2 +1,2 @@
--- @param old
+++ @param new
 end
"""
    records = parse_diff(diff).changes["a.md"]
    assert [(r.start, r.end) for r in records] == [(1, 1), (1, 1)]
    assert records[0].context[0].start == "-- @param old"
    assert records[1].context[0].start == "++ @param new"


def test_empty_input():
    result = parse_diff("")
    assert result.changes == {}
    assert not result.has_documentation_change


def test_hunk_mode_one_record_per_hunk():
    diff = """\
diff --git a/a.py b/a.py
--- a/a.py
+++ b/a.py
@@ -1,2 +1,3 @@
 x = 1
+y = 2 and a rather long line of code
 z = 3
@@ -20,2 +21,1 @@
-gone = True
 kept = True
"""
    result = parse_diff(diff, DocDiffConfig(mode="hunks"))
    records = result.changes["a.py"]
    assert [r.lines for r in records] == ["1-3", "21"]
    assert records[0].context[0].start == "y = 2 and a..."
    assert records[1].context[0].start == "gone = True"


def test_hunk_mode_still_flags_doc_changes():
    diff = """\
diff --git a/a.js b/a.js
--- a/a.js
+++ b/a.js
@@ -1,1 +1,2 @@
+/** Doc. */
 x();
"""
    result = parse_diff(diff, DocDiffConfig(mode="hunks"))
    assert result.has_documentation_change
    assert [r.lines for r in result.changes["a.js"]] == ["1-2"]


def test_records_keep_file_encounter_order():
    diff = """\
diff --git a/z.js b/z.js
--- a/z.js
+++ b/z.js
@@ -1,1 +1,2 @@
+/** Z. */
 z();
diff --git a/a.js b/a.js
--- a/a.js
+++ b/a.js
@@ -1,1 +1,2 @@
+/** A. */
 a();
"""
    assert list(parse_diff(diff).changes) == ["z.js", "a.js"]


def test_scanner_verbose_logs_files(capsys):
    scanner = DiffScanner(DocDiffConfig(verbose=True))
    scanner.scan(DOC_DIFF)
    assert "processing file src/api.js" in capsys.readouterr().err
