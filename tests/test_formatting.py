"""
Tests for the chat formatting pipeline, relative time labels and badge text.
"""

from datetime import datetime, timedelta

import pytest

from backend.utils.formatting import (
    FORMAT_PIPELINE,
    badge_text,
    format_bold,
    format_code_blocks,
    format_inline_code,
    format_line_breaks,
    format_message,
    format_ordered_list,
    format_relative_time,
    format_unordered_list,
    merge_adjacent_lists,
)


class TestPipelineSteps:
    def test_pipeline_order(self):
        assert FORMAT_PIPELINE == (
            format_code_blocks,
            format_inline_code,
            format_bold,
            format_ordered_list,
            format_unordered_list,
            format_line_breaks,
            merge_adjacent_lists,
        )

    def test_code_block_drops_language_tag(self):
        assert format_code_blocks("```python\nprint(1)\n```") == "<pre><code>print(1)\n</code></pre>"

    def test_inline_code(self):
        assert format_inline_code("run `ls` now") == "run <code>ls</code> now"

    def test_bold(self):
        assert format_bold("a **b** c") == "a <strong>b</strong> c"

    def test_each_list_line_gets_own_wrapper(self):
        assert format_ordered_list("1. a\n2. b") == "<ol><li>a</li></ol>\n<ol><li>b</li></ol>"
        assert format_unordered_list("- a\n• b") == "<ul><li>a</li></ul>\n<ul><li>b</li></ul>"

    def test_line_breaks(self):
        assert format_line_breaks("a\nb") == "a<br>b"

    def test_merge_only_same_type(self):
        text = "<ol><li>a</li></ol><br><ol><li>b</li></ol><br><ul><li>c</li></ul>"
        assert merge_adjacent_lists(text) == "<ol><li>a</li><li>b</li></ol><br><ul><li>c</li></ul>"


class TestFormatMessage:
    def test_bold_and_code_do_not_cross_contaminate(self):
        assert format_message("**bold** and `code`") == "<strong>bold</strong> and <code>code</code>"

    def test_code_inside_bold_nests_code_innermost(self):
        assert format_message("**`x`**") == "<strong><code>x</code></strong>"

    def test_consecutive_list_lines_merge(self):
        text = "Steps:\n1. one\n2. two\n- a\n- b"
        assert format_message(text) == (
            "Steps:<br><ol><li>one</li><li>two</li></ol><br><ul><li>a</li><li>b</li></ul>"
        )

    def test_code_block_newlines_become_breaks(self):
        assert format_message("```\nx = 1\n```") == "<pre><code>x = 1<br></code></pre>"

    def test_html_is_escaped(self):
        assert format_message("<script>alert(1)</script> & **hi**") == (
            "&lt;script&gt;alert(1)&lt;/script&gt; &amp; <strong>hi</strong>"
        )

    def test_plain_text_untouched(self):
        assert format_message("It's \"fine\"") == "It's \"fine\""


class TestRelativeTime:
    @pytest.fixture
    def now(self):
        return datetime(2026, 10, 18, 15, 0).astimezone()

    def test_just_now(self, now):
        assert format_relative_time(now - timedelta(seconds=30), now) == "just now"

    def test_future_timestamp_is_just_now(self, now):
        assert format_relative_time(now + timedelta(minutes=3), now) == "just now"

    def test_minutes_ago(self, now):
        assert format_relative_time(now - timedelta(minutes=5, seconds=59), now) == "5 minutes ago"

    def test_single_minute_is_singular(self, now):
        assert format_relative_time(now - timedelta(seconds=90), now) == "1 minute ago"

    def test_same_day_shows_clock_time(self, now):
        assert format_relative_time(now - timedelta(hours=2), now) == "13:00"

    def test_other_day_shows_month_and_day(self, now):
        assert format_relative_time(now - timedelta(days=3), now) == "Oct 15"


@pytest.mark.parametrize("count,expected", [(0, ""), (1, "1"), (9, "9"), (10, "9+"), (-1, "")])
def test_badge_text(count, expected):
    assert badge_text(count) == expected
