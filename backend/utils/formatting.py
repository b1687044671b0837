# Role: Display formatting for chat turns. A fixed pipeline of regex text transforms turns a lightweight
# markdown subset into an HTML fragment; plus relative timestamp labels and the unread badge text.
#
# Order matters: later steps see markup produced by earlier ones (line breaks land between list
# wrappers, and the final merge step relies on exactly that).

from __future__ import annotations

import html
import re
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

_CODE_BLOCK = re.compile(r"```(\w+)?\n([\s\S]*?)```")
_INLINE_CODE = re.compile(r"`([^`]+)`")
_BOLD = re.compile(r"\*\*([^*]+)\*\*")
_ORDERED_ITEM = re.compile(r"^\d+\.\s+(.+)$", re.MULTILINE)
_UNORDERED_ITEM = re.compile(r"^[-•]\s+(.+)$", re.MULTILINE)


def escape_html(text: str) -> str:
    # Key line: quote=False keeps ' and " intact; only &, <, > can open markup.
    return html.escape(text, quote=False)


def format_code_blocks(text: str) -> str:
    # The language tag after ``` is dropped.
    return _CODE_BLOCK.sub(r"<pre><code>\2</code></pre>", text)


def format_inline_code(text: str) -> str:
    return _INLINE_CODE.sub(r"<code>\1</code>", text)


def format_bold(text: str) -> str:
    return _BOLD.sub(r"<strong>\1</strong>", text)


def format_ordered_list(text: str) -> str:
    # Each matching line gets its own wrapper; merge_adjacent_lists joins them later.
    return _ORDERED_ITEM.sub(r"<ol><li>\1</li></ol>", text)


def format_unordered_list(text: str) -> str:
    return _UNORDERED_ITEM.sub(r"<ul><li>\1</li></ul>", text)


def format_line_breaks(text: str) -> str:
    return text.replace("\n", "<br>")


def merge_adjacent_lists(text: str) -> str:
    return text.replace("</ol><br><ol>", "").replace("</ul><br><ul>", "")


FORMAT_PIPELINE: Tuple[Callable[[str], str], ...] = (
    format_code_blocks,
    format_inline_code,
    format_bold,
    format_ordered_list,
    format_unordered_list,
    format_line_breaks,
    merge_adjacent_lists,
)


def format_message(content: str) -> str:
    formatted = escape_html(content)
    for step in FORMAT_PIPELINE:
        formatted = step(formatted)
    return formatted


def format_relative_time(timestamp: datetime, now: Optional[datetime] = None) -> str:
    # 1) < 1 minute -> "just now" (also covers clock skew into the future)
    # 2) < 1 hour -> "N minutes ago"
    # 3) same local calendar day -> "HH:MM"
    # 4) otherwise -> "Mon D"
    now = now or datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = (now - timestamp).total_seconds()
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        minutes = int(seconds // 60)
        return "1 minute ago" if minutes == 1 else f"{minutes} minutes ago"

    local_ts = timestamp.astimezone()
    local_now = now.astimezone()
    if local_ts.date() == local_now.date():
        return local_ts.strftime("%H:%M")
    return f"{local_ts:%b} {local_ts.day}"


def badge_text(unread: int) -> str:
    if unread <= 0:
        return ""
    return "9+" if unread > 9 else str(unread)
