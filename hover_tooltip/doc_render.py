"""Markdown rendering and HTML truncation for tooltip documentation."""
from __future__ import annotations

from functools import lru_cache

from bs4 import BeautifulSoup, NavigableString
from markdown_it import MarkdownIt

DEFAULT_ELLIPSIS = "..."


@lru_cache(maxsize=8)
def _markdown_parser(github_flavored: bool, line_breaks: bool, sanitize: bool) -> MarkdownIt:
    # html=False escapes raw markup in the source instead of passing it through.
    md = MarkdownIt("commonmark", {"html": not sanitize, "breaks": line_breaks})
    if github_flavored:
        md.enable("table").enable("strikethrough")
    return md


def render_markdown(
    source: str,
    *,
    github_flavored: bool = True,
    line_breaks: bool = True,
    sanitize: bool = True,
) -> str:
    """Render documentation markdown to HTML."""
    return _markdown_parser(github_flavored, line_breaks, sanitize).render(source)


def truncate_html(markup: str, max_visible_chars: int, *, ellipsis: str = DEFAULT_ELLIPSIS) -> str:
    """
    Cut ``markup`` down to ``max_visible_chars`` characters of visible text.

    Tags do not count towards the limit. The text node that crosses the limit is
    cut and suffixed with ``ellipsis``; everything after it is dropped, and the
    tree is serialised again so every open element is closed.
    """
    limit = max(0, int(max_visible_chars))
    soup = BeautifulSoup(markup, "html.parser")
    strings = [node for node in soup.find_all(string=True) if isinstance(node, NavigableString)]
    if sum(len(node) for node in strings) <= limit:
        return markup

    remaining = limit
    for node in strings:
        text = str(node)
        if len(text) < remaining:
            remaining -= len(text)
            continue
        cut = NavigableString(text[:remaining] + ellipsis)
        node.replace_with(cut)
        _drop_following(cut)
        break
    return str(soup)


def _drop_following(node) -> None:
    current = node
    while current is not None and current.parent is not None:
        for sibling in list(current.next_siblings):
            sibling.extract()
        current = current.parent


def render_doc_html(doc: str, max_visible_chars: int) -> str:
    """Markdown-render ``doc`` with GitHub flavour and line breaks, then truncate."""
    html = render_markdown(doc, github_flavored=True, line_breaks=True, sanitize=True)
    return truncate_html(html, max_visible_chars)
