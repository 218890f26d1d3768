#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/converters/html2markdown.py
"""HTML to Markdown and HTML to plain text conversion for email bodies.

Email HTML is untrusted and usually shallow. Both converters tokenise the
fragment with BeautifulSoup's ``html.parser`` and walk the resulting tree,
dispatching each element to a per-tag handler that returns its rendered
text. Scripts, styles and the document head are dropped, entities are
decoded by the tokenizer, and every link or image URL passes through the
allow-list in :mod:`eml2md.utils.html_sanitizer`.

"""

from __future__ import annotations

import logging
import re
from html import escape
from typing import Callable, ClassVar

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag

from eml2md.utils.html_sanitizer import sanitize_null_bytes, sanitize_url

logger = logging.getLogger(__name__)

# Subtrees nested deeper than this are flattened to their text
MAX_HTML_DEPTH = 100

_DROPPED_ELEMENTS = frozenset({"script", "style", "head", "title", "template", "noscript"})
_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)
_WHITESPACE = re.compile(r"[ \t\r\n\f\v\xa0]+")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_FENCE = "```"

# Tag name -> parent tags it ends when it appears directly inside them
_IMPLIED_END_TAGS: dict[str, frozenset[str]] = {
    "li": frozenset({"li"}),
    "td": frozenset({"td", "th"}),
    "th": frozenset({"td", "th"}),
    "tr": frozenset({"td", "th", "tr"}),
}


def _split_outer_whitespace(text: str) -> tuple[str, str, str]:
    """Split text into leading whitespace, content and trailing whitespace."""
    stripped = text.strip()
    if not stripped:
        return text, "", ""
    start = len(text) - len(text.lstrip())
    end = len(text.rstrip())
    return text[:start], stripped, text[end:]


def _escape_brackets(text: str) -> str:
    """Escape square brackets so text cannot form Markdown link syntax."""
    return text.replace("[", "\\[").replace("]", "\\]")


def _close_implied_tags(soup: BeautifulSoup) -> None:
    """Un-nest list items, cells and rows whose previous sibling was left unclosed.

    ``html.parser`` has no implied end tags, so ``<li>one<li>two`` puts the
    second item inside the first. Such an element and everything after it
    are moved out to follow the element they were nested in.
    """
    for tag in soup.find_all(list(_IMPLIED_END_TAGS)):
        closes = _IMPLIED_END_TAGS[tag.name]
        while isinstance(tag.parent, Tag) and tag.parent.name in closes:
            anchor = tag.parent
            for node in [tag, *tag.next_siblings]:
                anchor.insert_after(node.extract())
                anchor = node


def _parse_html(html: str) -> BeautifulSoup:
    """Tokenise html; markup the tokenizer rejects is converted as text."""
    cleaned = sanitize_null_bytes(html)
    try:
        soup = BeautifulSoup(cleaned, "html.parser")
    except ParserRejectedMarkup as e:
        logger.debug(f"html.parser rejected the markup, treating it as text: {e}")
        return BeautifulSoup(escape(cleaned), "html.parser")
    _close_implied_tags(soup)
    return soup


class _HtmlWalker:
    """Recursive tree walk with a tag-name dispatch table.

    Subclasses fill ``_ELEMENT_HANDLERS`` with method names. Elements without
    a handler render their children.
    """

    _ELEMENT_HANDLERS: ClassVar[dict[str, str]] = {}

    def convert(self, html: str) -> str:
        if not html or not html.strip():
            return ""
        soup = _parse_html(html)
        return self._finalize(self._render_children(soup, 0))

    def _finalize(self, text: str) -> str:
        return _EXCESS_NEWLINES.sub("\n\n", text).strip()

    def _render_text(self, text: str) -> str:
        return text

    def _render_children(self, node: Tag, depth: int) -> str:
        return "".join(self._render_node(child, depth + 1) for child in node.children)

    def _render_node(self, node: object, depth: int) -> str:
        if isinstance(node, _SKIPPED_STRINGS):
            return ""
        if isinstance(node, NavigableString):
            return self._render_text(str(node))
        if not isinstance(node, Tag):
            return ""

        name = (node.name or "").lower()
        if name in _DROPPED_ELEMENTS:
            return ""
        if depth > MAX_HTML_DEPTH:
            logger.debug(f"HTML nested deeper than {MAX_HTML_DEPTH} levels, flattening <{name}> to text")
            return self._render_text(node.get_text(" "))

        handler_name = self._ELEMENT_HANDLERS.get(name)
        if handler_name:
            handler: Callable[[Tag, int], str] = getattr(self, handler_name)
            return handler(node, depth)
        return self._render_children(node, depth)


class HtmlToMarkdownConverter(_HtmlWalker):
    """Convert an HTML fragment to Markdown.

    Tag mapping:

    - ``h1``-``h6`` to ``#``-``######`` headings
    - ``strong``/``b`` to ``**bold**``, ``em``/``i`` to ``*italic*``
    - ``a`` to ``[text](url)``; unsafe or missing URLs keep only the text
    - ``img`` to ``![alt](url)``; unsafe URLs keep only the alt text
    - ``li`` to ``- item`` lines (ordered and unordered alike)
    - ``br`` to a newline, ``p`` to a paragraph, ``div`` to a line
    - ``blockquote`` lines prefixed with ``> ``
    - inline ``code`` in backticks, ``pre`` as a fenced block
    - ``hr`` to ``---``
    - ``table`` to pipe rows, with a separator after a header row of ``th``

    """

    _ELEMENT_HANDLERS: ClassVar[dict[str, str]] = {
        # Block elements
        "h1": "_render_heading",
        "h2": "_render_heading",
        "h3": "_render_heading",
        "h4": "_render_heading",
        "h5": "_render_heading",
        "h6": "_render_heading",
        "p": "_render_paragraph",
        "div": "_render_line_block",
        "ul": "_render_list",
        "ol": "_render_list",
        "li": "_render_list_item",
        "blockquote": "_render_blockquote",
        "pre": "_render_code_block",
        "hr": "_render_rule",
        "table": "_render_table",
        # Inline elements
        "strong": "_render_strong",
        "b": "_render_strong",
        "em": "_render_emphasis",
        "i": "_render_emphasis",
        "a": "_render_link",
        "img": "_render_image",
        "br": "_render_line_break",
        "code": "_render_inline_code",
    }

    def _render_text(self, text: str) -> str:
        return _escape_brackets(_WHITESPACE.sub(" ", text))

    def _finalize(self, text: str) -> str:
        lines: list[str] = []
        in_fence = False
        for line in text.split("\n"):
            if line == _FENCE or (line.startswith(_FENCE) and not in_fence and " " not in line):
                in_fence = not in_fence
                lines.append(line)
            elif in_fence:
                lines.append(line.rstrip())
            else:
                lines.append(line.strip())
        return super()._finalize("\n".join(lines))

    def _render_inline_children(self, node: Tag, depth: int) -> str:
        """Render children on a single line."""
        return _WHITESPACE.sub(" ", self._render_children(node, depth)).strip()

    # Block elements

    def _render_heading(self, node: Tag, depth: int) -> str:
        content = self._render_inline_children(node, depth)
        if not content:
            return ""
        level = int(node.name[1])
        return f"\n\n{'#' * level} {content}\n\n"

    def _render_paragraph(self, node: Tag, depth: int) -> str:
        return f"\n\n{self._render_children(node, depth)}\n\n"

    def _render_line_block(self, node: Tag, depth: int) -> str:
        return f"{self._render_children(node, depth)}\n"

    def _render_list(self, node: Tag, depth: int) -> str:
        return f"\n\n{self._render_children(node, depth)}\n\n"

    def _render_list_item(self, node: Tag, depth: int) -> str:
        content = self._render_children(node, depth).strip()
        return f"- {content}\n"

    def _render_blockquote(self, node: Tag, depth: int) -> str:
        content = self._finalize(self._render_children(node, depth))
        if not content:
            return ""
        quoted = "\n".join(f"> {line}" if line else ">" for line in content.split("\n"))
        return f"\n\n{quoted}\n\n"

    def _render_code_block(self, node: Tag, depth: int) -> str:
        code = node.get_text().replace("\r\n", "\n").replace("\r", "\n").strip("\n")
        code = "\n".join(line.rstrip() for line in code.split("\n"))
        language = ""
        code_child = node.find("code")
        if isinstance(code_child, Tag):
            for css_class in code_child.get("class") or ():
                if css_class.startswith("language-"):
                    language = css_class[len("language-") :]
                    break
        return f"\n\n{_FENCE}{language}\n{code}\n{_FENCE}\n\n"

    def _render_rule(self, node: Tag, depth: int) -> str:
        return "\n\n---\n\n"

    def _render_table(self, node: Tag, depth: int) -> str:
        rows: list[str] = []
        for index, row in enumerate(self._table_rows(node)):
            cells = row.find_all(["td", "th"], recursive=False)
            if not cells:
                continue
            texts = [self._render_inline_children(cell, depth + 1).replace("|", "\\|") for cell in cells]
            rows.append("| " + " | ".join(texts) + " |")
            if index == 0 and all(cell.name == "th" for cell in cells):
                rows.append("| " + " | ".join("---" for _ in cells) + " |")
        if not rows:
            return ""
        return "\n\n" + "\n".join(rows) + "\n\n"

    @staticmethod
    def _table_rows(table: Tag) -> list[Tag]:
        """Return the rows of a table, not including rows of nested tables."""
        rows: list[Tag] = []
        for child in table.find_all(recursive=False):
            if child.name == "tr":
                rows.append(child)
            elif child.name in ("thead", "tbody", "tfoot"):
                rows.extend(child.find_all("tr", recursive=False))
        return rows

    # Inline elements

    def _wrap_inline(self, node: Tag, depth: int, marker: str) -> str:
        leading, content, trailing = _split_outer_whitespace(self._render_children(node, depth))
        if not content:
            return leading
        return f"{leading}{marker}{content}{marker}{trailing}"

    def _render_strong(self, node: Tag, depth: int) -> str:
        return self._wrap_inline(node, depth, "**")

    def _render_emphasis(self, node: Tag, depth: int) -> str:
        return self._wrap_inline(node, depth, "*")

    def _render_link(self, node: Tag, depth: int) -> str:
        leading, text, trailing = _split_outer_whitespace(self._render_children(node, depth))
        url = sanitize_url(node.get("href"))
        if url and text:
            return f"{leading}[{text}]({url}){trailing}"
        return f"{leading}{text}{trailing}"

    def _render_image(self, node: Tag, depth: int) -> str:
        alt = _escape_brackets(_WHITESPACE.sub(" ", node.get("alt") or "").strip())
        url = sanitize_url(node.get("src"))
        if url:
            return f"![{alt}]({url})"
        return alt

    def _render_line_break(self, node: Tag, depth: int) -> str:
        return "\n"

    def _render_inline_code(self, node: Tag, depth: int) -> str:
        code = _WHITESPACE.sub(" ", node.get_text())
        if not code.strip():
            return code
        fence = "``" if "`" in code else "`"
        padding = " " if code.startswith("`") or code.endswith("`") else ""
        return f"{fence}{padding}{code}{padding}{fence}"


class HtmlToPlainTextConverter(_HtmlWalker):
    """Convert an HTML fragment to plain text.

    Source whitespace is kept. ``br`` becomes a newline, ``p`` ends with a
    blank line, ``div``, ``tr`` and ``li`` end with a newline, and table cells
    are separated by a space.
    """

    _ELEMENT_HANDLERS: ClassVar[dict[str, str]] = {
        "br": "_render_line_break",
        "p": "_render_paragraph",
        "div": "_render_line_end",
        "tr": "_render_line_end",
        "li": "_render_line_end",
        "td": "_render_cell",
        "th": "_render_cell",
    }

    def _render_text(self, text: str) -> str:
        return text.replace("\xa0", " ")

    def _render_line_break(self, node: Tag, depth: int) -> str:
        return "\n"

    def _render_paragraph(self, node: Tag, depth: int) -> str:
        return f"{self._render_children(node, depth)}\n\n"

    def _render_line_end(self, node: Tag, depth: int) -> str:
        return f"{self._render_children(node, depth)}\n"

    def _render_cell(self, node: Tag, depth: int) -> str:
        return f"{self._render_children(node, depth)} "


def html_to_markdown(html: str) -> str:
    """Convert an HTML fragment to Markdown.

    Parameters
    ----------
    html : str
        HTML from an email body; may be hostile or malformed

    Returns
    -------
    str
        Markdown text, trimmed, with at most one blank line in a row

    Examples
    --------
        >>> html_to_markdown('<b>Hi</b> <a href="javascript:alert(1)">click</a>')
        '**Hi** click'

    """
    return HtmlToMarkdownConverter().convert(html)


def html_to_plain_text(html: str) -> str:
    """Convert an HTML fragment to plain text.

    Examples
    --------
        >>> html_to_plain_text("<p>Hello&nbsp;there</p><p>Bye</p>")
        'Hello there\\n\\nBye'

    """
    return HtmlToPlainTextConverter().convert(html)
