"""Strict XHTML encoding for the Confluence storage API.

The Confluence document API rejects markup that is not XHTML and mishandles
bare ampersands and non-ASCII bytes in text. ``encode_document`` turns the
renderer's HTML into a payload it accepts:

1. attribute values are single-quoted (inside tags only)
2. void elements are self-closed
3. text between tags loses parentheses and non-ASCII characters, bare ``&``
   becomes ``&amp;`` and ``<``/``>`` are escaped

Tag markup and comments are otherwise passed through untouched. The text rules are lossy and
meant for the Confluence export path only.

Examples:
    >>> encode_document('<div class="test">Hello (world) & café</div>')
    "<div class='test'>Hello world &amp; caf </div>"
    >>> encode_document('<br><img src="test.jpg">')
    "<br /><img src='test.jpg' />"
    >>> encode_cell_value('Price: $100 (USD)')
    'Price: $100 USD'
"""

import re
from typing import Iterator, Tuple

# Named or numeric references that must not be escaped again: &amp; &#123; &#x1A;
VALID_ENTITY_PATTERN = re.compile(
    r'&(?:[a-z][a-z0-9]{1,31}|#(?:[0-9]{1,7}|x[0-9a-f]{1,6}));',
    re.IGNORECASE
)

VOID_ELEMENTS = (
    'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input',
    'link', 'meta', 'source', 'track', 'wbr'
)

_BARE_AMPERSAND_PATTERN = re.compile(
    r'&(?!(?:[a-z][a-z0-9]{1,31}|#(?:[0-9]{1,7}|x[0-9a-f]{1,6}));)',
    re.IGNORECASE
)
_VOID_TAG_PATTERN = re.compile(
    r'<(%s)(?=[\s/>])(.*)>' % '|'.join(VOID_ELEMENTS),
    re.IGNORECASE | re.DOTALL
)
_PARENTHESES_PATTERN = re.compile(r'[()]')
_NON_ASCII_PATTERN = re.compile(r'[^\x00-\x7f]')
_WHITESPACE_RUN_PATTERN = re.compile(r'\s+')
_PERCENT_ENCODED_PATTERN = re.compile(r'%[0-9a-f]{2}', re.IGNORECASE)

_URL_ATTRIBUTE_REPLACEMENTS = (
    (' ', '%20'),
    ('"', '%22'),
    ("'", '%27'),
    ('<', '%3C'),
    ('>', '%3E'),
)


def _require_str(value, name: str) -> None:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str, got {type(value).__name__}")


def _is_tag_start(text: str, index: int) -> bool:
    """A ``<`` opens a tag when followed by a letter, ``/``, ``!`` or ``?letter``."""
    following = text[index + 1:index + 2]
    if following.isascii() and (following.isalpha() or following in ('/', '!')):
        return True
    if following == '?':
        after = text[index + 2:index + 3]
        return after.isascii() and after.isalpha()
    return False


def _tag_end(html: str, start: int) -> int:
    """
    Index just past the ``>`` that closes the tag opened at ``start``.

    A ``>`` inside a quoted attribute value does not close the tag. A quote
    opens a value only right after ``=``. An unterminated tag runs to the end
    of the input.
    """
    quote = None
    previous = ''
    for index in range(start + 1, len(html)):
        char = html[index]
        if quote:
            if char == quote:
                quote = None
        elif char in ('"', "'") and previous == '=':
            quote = char
        elif char == '>':
            return index + 1
        if not char.isspace():
            previous = char
    return len(html)


def split_markup(html: str) -> Iterator[Tuple[str, str]]:
    """
    Split HTML into ``('text' | 'tag' | 'comment', segment)`` pieces.

    Comments run from ``<!--`` to the next ``-->`` and are never split at an
    inner ``>``. Joining the segments gives back the input unchanged.
    """
    length = len(html)
    index = 0
    text_start = 0

    while index < length:
        if html[index] != '<' or not _is_tag_start(html, index):
            index += 1
            continue

        if text_start < index:
            yield 'text', html[text_start:index]

        if html.startswith('<!--', index):
            close = html.find('-->', index + 4)
            end = length if close == -1 else close + 3
            yield 'comment', html[index:end]
        else:
            end = _tag_end(html, index)
            yield 'tag', html[index:end]

        index = text_start = end

    if text_start < length:
        yield 'text', html[text_start:]


def escape_ampersands(text: str) -> str:
    """Escape ``&`` unless it starts a valid entity reference."""
    return _BARE_AMPERSAND_PATTERN.sub('&amp;', text)


def _encode_text(text: str) -> str:
    text = _PARENTHESES_PATTERN.sub('', text)
    text = _NON_ASCII_PATTERN.sub(' ', text)
    text = _WHITESPACE_RUN_PATTERN.sub(' ', text)
    text = escape_ampersands(text)
    return text.replace('<', '&lt;').replace('>', '&gt;')


def _single_quote_attributes(tag: str) -> str:
    result = []
    quote = None
    previous = ''

    for char in tag:
        if quote == '"':
            if char == '"':
                quote = None
                result.append("'")
            elif char == "'":
                result.append('&#39;')
            else:
                result.append(char)
        elif quote == "'":
            if char == "'":
                quote = None
            result.append(char)
        elif char in ('"', "'") and previous == '=':
            quote = char
            result.append("'")
        else:
            result.append(char)

        if not char.isspace():
            previous = char

    return ''.join(result)


def normalize_attribute_quotes(html: str) -> str:
    """
    Convert double-quoted attribute values to single quotes.

    Only markup inside tags is touched; text and comments pass through.
    Apostrophes inside a converted value become ``&#39;`` so the new quoting
    stays balanced.
    """
    return ''.join(
        _single_quote_attributes(segment) if kind == 'tag' else segment
        for kind, segment in split_markup(html)
    )


def _self_close(tag: str) -> str:
    match = _VOID_TAG_PATTERN.fullmatch(tag)
    if not match:
        return tag
    attributes = match.group(2).rstrip()
    if attributes.endswith('/'):
        return tag
    name = match.group(1).lower()
    if attributes:
        return f'<{name}{attributes} />'
    return f'<{name} />'


def self_close_void_elements(html: str) -> str:
    """
    Rewrite ``<br>`` as ``<br />`` and ``<img ...>`` as ``<img ... />``.

    Only whole tags are rewritten, so void markup quoted inside an attribute
    value or a comment is left alone.
    """
    return ''.join(
        _self_close(segment) if kind == 'tag' else segment
        for kind, segment in split_markup(html)
    )


def encode_text_nodes(html: str) -> str:
    """Apply the text rules to character data between tags only."""
    return ''.join(
        _encode_text(segment) if kind == 'text' else segment
        for kind, segment in split_markup(html)
    )


def encode_document(html: str) -> str:
    """
    Encode an HTML fragment or document as strict XHTML.

    Args:
        html: HTML markup; malformed input is encoded best-effort

    Returns:
        XHTML string

    Raises:
        TypeError: If html is not a string
    """
    _require_str(html, 'html')
    if not html:
        return ''

    result = normalize_attribute_quotes(html)
    result = self_close_void_elements(result)
    return encode_text_nodes(result)


def encode_cell_value(text: str) -> str:
    """
    Encode a single value that is known not to contain markup.

    Applies only the text rules: no tag detection, every ``<`` is escaped.

    Raises:
        TypeError: If text is not a string
    """
    _require_str(text, 'text')
    if not text:
        return ''
    return _encode_text(text)


def encode_url_for_attribute(url: str) -> str:
    """
    Make a URL safe for an XHTML attribute value.

    Ampersands are always escaped (entity-aware). Spaces, quotes and angle
    brackets are percent-encoded unless the URL already contains
    percent-encoded sequences, in which case it is left as encoded.

    Raises:
        TypeError: If url is not a string
    """
    _require_str(url, 'url')
    if not url:
        return ''

    already_encoded = bool(_PERCENT_ENCODED_PATTERN.search(url))
    result = escape_ampersands(url)

    if not already_encoded:
        for char, replacement in _URL_ATTRIBUTE_REPLACEMENTS:
            result = result.replace(char, replacement)

    return result


__all__ = [
    'VALID_ENTITY_PATTERN',
    'VOID_ELEMENTS',
    'escape_ampersands',
    'split_markup',
    'normalize_attribute_quotes',
    'self_close_void_elements',
    'encode_text_nodes',
    'encode_document',
    'encode_cell_value',
    'encode_url_for_attribute'
]
