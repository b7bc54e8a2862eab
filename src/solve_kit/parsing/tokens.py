# src/solve_kit/parsing/tokens.py

"""Block tokenizer over markdown-it-py.

markdown-it gives every top-level block a line map; the raw source of each
block is sliced straight out of the input lines with it. Lines that belong to
no block (blank runs, link reference definitions) become their own tokens, so
joining every token's `raw` gives back the input with newlines normalized.
"""

import logging

from markdown_it import MarkdownIt
from markdown_it.token import Token as BlockToken

from .models import Token, TokenKind

logger = logging.getLogger(__name__)

_md = MarkdownIt("commonmark").enable(["table", "strikethrough"])

_BLOCK_KINDS: dict[str, TokenKind] = {
    "heading_open": "heading",
    "paragraph_open": "paragraph",
    "bullet_list_open": "list",
    "ordered_list_open": "list",
    "fence": "code",
    "code_block": "code",
}


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def tokenize(text: str) -> list[Token]:
    """Split text into ordered top-level block tokens."""
    source = normalize_newlines(text)
    lines = _split_lines(source)
    parsed = _md.parse(source)

    tokens: list[Token] = []
    cursor = 0
    for index, block in enumerate(parsed):
        if block.level != 0 or block.nesting < 0 or block.map is None:
            continue

        start, end = block.map
        start = max(start, cursor)
        end = max(end, start)
        if start > cursor:
            tokens.append(_gap_token(lines[cursor:start]))

        tokens.append(_block_token(parsed, index, "".join(lines[start:end])))
        cursor = end

    if cursor < len(lines):
        rest = lines[cursor:]
        if any(rest):
            tokens.append(_gap_token(rest))

    logger.debug("Tokenized %d chars into %d blocks", len(source), len(tokens))
    return tokens


def _split_lines(source: str) -> list[str]:
    # markdown-it numbers lines by "\n" only, so str.splitlines would drift.
    parts = source.split("\n")
    return [part + "\n" for part in parts[:-1]] + [parts[-1]]


def _gap_token(lines: list[str]) -> Token:
    raw = "".join(lines)
    return Token(kind="space" if not raw.strip() else "other", raw=raw)


def _block_token(parsed: list[BlockToken], index: int, raw: str) -> Token:
    block = parsed[index]
    kind = _BLOCK_KINDS.get(block.type, "other")
    if kind != "heading":
        return Token(kind=kind, raw=raw)

    inline = parsed[index + 1] if index + 1 < len(parsed) else None
    text = inline.content if inline is not None and inline.type == "inline" else ""
    return Token(kind="heading", raw=raw, depth=int(block.tag[1:]), text=text)
