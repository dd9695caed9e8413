"""Vue single-file component parsing.

Extensions are stored as SFC source. The browser-side Vue runtime turns the
template and script into render functions; this module only splits the
source into its top-level blocks, enforces the structure the dashboard host
can load, and packages the result as a JSON-serializable descriptor.
"""
from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field
from typing import Optional

_OPEN_TAG_RE = re.compile(r"<([A-Za-z][\w-]*)((?:\"[^\"]*\"|'[^']*'|[^'\">])*)>")
_ATTR_RE = re.compile(r"""([^\s=/>"']+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'=<>`]+)))?""")
_TEMPLATE_TAG_RE = re.compile(
    r"<!--.*?-->|<template\b((?:\"[^\"]*\"|'[^']*'|[^'\">])*)>|</template\s*>",
    re.IGNORECASE | re.DOTALL,
)
_EXPORT_DEFAULT_RE = re.compile(r"\bexport\s+default\b")


class SFCParseError(ValueError):
    """Raised when extension source is not a loadable single-file component."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.message = message
        self.line = line
        super().__init__(f"Line {line}: {message}" if line else message)


@dataclass
class SFCBlock:
    type: str
    content: str
    attrs: dict = field(default_factory=dict)
    line: int = 1

    @property
    def lang(self) -> Optional[str]:
        lang = self.attrs.get("lang")
        return lang if isinstance(lang, str) else None

    @property
    def setup(self) -> bool:
        return bool(self.attrs.get("setup"))

    @property
    def scoped(self) -> bool:
        return bool(self.attrs.get("scoped"))

    @property
    def module(self) -> bool:
        return bool(self.attrs.get("module"))


@dataclass
class SFCDescriptor:
    source: str
    template: Optional[SFCBlock] = None
    script: Optional[SFCBlock] = None
    script_setup: Optional[SFCBlock] = None
    styles: list[SFCBlock] = field(default_factory=list)
    custom_blocks: list[SFCBlock] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def has_scoped_style(self) -> bool:
        return any(style.scoped for style in self.styles)


def _line_at(source: str, index: int) -> int:
    return source.count("\n", 0, index) + 1


def _parse_attrs(text: str) -> dict:
    attrs: dict = {}
    for match in _ATTR_RE.finditer(text):
        name = match.group(1).lower()
        value = next((g for g in match.group(2, 3, 4) if g is not None), None)
        attrs[name] = True if value is None else value
    return attrs


def _find_template_close(source: str, start: int) -> Optional[tuple[int, int]]:
    depth = 1
    for match in _TEMPLATE_TAG_RE.finditer(source, start):
        if match.group(0).startswith("<!--"):
            continue
        if match.group(0).startswith("</"):
            depth -= 1
            if depth == 0:
                return match.start(), match.end()
        elif not (match.group(1) or "").rstrip().endswith("/"):
            depth += 1
    return None


def _find_close(source: str, tag: str, start: int) -> Optional[tuple[int, int]]:
    if tag == "template":
        return _find_template_close(source, start)
    match = re.compile(rf"</{re.escape(tag)}\s*>", re.IGNORECASE).search(source, start)
    if not match:
        return None
    return match.start(), match.end()


def _add_block(descriptor: SFCDescriptor, block: SFCBlock) -> None:
    if "src" in block.attrs:
        raise SFCParseError(
            f"<{block.type}> blocks cannot load external src; inline the code instead.",
            line=block.line,
        )

    if block.type == "template":
        if descriptor.template is not None:
            raise SFCParseError("Only one <template> block is allowed.", line=block.line)
        descriptor.template = block
    elif block.type == "script":
        if block.setup:
            if descriptor.script_setup is not None:
                raise SFCParseError("Only one <script setup> block is allowed.", line=block.line)
            descriptor.script_setup = block
        else:
            if descriptor.script is not None:
                raise SFCParseError("Only one <script> block is allowed.", line=block.line)
            descriptor.script = block
    elif block.type == "style":
        descriptor.styles.append(block)
    else:
        descriptor.custom_blocks.append(block)


def parse_sfc(source: str) -> SFCDescriptor:
    """Split SFC source into top-level blocks.

    Text between blocks is ignored the same way the Vue compiler ignores it.
    Raises SFCParseError with a 1-based line number when the structure is
    invalid.
    """
    if not source or not source.strip():
        raise SFCParseError("Extension source is empty.")

    descriptor = SFCDescriptor(source=source)
    pos = 0
    length = len(source)
    while pos < length:
        lt = source.find("<", pos)
        if lt == -1:
            break

        if source.startswith("<!--", lt):
            end = source.find("-->", lt + 4)
            if end == -1:
                raise SFCParseError("Unterminated comment.", line=_line_at(source, lt))
            pos = end + 3
            continue

        match = _OPEN_TAG_RE.match(source, lt)
        if not match:
            raise SFCParseError("Malformed tag at the top level.", line=_line_at(source, lt))

        tag = match.group(1).lower()
        attrs_text = match.group(2) or ""
        line = _line_at(source, lt)

        if attrs_text.rstrip().endswith("/"):
            _add_block(descriptor, SFCBlock(tag, "", _parse_attrs(attrs_text.rstrip()[:-1]), line))
            pos = match.end()
            continue

        close = _find_close(source, tag, match.end())
        if close is None:
            raise SFCParseError(f"<{tag}> block is not closed.", line=line)

        content = source[match.end():close[0]]
        _add_block(descriptor, SFCBlock(tag, content, _parse_attrs(attrs_text), line))
        pos = close[1]

    if descriptor.template is None and descriptor.script is None and descriptor.script_setup is None:
        raise SFCParseError("A component needs a <template> or a <script> block.")

    if (
        descriptor.script is not None
        and descriptor.script_setup is None
        and not _EXPORT_DEFAULT_RE.search(descriptor.script.content)
    ):
        descriptor.warnings.append("<script> has no 'export default'; the component will have no options.")

    return descriptor


def source_checksum(source: str) -> str:
    return hashlib.sha256(source.encode("utf-8")).hexdigest()


def _block_json(block: Optional[SFCBlock]) -> Optional[dict]:
    if block is None:
        return None
    return {"content": block.content, "lang": block.lang, "line": block.line}


def compile_extension(source: str, *, extension_id: str = "") -> dict:
    """Parse source and build the descriptor the dashboard host loads."""
    descriptor = parse_sfc(source)
    checksum = source_checksum(source)

    return {
        "extension_id": extension_id,
        "checksum": checksum,
        "scope_id": f"data-v-{checksum[:8]}",
        "source": source,
        "template": _block_json(descriptor.template),
        "script": _block_json(descriptor.script),
        "script_setup": _block_json(descriptor.script_setup),
        "styles": [
            {
                "content": style.content,
                "lang": style.lang,
                "scoped": style.scoped,
                "module": style.module,
            }
            for style in descriptor.styles
        ],
        "custom_blocks": [
            {"type": block.type, "content": block.content, "attrs": block.attrs}
            for block in descriptor.custom_blocks
        ],
        "has_scoped_style": descriptor.has_scoped_style,
        "warnings": list(descriptor.warnings),
    }
