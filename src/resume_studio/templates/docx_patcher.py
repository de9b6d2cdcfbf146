"""In-place DOCX text substitution.

Parses ``word/document.xml`` once, edits individual ``w:t`` text nodes and
repackages the container with every other member copied unchanged. A bullet
is only replaced when a single text node holds it; text split across runs is
left alone and reported back as not written.
"""

from __future__ import annotations

import logging
import re
import zipfile
from io import BytesIO

from lxml import etree

from resume_studio.exceptions import CorruptDocument, DocumentWriteError, OriginalTextNotFound
from resume_studio.models.enhanced import BulletState, BulletUpdateStatus

logger = logging.getLogger(__name__)

BODY_MEMBER = "word/document.xml"
W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"

# leading whitespace and an optional typed bullet glyph, the text, trailing whitespace
_NODE_PARTS = re.compile(r"^(\s*(?:[•●○◦■□▪▫‣⁃➢►▸✓❖]\s*|[-*–]\s+)?)(.*?)(\s*)$", re.DOTALL)


def _node_key(text: str) -> str:
    """Comparison form of a bullet or node text: marker and spacing removed."""
    core = _NODE_PARTS.match(text).group(2)
    return " ".join(core.split())


class DocxTextDocument:
    """An opened DOCX whose body text nodes can be found and replaced by index."""

    def __init__(self, data: bytes):
        try:
            with zipfile.ZipFile(BytesIO(data)) as zf:
                self._infos = zf.infolist()
                self._members = {info.filename: zf.read(info.filename) for info in self._infos}
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError) as e:
            raise CorruptDocument(f"Cannot open office document container: {e}", "docx") from e

        if BODY_MEMBER not in self._members:
            raise CorruptDocument(f"Missing {BODY_MEMBER} in office document", "docx")
        try:
            self._tree = etree.fromstring(self._members[BODY_MEMBER])
        except etree.XMLSyntaxError as e:
            raise CorruptDocument(f"Unreadable {BODY_MEMBER}: {e}", "docx") from e

        self.text_nodes = list(self._tree.iter(f"{{{W_NS}}}t"))
        self._claimed: set[int] = set()
        self.modified = False

    def __len__(self) -> int:
        return len(self.text_nodes)

    def node_text(self, index: int) -> str:
        return self.text_nodes[index].text or ""

    def find_text_node(self, text: str, start: int = 0) -> int | None:
        """Index of the first unclaimed node holding ``text``, searching from ``start``.

        The search wraps to the beginning when nothing matches after ``start``.
        """
        target = _node_key(text)
        if not target:
            return None
        count = len(self.text_nodes)
        for index in [*range(start, count), *range(0, min(start, count))]:
            if index not in self._claimed and _node_key(self.node_text(index)) == target:
                return index
        return None

    def claim(self, index: int) -> None:
        """Mark a node as belonging to a bullet so later searches skip it."""
        self._claimed.add(index)

    def replace_text(self, index: int, new_text: str) -> None:
        """Replace a node's text, keeping its leading marker and surrounding whitespace."""
        node = self.text_nodes[index]
        prefix, _, suffix = _NODE_PARTS.match(node.text or "").groups()
        node.text = f"{prefix}{new_text}{suffix}"
        node.set(XML_SPACE, "preserve")
        self.claim(index)
        self.modified = True

    def to_bytes(self) -> bytes:
        """Repackage the container; untouched when nothing was replaced.

        Raises:
            DocumentWriteError: the written container does not reopen cleanly.
        """
        body = self._members[BODY_MEMBER]
        if self.modified:
            body = etree.tostring(self._tree, xml_declaration=True, encoding="UTF-8", standalone=True)

        buffer = BytesIO()
        with zipfile.ZipFile(buffer, "w") as out:
            for info in self._infos:
                data = body if info.filename == BODY_MEMBER else self._members[info.filename]
                out.writestr(info, data, compress_type=info.compress_type)
        output = buffer.getvalue()
        validate_docx(output)
        return output


def validate_docx(data: bytes) -> None:
    """Reopen a written DOCX and parse its body.

    Raises:
        DocumentWriteError: if the container or ``word/document.xml`` is broken.
    """
    try:
        with zipfile.ZipFile(BytesIO(data)) as zf:
            bad = zf.testzip()
            if bad is not None:
                raise DocumentWriteError(f"Corrupt member in output document: {bad}")
            etree.fromstring(zf.read(BODY_MEMBER))
    except (zipfile.BadZipFile, KeyError, etree.XMLSyntaxError) as e:
        raise DocumentWriteError(f"Output document failed to reopen: {e}") from e


def _locate(document: DocxTextDocument, text: str, cursor: int) -> int:
    index = document.find_text_node(text, cursor)
    if index is None:
        raise OriginalTextNotFound(text)
    return index


def apply_substitutions(
    document: DocxTextDocument, statuses: list[BulletUpdateStatus],
) -> list[BulletUpdateStatus]:
    """Write pending bullets into ``document`` and return their final statuses.

    Statuses are walked in flattened bullet order. Each bullet is searched
    from just after the previous bullet's node, so duplicate text resolves to
    the nearest entry. Unchanged bullets are located too, to move the cursor.
    """
    cursor = 0
    final: list[BulletUpdateStatus] = []
    for status in statuses:
        pending = status.state == BulletState.ENHANCED_PENDING_WRITE
        try:
            index = _locate(document, status.original_text, cursor)
        except OriginalTextNotFound as e:
            if pending:
                logger.warning("Bullet %d not written: %s", status.bullet_index, e)
                final.append(status.mark_not_written())
            else:
                final.append(status)
            continue

        cursor = index + 1
        if pending:
            document.replace_text(index, status.enhanced_text)
            logger.debug("Bullet %d written to text node %d", status.bullet_index, index)
            final.append(status.mark_written())
        else:
            document.claim(index)
            final.append(status)
    return final
