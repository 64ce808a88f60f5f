"""
PDF Object Store
=================
Append-only table of indirect objects that serializes itself into a complete
PDF 1.4 file: header, numbered objects, cross-reference table and trailer.

Object ids are assigned densely from 1 in creation order and are never
reused. The only mutation is ``update``, which overwrites an object that was
already allocated – typically a placeholder created with ``reserve`` for an
object whose dictionary refers to ids not known yet.

Example::

    store = PdfObjectStore()
    page_id = store.reserve()
    pages_id = store.add_raw(f"<< /Type /Pages /Kids [{page_id} 0 R] /Count 1 >>")
    store.update(page_id, f"<< /Type /Page /Parent {pages_id} 0 R /MediaBox [0 0 595 842] >>")
    catalog_id = store.add_raw(f"<< /Type /Catalog /Pages {pages_id} 0 R >>")
    pdf_bytes = store.build(catalog_id)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import ObjectStoreError

logger = logging.getLogger(__name__)

PDF_HEADER = b"%PDF-1.4\n"


@dataclass
class PdfObject:
    """One indirect object: its id and the raw bytes between ``obj`` and ``endobj``."""
    id: int
    data: bytes


class PdfObjectStore:
    """
    Ordered collection of ``PdfObject`` records for a single build.

    A store is consumed by ``build``; afterwards it rejects further use.
    """

    def __init__(self) -> None:
        self._objects: list[PdfObject] = []
        self._placeholders: set[int] = set()
        self._built = False

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self):
        return iter(self._objects)

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    def add_raw(self, body: str | bytes) -> int:
        """Append an object and return its id."""
        self._check_open()
        obj_id = len(self._objects) + 1
        self._objects.append(PdfObject(obj_id, _encode(body)))
        return obj_id

    def reserve(self) -> int:
        """Allocate an empty placeholder object to be filled in with ``update``."""
        obj_id = self.add_raw(b"")
        self._placeholders.add(obj_id)
        return obj_id

    def update(self, obj_id: int, body: str | bytes) -> None:
        """Overwrite the data of an already allocated object."""
        self._check_open()
        if not 1 <= obj_id <= len(self._objects):
            raise ObjectStoreError(f"Cannot update object {obj_id}: id was never allocated")
        self._objects[obj_id - 1] = PdfObject(obj_id, _encode(body))
        self._placeholders.discard(obj_id)

    def add_stream(self, dictionary: str, stream: bytes) -> int:
        """Append a stream object; ``dictionary`` must carry the matching ``/Length``."""
        data = b"".join([
            f"{dictionary}\nstream\n".encode("utf-8"),
            stream,
            b"\nendstream\n",
        ])
        return self.add_raw(data)

    def get(self, obj_id: int) -> bytes:
        if not 1 <= obj_id <= len(self._objects):
            raise ObjectStoreError(f"Unknown object {obj_id}")
        return self._objects[obj_id - 1].data

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def build(self, root_id: int) -> bytes:
        """
        Serialize all objects into a PDF file whose trailer points at ``root_id``.

        Every offset written to the cross-reference table is the position of
        the first byte of the corresponding ``"<id> 0 obj"`` line.
        """
        self._check_open()
        if not 1 <= root_id <= len(self._objects):
            raise ObjectStoreError(f"Root object {root_id} does not exist")
        if self._placeholders:
            pending = ", ".join(str(i) for i in sorted(self._placeholders))
            raise ObjectStoreError(f"Placeholder objects never updated: {pending}")
        self._built = True

        chunks: list[bytes] = [PDF_HEADER]
        offsets: list[int] = []
        offset = len(PDF_HEADER)
        for obj in self._objects:
            chunk = b"".join([f"{obj.id} 0 obj\n".encode("ascii"), obj.data, b"\nendobj\n"])
            offsets.append(offset)
            offset += len(chunk)
            chunks.append(chunk)

        xref_start = offset
        size = len(self._objects) + 1
        xref_lines = ["xref", f"0 {size}", "0000000000 65535 f "]
        xref_lines.extend(f"{obj_offset:010d} 00000 n " for obj_offset in offsets)
        chunks.append(("\n".join(xref_lines) + "\n").encode("ascii"))
        chunks.append(
            f"trailer << /Size {size} /Root {root_id} 0 R >>\nstartxref\n{xref_start}\n%%EOF".encode("ascii")
        )

        data = b"".join(chunks)
        logger.debug("Serialized %d objects, %d bytes, xref at %d", len(self._objects), len(data), xref_start)
        return data

    def _check_open(self) -> None:
        if self._built:
            raise ObjectStoreError("Object store was already built; create a new store per document")


def _encode(body: str | bytes) -> bytes:
    """Strings are UTF-8 encoded and end with exactly one added newline if missing one."""
    if isinstance(body, str):
        return (body if body.endswith("\n") else f"{body}\n").encode("utf-8")
    return bytes(body)
