"""PDF object graph and single-pass serializer.

Objects are numbered in allocation order and written in that same order, so
every cross-reference offset is known the moment an object is emitted and no
back-patching is needed. The fixed schema is::

    1  regular font         (Helvetica)
    2  bold font            (Helvetica-Bold)
    3  image XObject        (only when the content stream paints it)
    n  content stream
    n+1 page
    n+2 pages
    n+3 catalog
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..core.config import LayoutConfig
from .content import BASE_FONTS, IMAGE_RESOURCE, ContentStream, FontFace, fmt
from .errors import SerializationInvariantViolation
from .models import SignatureAsset

HEADER = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n"


@dataclass(frozen=True, slots=True)
class ObjectDefinition:
    number: int
    build: Callable[[], bytes]
    # Every number here must be allocated in the same graph.
    references: tuple[int, ...] = ()
    # Subset of references that must already be written when this object is.
    depends_on: tuple[int, ...] = ()


class ObjectGraph:
    def __init__(self) -> None:
        self._allocated = 0
        self._definitions: dict[int, ObjectDefinition] = {}

    @property
    def highest(self) -> int:
        return self._allocated

    def allocate(self) -> int:
        self._allocated += 1
        return self._allocated

    def define(
        self,
        number: int,
        build: Callable[[], bytes],
        *,
        references: tuple[int, ...] = (),
        depends_on: tuple[int, ...] = (),
    ) -> None:
        if not 1 <= number <= self._allocated:
            raise SerializationInvariantViolation(f"object {number} was never allocated")
        if number in self._definitions:
            raise SerializationInvariantViolation(f"object {number} defined twice")
        self._definitions[number] = ObjectDefinition(
            number=number,
            build=build,
            references=tuple(references) + tuple(d for d in depends_on if d not in references),
            depends_on=tuple(depends_on),
        )

    def definitions(self) -> list[ObjectDefinition]:
        """Definitions in ascending order, after checking the graph is closed and acyclic in write order."""
        missing = [n for n in range(1, self._allocated + 1) if n not in self._definitions]
        if missing:
            raise SerializationInvariantViolation(f"allocated but undefined objects: {missing}")

        ordered = [self._definitions[n] for n in range(1, self._allocated + 1)]
        for definition in ordered:
            for target in definition.references:
                if target not in self._definitions:
                    raise SerializationInvariantViolation(
                        f"object {definition.number} references undefined object {target}"
                    )
            for dep in definition.depends_on:
                if dep >= definition.number:
                    raise SerializationInvariantViolation(
                        f"object {definition.number} depends on later object {dep}"
                    )
        return ordered


def ref(number: int) -> str:
    return f"{number} 0 R"


def serialize(graph: ObjectGraph, *, root: int) -> bytes:
    """Write header, objects, xref table and trailer.

    The output is assembled only after every object has been built, so a
    failure leaves nothing behind.
    """
    definitions = graph.definitions()
    if not 1 <= root <= graph.highest:
        raise SerializationInvariantViolation(f"root object {root} does not exist")

    chunks: list[bytes] = [HEADER]
    offset = len(HEADER)
    offsets: list[int] = []

    for definition in definitions:
        body = definition.build()
        framed = b"%d 0 obj\n" % definition.number + body + b"\nendobj\n"
        offsets.append(offset)
        chunks.append(framed)
        offset += len(framed)

    size = graph.highest + 1
    xref = [b"xref\n", b"0 %d\n" % size, b"0000000000 65535 f \n"]
    xref.extend(b"%010d 00000 n \n" % off for off in offsets)
    trailer = (
        b"trailer\n"
        + b"<< /Size %d /Root %d 0 R >>\n" % (size, root)
        + b"startxref\n"
        + b"%d\n" % offset
        + b"%%EOF\n"
    )
    chunks.extend(xref)
    chunks.append(trailer)
    return b"".join(chunks)


def _font_body(face: FontFace) -> Callable[[], bytes]:
    def build() -> bytes:
        return (
            f"<< /Type /Font /Subtype /Type1 /BaseFont /{BASE_FONTS[face]} "
            "/Encoding /WinAnsiEncoding >>"
        ).encode("ascii")

    return build


def _stream_body(data: bytes) -> Callable[[], bytes]:
    def build() -> bytes:
        return b"<< /Length %d >>\nstream\n" % len(data) + data + b"\nendstream"

    return build


def _image_body(asset: SignatureAsset) -> Callable[[], bytes]:
    def build() -> bytes:
        header = (
            f"<< /Type /XObject /Subtype /Image /Width {asset.pixel_width} "
            f"/Height {asset.pixel_height} /ColorSpace /DeviceRGB /BitsPerComponent 8 "
            f"/Filter /DCTDecode /Length {len(asset.data)} >>\nstream\n"
        ).encode("ascii")
        return header + asset.data + b"\nendstream"

    return build


def build_document(
    content: ContentStream,
    asset: SignatureAsset | None,
    layout: LayoutConfig,
) -> bytes:
    """Assemble the single-page object graph for ``content`` and serialize it."""
    graph = ObjectGraph()
    font_numbers = {face: graph.allocate() for face in (FontFace.regular, FontFace.bold)}
    image_number = graph.allocate() if content.uses_image else None
    contents_number = graph.allocate()
    page_number = graph.allocate()
    pages_number = graph.allocate()
    catalog_number = graph.allocate()

    for face, number in font_numbers.items():
        graph.define(number, _font_body(face))

    if image_number is not None:
        if asset is None:
            raise SerializationInvariantViolation("content stream paints an image but no asset was supplied")
        graph.define(image_number, _image_body(asset))

    graph.define(contents_number, _stream_body(content.data))

    unknown = sorted(str(face) for face in content.fonts if face not in font_numbers)
    if unknown:
        raise SerializationInvariantViolation(f"font resources with no object: {unknown}")
    used_fonts = {face: font_numbers[face] for face in sorted(content.fonts)}

    resources = []
    if used_fonts:
        entries = " ".join(f"/{face.value} {ref(num)}" for face, num in used_fonts.items())
        resources.append(f"/Font << {entries} >>")
    if image_number is not None:
        resources.append(f"/XObject << /{IMAGE_RESOURCE} {ref(image_number)} >>")
    media_box = f"[0 0 {fmt(layout.page_width)} {fmt(layout.page_height)}]"
    page_deps = (contents_number, *used_fonts.values(), *(() if image_number is None else (image_number,)))

    page_body = (
        f"<< /Type /Page /Parent {ref(pages_number)} /MediaBox {media_box} "
        f"/Resources << {' '.join(resources)} >> /Contents {ref(contents_number)} >>"
    ).encode("ascii")
    graph.define(
        page_number,
        lambda: page_body,
        references=(pages_number,),
        depends_on=page_deps,
    )

    pages_body = f"<< /Type /Pages /Kids [{ref(page_number)}] /Count 1 >>".encode("ascii")
    graph.define(pages_number, lambda: pages_body, depends_on=(page_number,))

    catalog_body = f"<< /Type /Catalog /Pages {ref(pages_number)} >>".encode("ascii")
    graph.define(catalog_number, lambda: catalog_body, depends_on=(pages_number,))

    return serialize(graph, root=catalog_number)
