# localcooks/services/certificate_service.py
"""
Completion certificate PDF for the microlearning module.

The document is a single letter-size landscape page written as raw PDF
objects with the standard Type1 fonts, so no rendering library is needed.
"""

from datetime import datetime
import io
from typing import List, Sequence, Tuple

from ..core.constants import BRAND_NAME

PAGE_WIDTH = 792
PAGE_HEIGHT = 612

# (font resource, size, y, text); x is computed per line for centering
Line = Tuple[str, int, int, str]


def certificate_id_for(user_id: str, completed_at: datetime) -> str:
    return f"LC-{completed_at.strftime('%Y%m%d')}-{user_id[-8:].upper()}"


def _escape_pdf_text(value: str) -> str:
    sanitized = value.encode("ascii", "replace").decode("ascii")
    return (
        sanitized.replace("\\", "\\\\")
        .replace("(", "\\(")
        .replace(")", "\\)")
        .replace("\r", "")
        .replace("\n", " ")
    )


def _centered_x(text: str, size: int) -> int:
    # Helvetica averages roughly half an em per glyph
    approx_width = len(text) * size * 0.5
    return max(36, int((PAGE_WIDTH - approx_width) / 2))


def _module_columns(modules: Sequence[str], top: int) -> List[Tuple[int, int, str]]:
    half = (len(modules) + 1) // 2
    placed = []
    for index, module in enumerate(modules):
        column, row = divmod(index, half)
        x = 90 + column * 320
        y = top - row * 13
        placed.append((x, y, f"{index + 1:>2}. {module}"))
    return placed


def render_certificate_pdf(
    recipient_name: str,
    completed_at: datetime,
    certificate_id: str,
    modules: Sequence[str],
) -> bytes:
    """Build the certificate PDF and return its bytes."""
    lines: List[Line] = [
        ("F2", 28, 530, "Certificate of Completion"),
        ("F1", 14, 500, f"{BRAND_NAME} Food Safety Training"),
        ("F1", 12, 462, "This certifies that"),
        ("F2", 22, 432, recipient_name),
        ("F1", 12, 404, "has completed all required food safety microlearning modules"),
        ("F1", 11, 384, f"Completed on {completed_at.strftime('%B %d, %Y')}"),
    ]

    content: List[str] = [
        "0.2 0.2 0.2 RG",
        "2 w",
        f"24 24 {PAGE_WIDTH - 48} {PAGE_HEIGHT - 48} re S",
    ]
    for font, size, y, text in lines:
        content += [
            "BT",
            f"/{font} {size} Tf",
            f"1 0 0 1 {_centered_x(text, size)} {y} Tm",
            f"({_escape_pdf_text(text)}) Tj",
            "ET",
        ]

    content += ["BT", "/F2 10 Tf", "1 0 0 1 90 356 Tm", "(Modules completed) Tj", "ET"]
    for x, y, text in _module_columns(modules, 340):
        content += ["BT", "/F1 9 Tf", f"1 0 0 1 {x} {y} Tm", f"({_escape_pdf_text(text)}) Tj", "ET"]

    footer = f"Certificate ID: {certificate_id}"
    content += [
        "BT",
        "/F1 9 Tf",
        f"1 0 0 1 {_centered_x(footer, 9)} 48 Tm",
        f"({_escape_pdf_text(footer)}) Tj",
        "ET",
    ]
    stream = "\n".join(content).encode("ascii")

    objects: List[bytes] = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        (
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {PAGE_WIDTH} {PAGE_HEIGHT}] "
            f"/Resources << /Font << /F1 4 0 R /F2 5 0 R >> >> /Contents 6 0 R >>"
        ).encode("ascii"),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica-Bold >>",
        f"<< /Length {len(stream)} >>\nstream\n".encode("ascii") + stream + b"\nendstream",
    ]

    buffer = io.BytesIO()
    buffer.write(b"%PDF-1.4\n")
    offsets = []
    for index, obj in enumerate(objects, start=1):
        offsets.append(buffer.tell())
        buffer.write(f"{index} 0 obj\n".encode("ascii"))
        buffer.write(obj)
        buffer.write(b"\nendobj\n")

    xref_offset = buffer.tell()
    buffer.write(f"xref\n0 {len(objects) + 1}\n".encode("ascii"))
    buffer.write(b"0000000000 65535 f \n")
    for offset in offsets:
        buffer.write(f"{offset:010d} 00000 n \n".encode("ascii"))
    buffer.write(b"trailer\n")
    buffer.write(f"<< /Size {len(objects) + 1} /Root 1 0 R >>\n".encode("ascii"))
    buffer.write(b"startxref\n")
    buffer.write(f"{xref_offset}\n".encode("ascii"))
    buffer.write(b"%%EOF")
    return buffer.getvalue()
