"""QR code rendering for event upload links."""

import base64
import io
import logging
from typing import Literal

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.image.svg import SvgPathImage

from eventsnap.errors import QRRenderFailed

logger = logging.getLogger(__name__)

ERROR_CORRECTION_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}

QRFormat = Literal["base64", "svg"]


class QRRenderer:
    def __init__(self, width: int = 300, error_correction: str = "M", border: int = 4):
        if error_correction not in ERROR_CORRECTION_LEVELS:
            raise ValueError(f"Unknown error correction level: {error_correction}")
        self.width = width
        self.error_correction = error_correction
        self.border = border

    def _build(self, url: str, width: int, error_correction: str) -> qrcode.QRCode:
        qr = qrcode.QRCode(version=None, error_correction=ERROR_CORRECTION_LEVELS[error_correction], border=self.border)
        qr.add_data(url)
        qr.make(fit=True)
        # Pick the box size that gets closest to the requested pixel width
        modules = qr.modules_count + 2 * self.border
        qr.box_size = max(1, width // modules)
        return qr

    def render(self, url: str, *, width: int | None = None, error_correction: str | None = None, fmt: QRFormat = "base64") -> str:
        """Render ``url`` as a PNG data URL (``base64``) or SVG markup (``svg``).

        Raises:
            QRRenderFailed: the image could not be produced.
        """
        width = width or self.width
        level = error_correction or self.error_correction
        if level not in ERROR_CORRECTION_LEVELS:
            raise QRRenderFailed(f"Unknown error correction level: {level}")
        try:
            qr = self._build(url, width, level)
            buffer = io.BytesIO()
            if fmt == "svg":
                qr.make_image(image_factory=SvgPathImage).save(buffer)
                return buffer.getvalue().decode("utf-8")
            qr.make_image(fill_color="black", back_color="white").save(buffer)
            encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
            return f"data:image/png;base64,{encoded}"
        except Exception as e:
            logger.error("QR code generation failed for %s: %s", url, e)
            raise QRRenderFailed("QR code generation failed") from e
