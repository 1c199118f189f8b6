import base64
import io
from unittest.mock import patch

import pytest
from PIL import Image

from eventsnap.errors import QRRenderFailed
from eventsnap.qr import QRRenderer

UPLOAD_URL = "https://snap.example.com/upload/evt_lx3k9q_a1b2c"


class TestQRRenderer:
    def test_base64_is_png_data_url(self):
        data_url = QRRenderer().render(UPLOAD_URL)
        assert data_url.startswith("data:image/png;base64,")

        png = base64.b64decode(data_url.split(",", 1)[1])
        image = Image.open(io.BytesIO(png))
        assert image.format == "PNG"
        assert image.size[0] == image.size[1]
        assert image.size[0] <= 300

    def test_width_override(self):
        renderer = QRRenderer(width=300)
        small = base64.b64decode(renderer.render(UPLOAD_URL, width=150).split(",", 1)[1])
        large = base64.b64decode(renderer.render(UPLOAD_URL, width=600).split(",", 1)[1])
        assert Image.open(io.BytesIO(small)).size[0] < Image.open(io.BytesIO(large)).size[0]

    def test_svg_markup(self):
        svg = QRRenderer().render(UPLOAD_URL, fmt="svg")
        assert "<svg" in svg

    def test_unknown_level_in_constructor(self):
        with pytest.raises(ValueError):
            QRRenderer(error_correction="X")

    def test_unknown_level_at_render(self):
        with pytest.raises(QRRenderFailed):
            QRRenderer().render(UPLOAD_URL, error_correction="X")

    def test_library_failure_is_wrapped(self):
        with patch("eventsnap.qr.qrcode.QRCode", side_effect=RuntimeError("boom")):
            with pytest.raises(QRRenderFailed) as exc_info:
                QRRenderer().render(UPLOAD_URL)
        assert exc_info.value.status_code == 502
