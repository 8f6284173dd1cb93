"""Tests for QR rendering."""
import base64

from attendease.services.qr_service import QRService

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


def test_render_png(app):
    assert QRService.render_png('AB12CD').startswith(PNG_SIGNATURE)


def test_session_qr_data_uri(app):
    uri = QRService.session_qr_data_uri('AB12CD')

    assert uri.startswith('data:image/png;base64,')
    assert base64.b64decode(uri.split(',', 1)[1]).startswith(PNG_SIGNATURE)
