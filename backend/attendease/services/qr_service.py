"""QR code rendering for session codes."""
import base64
import io

import qrcode
from flask import current_app

class QRService:
    """Service for QR code operations.

    Only encoding lives here; scanning happens on the student's device and
    the server only ever receives the decoded text code.
    """

    @staticmethod
    def render_png(data: str, box_size: int = None, border: int = None) -> bytes:
        """Render ``data`` as a PNG image."""
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_H,  # High error correction
            box_size=box_size or current_app.config['QR_BOX_SIZE'],
            border=border if border is not None else current_app.config['QR_BORDER'],
        )
        qr.add_data(data)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        return buffered.getvalue()

    @staticmethod
    def session_qr_data_uri(code: str) -> str:
        """PNG data URI for a session check-in code."""
        img_str = base64.b64encode(QRService.render_png(code)).decode()
        return f"data:image/png;base64,{img_str}"
