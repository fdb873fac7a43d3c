import base64
from io import BytesIO

import qrcode


def render_data_url(credential: str) -> str:
    """Render an encoded credential as a PNG QR code data URL for the confirmation page."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
    )
    qr.add_data(credential)
    qr.make(fit=True)
    img = qr.make_image(fill_color="#1E40AF", back_color="#FFFFFF")

    buffered = BytesIO()
    img.save(buffered, "PNG")
    return "data:image/png;base64," + base64.b64encode(buffered.getvalue()).decode("utf-8")
