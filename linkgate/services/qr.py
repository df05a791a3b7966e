import io

import qrcode


def make_qr_png(url: str, box_size: int = 8, border: int = 2) -> bytes:
    """Render `url` as a QR code and return the PNG bytes."""
    qr = qrcode.QRCode(box_size=box_size, border=border)
    qr.add_data(url)
    qr.make(fit=True)
    img = qr.make_image()
    buf = io.BytesIO()
    img.save(buf, format='PNG')
    return buf.getvalue()
