"""
Stock label generator for motorcycles.
Renders a printable PNG label (Code128 of the chassis number) with Pillow
and python-barcode, returned as a base64 data URL.
"""
import io
import base64
from PIL import Image, ImageDraw, ImageFont
from typing import Optional
import barcode
from barcode.writer import ImageWriter


def _load_fonts():
    try:
        return (
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf', 18),
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf', 14),
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf', 12),
        )
    except (OSError, IOError):
        default = ImageFont.load_default()
        return default, default, default


def _centered(draw, text, y, font, width):
    bbox = draw.textbbox((0, 0), text, font=font)
    draw.text(((width - (bbox[2] - bbox[0])) // 2, y), text, fill='black', font=font)


def render_barcode(value: str) -> Image.Image:
    """Code128 barcode image for a value, without the human-readable text"""
    code128 = barcode.get_barcode_class('code128')
    return code128(value, writer=ImageWriter()).render({
        'write_text': False,
        'module_width': 0.3,
        'module_height': 20.0,
        'quiet_zone': 2.0,
        'font_size': 0,
        'text_distance': 0,
        'background': 'white',
        'foreground': 'black',
    })


def generate_motorcycle_label(
    title: str,
    chassis_number: str,
    engine_number: Optional[str] = None,
    color_name: Optional[str] = None,
    year: Optional[int] = None,
    branch_name: Optional[str] = None,
    width: int = 400,
    height: int = 220,
) -> str:
    """
    Build a stock label for a motorcycle.

    Layout: brand/model on top, branch and color/year below it, the chassis
    barcode in the middle and chassis/engine numbers at the bottom.

    Returns:
        Base64-encoded PNG image as data URL string
    """
    if len(title) > 32:
        title = title[:32] + '...'

    img = Image.new('RGB', (width, height), color='white')
    draw = ImageDraw.Draw(img)
    font_large, font_medium, font_small = _load_fonts()
    margin = 10

    _centered(draw, title, 6, font_large, width)

    details = ' · '.join(str(part) for part in (branch_name, color_name, year) if part)
    if details:
        _centered(draw, details, 30, font_small, width)

    barcode_y = 50
    bottom_y = height - 38
    available_height = bottom_y - barcode_y - 6

    barcode_img = render_barcode(chassis_number)
    bc_width, bc_height = barcode_img.size
    target_width = width - 2 * margin
    scale = target_width / bc_width
    target_height = int(bc_height * scale)
    if target_height > available_height:
        scale = available_height / bc_height
        target_height = available_height
        target_width = int(bc_width * scale)
    barcode_img = barcode_img.resize((target_width, target_height), Image.Resampling.BILINEAR)
    img.paste(barcode_img, ((width - target_width) // 2, barcode_y))

    _centered(draw, f"Chasis: {chassis_number}", bottom_y, font_medium, width)
    if engine_number:
        _centered(draw, f"Motor: {engine_number}", bottom_y + 18, font_small, width)

    buffer = io.BytesIO()
    img.save(buffer, format='PNG', optimize=True)
    encoded = base64.b64encode(buffer.getvalue()).decode('ascii')
    buffer.close()
    return f"data:image/png;base64,{encoded}"


def label_for_motorcycle(motorcycle) -> str:
    return generate_motorcycle_label(
        title=f"{motorcycle.brand.name} {motorcycle.model.name}",
        chassis_number=motorcycle.chassis_number,
        engine_number=motorcycle.engine_number,
        color_name=motorcycle.color.name if motorcycle.color_id else None,
        year=motorcycle.year,
        branch_name=motorcycle.branch.name if motorcycle.branch_id else None,
    )
