"""
Script to generate sample verification photos with EXIF capture dates.
Creates placeholder JPEGs whose DateTime/DateTimeOriginal tags exercise
the one-month recency check against the sample claim dates.
"""

from PIL import Image, ImageDraw, ImageFont
import os

EXIF_IFD = 0x8769
TAG_DATETIME = 0x0132
TAG_DATETIME_ORIGINAL = 0x9003
TAG_MAKE = 0x010F
TAG_MODEL = 0x0110


def create_placeholder_image(filename, text, captured_at, size=(800, 600), bg_color=(200, 200, 200)):
    """Create a placeholder image with text and an EXIF capture time"""
    img = Image.new('RGB', size, color=bg_color)
    draw = ImageDraw.Draw(img)

    # Try to use a larger font, fall back to default if not available
    try:
        font = ImageFont.truetype("arial.ttf", 40)
        small_font = ImageFont.truetype("arial.ttf", 20)
    except OSError:
        font = ImageFont.load_default()
        small_font = ImageFont.load_default()

    # Draw text in center
    bbox = draw.textbbox((0, 0), text, font=font)
    text_width = bbox[2] - bbox[0]
    text_height = bbox[3] - bbox[1]
    position = ((size[0] - text_width) / 2, (size[1] - text_height) / 2)
    draw.text(position, text, fill=(50, 50, 50), font=font)

    # Add watermark with the capture date
    watermark = f"Sample photo captured {captured_at}"
    wm_bbox = draw.textbbox((0, 0), watermark, font=small_font)
    wm_width = wm_bbox[2] - wm_bbox[0]
    wm_position = ((size[0] - wm_width) / 2, size[1] - 40)
    draw.text(wm_position, watermark, fill=(100, 100, 100), font=small_font)

    exif = img.getexif()
    exif[TAG_MAKE] = "Sample"
    exif[TAG_MODEL] = "Placeholder Camera"
    exif[TAG_DATETIME] = captured_at
    exif[EXIF_IFD] = {TAG_DATETIME_ORIGINAL: captured_at}

    img.save(filename, 'JPEG', quality=85, exif=exif)
    print(f"Created {filename} ({captured_at})")


def create_claimant_photos():
    """Photos for the claimant claim dated 2024:05:10"""
    os.makedirs("claimant", exist_ok=True)

    create_placeholder_image(
        "claimant/photo_recent_alternator.jpg",
        "Failed Alternator",
        "2024:04:20 10:15:00",
        bg_color=(180, 200, 220)
    )

    create_placeholder_image(
        "claimant/photo_stale_alternator.jpg",
        "Alternator (old photo)",
        "2024:03:01 09:00:00",
        bg_color=(160, 180, 200)
    )


def create_service_center_photos():
    """Photos for the service center claim dated 2024-03-31"""
    os.makedirs("service_center", exist_ok=True)

    create_placeholder_image(
        "service_center/photo_window_start.jpg",
        "Water Pump Seal",
        "2024:02:29 16:45:00",
        bg_color=(190, 190, 170)
    )


if __name__ == "__main__":
    print("Generating sample verification photos...")
    print("\nClaimant photos:")
    create_claimant_photos()

    print("\nService center photos:")
    create_service_center_photos()

    print("\n✓ All sample photos created successfully!")
