"""
Image processing for the image rename tool.

Content-aware cropping (removing white / transparent borders) and
re-encoding of processed images.
"""

import io
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, ImageChops

# A pixel is background if it is nearly transparent...
ALPHA_THRESHOLD = 10
# ...or nearly white. Generous to absorb JPEG artifacts and anti-aliasing.
WHITE_THRESHOLD = 240

DEFAULT_JPEG_QUALITY = 90

# EXIF ImageDescription
EXIF_IMAGE_DESCRIPTION = 0x010E

FORMAT_BY_EXTENSION = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".webp": "WEBP",
    ".gif": "GIF",
    ".bmp": "BMP",
    ".tif": "TIFF",
    ".tiff": "TIFF",
    ".png": "PNG",
}

# Formats we can attach EXIF to
EXIF_FORMATS = {"JPEG", "PNG", "WEBP"}


@dataclass
class ProcessingSettings:
    """Per-batch image processing settings."""
    crop_to_content: bool = False
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    description: str | None = None


@dataclass
class ProcessedImage:
    """Result of processing a single image."""
    data: bytes
    format: str
    original_width: int
    original_height: int
    output_width: int
    output_height: int
    was_cropped: bool
    estimated_size: int
    crop_bounds: tuple[int, int, int, int] | None = None


def is_background_pixel(pixel: tuple[int, int, int, int]) -> bool:
    """
    Check if an RGBA pixel is background (near-transparent or near-white).

    Reference predicate for `content_mask`, which applies the same test to
    whole bands at once.
    """
    r, g, b, a = pixel
    if a < ALPHA_THRESHOLD:
        return True
    return r >= WHITE_THRESHOLD and g >= WHITE_THRESHOLD and b >= WHITE_THRESHOLD


def content_mask(img: Image.Image) -> Image.Image:
    """
    Build an "L" mask that is 255 on content pixels and 0 on background.

    Uses the same thresholds as `is_background_pixel`, evaluated per band
    with lookup tables so the whole image is scanned in C.
    """
    rgba = img if img.mode == "RGBA" else img.convert("RGBA")
    r, g, b, a = rgba.split()

    opaque = a.point(lambda v: 255 if v >= ALPHA_THRESHOLD else 0)
    white = ImageChops.multiply(
        ImageChops.multiply(
            r.point(lambda v: 255 if v >= WHITE_THRESHOLD else 0),
            g.point(lambda v: 255 if v >= WHITE_THRESHOLD else 0),
        ),
        b.point(lambda v: 255 if v >= WHITE_THRESHOLD else 0),
    )
    # opaque AND NOT white (subtract clips at 0)
    return ImageChops.subtract(opaque, white)


def find_content_bounds(img: Image.Image) -> tuple[int, int, int, int] | None:
    """
    Find the bounding box of non-background pixels.

    Returns:
        Inclusive `(min_x, min_y, max_x, max_y)`, or None if every pixel is
        background (or the image is empty).
    """
    width, height = img.size
    if width == 0 or height == 0:
        return None

    bbox = content_mask(img).getbbox()
    if bbox is None:
        return None

    left, upper, right, lower = bbox
    return left, upper, right - 1, lower - 1


def crop_bounds(img: Image.Image) -> tuple[int, int, int, int] | None:
    """Return `(x, y, width, height)` of the content box, or None."""
    bounds = find_content_bounds(img)
    if bounds is None:
        return None
    min_x, min_y, max_x, max_y = bounds
    return min_x, min_y, max_x - min_x + 1, max_y - min_y + 1


def crop_with_bounds(img: Image.Image) -> tuple[Image.Image, tuple[int, int, int, int] | None]:
    """
    Crop an image to its content and report the crop box.

    Returns:
        `(image, (x, y, width, height))` when a crop happened, otherwise
        `(img, None)` with the original image.
    """
    bounds = find_content_bounds(img)
    if bounds is None:
        return img, None
    min_x, min_y, max_x, max_y = bounds
    width, height = max_x - min_x + 1, max_y - min_y + 1
    if (width, height) == img.size:
        return img, None
    return img.crop((min_x, min_y, max_x + 1, max_y + 1)), (min_x, min_y, width, height)


def crop_to_content(img: Image.Image) -> Image.Image:
    """
    Crop an image to its content, removing white / transparent padding.

    An image that is entirely background is returned unchanged rather than
    cropped to nothing.
    """
    return crop_with_bounds(img)[0]


def detect_format_from_path(path: Path) -> str:
    """Detect the output format from a file extension (PNG if unknown)."""
    return FORMAT_BY_EXTENSION.get(Path(path).suffix.lower(), "PNG")


def encode_image(
    img: Image.Image,
    fmt: str,
    jpeg_quality: int = DEFAULT_JPEG_QUALITY,
    exif: bytes | None = None,
) -> bytes:
    """
    Encode an image to bytes.

    JPEG is written as RGB at the given quality; WebP is written lossless;
    other formats use Pillow's defaults for that format.

    Raises:
        OSError / ValueError: If Pillow cannot encode the image.
    """
    params = {}
    if fmt == "JPEG":
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        params["quality"] = jpeg_quality if jpeg_quality > 0 else DEFAULT_JPEG_QUALITY
    elif fmt == "WEBP":
        params["lossless"] = True
    elif fmt == "BMP" and img.mode not in ("1", "L", "P", "RGB", "RGBA"):
        img = img.convert("RGBA")

    if exif and fmt in EXIF_FORMATS:
        params["exif"] = exif

    buffer = io.BytesIO()
    img.save(buffer, format=fmt, **params)
    return buffer.getvalue()


def build_exif(source: Image.Image, description: str) -> bytes:
    """Merge an ImageDescription tag into the source image's EXIF."""
    exif = source.getexif()
    exif[EXIF_IMAGE_DESCRIPTION] = description
    return exif.tobytes()


def process_image(
    path: Path,
    settings: ProcessingSettings,
    output_name: str | None = None,
) -> ProcessedImage:
    """
    Load and process an image according to settings.

    Args:
        path: Source image.
        settings: Crop/encode settings.
        output_name: Destination name; its extension picks the output format
            (defaults to the source name).

    Returns:
        The encoded result.

    Raises:
        OSError: If the image cannot be read, decoded or encoded.
    """
    output_format = detect_format_from_path(Path(output_name or Path(path).name))

    with Image.open(path) as img:
        img.load()
        original_width, original_height = img.size

        processed = img
        bounds = None
        if settings.crop_to_content:
            processed, bounds = crop_with_bounds(img)

        exif = None
        if settings.description:
            exif = build_exif(img, settings.description)

        data = encode_image(processed, output_format, settings.jpeg_quality, exif)

    output_width, output_height = processed.size
    was_cropped = (output_width, output_height) != (original_width, original_height)

    return ProcessedImage(
        data=data,
        format=output_format,
        original_width=original_width,
        original_height=original_height,
        output_width=output_width,
        output_height=output_height,
        was_cropped=was_cropped,
        estimated_size=len(data),
        crop_bounds=bounds,
    )
