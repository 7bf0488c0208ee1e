import cv2
import numpy as np
from dataclasses import dataclass

from charsets import ASCII_RAMP, RAMP_LAST_INDEX

RED_WEIGHT = 0.2126
GREEN_WEIGHT = 0.7152
BLUE_WEIGHT = 0.0722

_RAMP_ARRAY = np.array(list(ASCII_RAMP))


class ImageDecodeError(Exception):
    """The file could not be opened or decoded into a supported image."""


LoadError = ImageDecodeError


@dataclass(frozen=True, eq=False)
class DecodedImage:
    """Read-only RGBA bitmap, 8 bits per channel, shape (height, width, 4)."""
    pixels: np.ndarray
    source: str = ""

    @property
    def width(self):
        return self.pixels.shape[1]

    @property
    def height(self):
        return self.pixels.shape[0]

    def at(self, x, y):
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")
        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)


def to_rgba8(pixels):
    if pixels.dtype == np.uint16:
        pixels = (pixels >> 8).astype(np.uint8)
    elif pixels.dtype != np.uint8:
        raise ImageDecodeError(f"Unsupported sample type: {pixels.dtype}")
    if pixels.ndim == 3 and pixels.shape[2] == 1:
        pixels = pixels[:, :, 0]
    if pixels.ndim == 2:
        return cv2.cvtColor(pixels, cv2.COLOR_GRAY2RGBA)
    if pixels.ndim == 3 and pixels.shape[2] == 3:
        return cv2.cvtColor(pixels, cv2.COLOR_BGR2RGBA)
    if pixels.ndim == 3 and pixels.shape[2] == 4:
        return cv2.cvtColor(pixels, cv2.COLOR_BGRA2RGBA)
    raise ImageDecodeError(f"Unsupported pixel layout: {pixels.shape}")


def load_image(path):
    path = str(path)
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ImageDecodeError(f"Cannot open image file {path}: {e}") from e
    if not data:
        raise ImageDecodeError(f"Empty image file: {path}")
    try:
        decoded = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        raise ImageDecodeError(f"Cannot decode image file {path}: {e}") from e
    if decoded is None:
        raise ImageDecodeError(f"Unsupported image format: {path}")
    pixels = np.ascontiguousarray(to_rgba8(decoded))
    pixels.setflags(write=False)
    return DecodedImage(pixels=pixels, source=path)


def grayscale(pixel):
    r, g, b = pixel[0], pixel[1], pixel[2]
    return int(RED_WEIGHT * float(r) + GREEN_WEIGHT * float(g) + BLUE_WEIGHT * float(b))


def grayscale_array(pixels):
    """Per-pixel grayscale of an (..., 4) RGBA array, same arithmetic as grayscale()."""
    rgb = pixels[..., :3].astype(np.float64)
    gray = RED_WEIGHT * rgb[..., 0] + GREEN_WEIGHT * rgb[..., 1] + BLUE_WEIGHT * rgb[..., 2]
    return gray.astype(np.int64)


def avg_pixel(image, x, y, w, h):
    x0 = min(max(x, 0), image.width)
    y0 = min(max(y, 0), image.height)
    x1 = min(max(x + w, 0), image.width)
    y1 = min(max(y + h, 0), image.height)
    if x1 <= x0 or y1 <= y0:
        return 0
    gray = grayscale_array(image.pixels[y0:y1, x0:x1])
    return int(gray.sum()) // gray.size


def ramp_indices(brightness):
    """Ramp index for each brightness value, clamped on both sides."""
    brightness = np.clip(brightness, 0, 255)
    return np.clip(brightness * RAMP_LAST_INDEX // 255, 0, RAMP_LAST_INDEX)


def brightness_to_ascii(brightness):
    return ASCII_RAMP[int(ramp_indices(np.int64(brightness)))]


def cell_brightness(image, scale_x, scale_y):
    """Average brightness of every cell, as a (rows, columns) int array."""
    if image.width == 0 or image.height == 0:
        return np.zeros((0, 0), dtype=np.int64)
    gray = grayscale_array(image.pixels)
    row_starts = np.arange(0, image.height, scale_y)
    col_starts = np.arange(0, image.width, scale_x)
    sums = np.add.reduceat(gray, row_starts, axis=0)
    sums = np.add.reduceat(sums, col_starts, axis=1)
    # Edge cells are clipped, so they hold fewer pixels.
    heights = np.minimum(scale_y, image.height - row_starts)
    widths = np.minimum(scale_x, image.width - col_starts)
    counts = np.outer(heights, widths)
    return sums // counts


def frame_dimensions(image, config):
    columns = -(-image.width // config.scale_x)
    rows = -(-image.height // config.scale_y)
    return columns, rows


def process_frame(image, config):
    _, rows = frame_dimensions(image, config)
    ascii_frame = _RAMP_ARRAY[ramp_indices(cell_brightness(image, config.scale_x, config.scale_y))]
    lines = [''] * (rows * 2)
    lines[1::2] = ['\n'] * rows
    for y, row in enumerate(ascii_frame):
        lines[2 * y] = ''.join(row)
    return ''.join(lines)
