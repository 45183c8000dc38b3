from fractalmarch.core.vec import Vec2, Vec3, Vec4, Rotation2D
from fractalmarch.core.field import sample_field
from fractalmarch.core.march import DEFAULT_ITERATIONS, MarchState, iter_march, march_pixel, frame_time, wrap_time
from fractalmarch.core.tone import tone_map, tone_map_array
from fractalmarch.core.pixel import Pixel32, to_byte, pack_pixel, encode_array


def shade_pixel(x: int, y: int, width: int, height: int, t: float, iterations: int = DEFAULT_ITERATIONS) -> Pixel32:
    """Full per-pixel chain: march, tone map, encode."""
    return pack_pixel(tone_map(march_pixel(x, y, width, height, t, iterations)))
