# inspect a headerless raw volume from the command line:
# slice count, global min/max, and optionally one slice written as PNG

import time
import logging
import argparse
from pathlib import Path

import numpy as np
import PIL.Image

from ..config import settings
from ..core.decoder import decode_all
from ..core.element_type import ElementType
from ..core.engine import compute_global_extrema, extract_slice, max_slice_count
from ..core.extrema import extrema_of
from ..core.slice_reader import ViewingPlane
from ..core.window import Window, map_values_to_grayscale
from ..services.file_cache import FileCache

logger = logging.getLogger(__name__)
logger.setLevel(logging.DEBUG)
logger.propagate = False
if not logger.handlers:
    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG)
    ch.setFormatter(logging.Formatter("%(asctime)s %(levelname)s: %(message)s"))
    logger.addHandler(ch)


def _open_cache() -> FileCache:
    return FileCache(max_file_size=settings.max_file_size, max_items=1)


def inspect_volume(path: Path, width: int, height: int, data_type: str,
                   little_endian: bool, plane: str, cache: FileCache = None) -> dict:
    cache = cache if cache is not None else _open_cache()
    t1 = time.time()
    buffer = cache.get(path)
    t2 = time.time()
    extrema = compute_global_extrema(buffer, data_type, little_endian,
                                     chunk_size=settings.extrema_chunk_elements)
    t3 = time.time()
    info = {
        "file": str(path),
        "file_size": len(buffer),
        "data_type": ElementType.parse(data_type).value,
        "little_endian": little_endian,
        "plane": ViewingPlane.parse(plane).value,
        "slices": max_slice_count(len(buffer), width, height, data_type, plane),
        "min": extrema.min_value,
        "max": extrema.max_value,
    }
    logger.info(f"read {len(buffer) / (1024*1024):.3f} MiB in {t2 - t1:.3f} s, "
                f"min/max scan in {t3 - t2:.3f} s")
    return info


def save_slice_png(path: Path, out_path: Path, width: int, height: int, slice_index: int,
                   data_type: str, little_endian: bool, plane: str,
                   window_min=None, window_max=None, cache: FileCache = None) -> Path:
    cache = cache if cache is not None else _open_cache()
    sl = extract_slice(cache.get(path), width, height, slice_index, data_type, plane)
    values = decode_all(sl.data, sl.data_type, little_endian)
    if window_min is None or window_max is None:
        ext = extrema_of(values)
        window_min = ext.min_value if window_min is None else window_min
        window_max = ext.max_value if window_max is None else window_max
    window = Window(window_min, window_max).normalized()
    window_min, window_max = window.window_min, window.window_max
    gray = map_values_to_grayscale(values, window_min, window_max)
    if gray.size == 0:
        raise ValueError("slice is empty, nothing to write")
    PIL.Image.fromarray(np.ascontiguousarray(gray.reshape(sl.height, sl.width))).save(out_path)
    logger.info(f"wrote {sl.width}x{sl.height} slice {slice_index} ({sl.plane.value}) "
                f"window [{window_min}, {window_max}] to {out_path}")
    return out_path


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Inspect a headerless raw volume file"
    )
    parser.add_argument("file", type=Path, help="Raw volume file (.raw / .bin)")
    parser.add_argument("--width", type=int, required=True, help="Image width in pixels")
    parser.add_argument("--height", type=int, required=True, help="Image height in pixels")
    parser.add_argument("--data-type", default=settings.default_data_type,
                        choices=[t.value for t in ElementType],
                        help=f"Element type (default: {settings.default_data_type})")
    parser.add_argument("--big-endian", action="store_true",
                        help="Interpret multi-byte samples as big-endian (default: little-endian)")
    parser.add_argument("--plane", default=settings.default_plane,
                        choices=[p.value for p in ViewingPlane],
                        help=f"Viewing plane (default: {settings.default_plane})")
    parser.add_argument("--slice", type=int, default=None,
                        help="Write this slice as PNG (see --out)")
    parser.add_argument("--out", type=Path, default=None,
                        help="PNG output path (default: <file>_<plane>_<slice>.png)")
    parser.add_argument("--window", nargs=2, type=float, metavar=("MIN", "MAX"),
                        help="Display window; defaults to the slice's own min/max")
    return parser.parse_args(argv)


def main(argv=None):
    args = _parse_args(argv)
    little_endian = not args.big_endian

    # one read of the file serves both the summary and the slice
    cache = _open_cache()
    info = inspect_volume(args.file, args.width, args.height, args.data_type,
                          little_endian, args.plane, cache=cache)
    for key, value in info.items():
        print(f"  {key}: {value}")

    if args.slice is not None:
        out_path = args.out or args.file.with_name(f"{args.file.stem}_{args.plane}_{args.slice}.png")
        window_min, window_max = args.window if args.window else (None, None)
        save_slice_png(args.file, out_path, args.width, args.height, args.slice,
                       args.data_type, little_endian, args.plane, window_min, window_max,
                       cache=cache)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
