import os
import time
import argparse
import logging
from pathlib import Path

import requests
import numpy as np

import sys
backend_dir = Path(__file__).resolve().parents[1]  # .../backend
sys.path.insert(0, str(backend_dir))
from rawview.core.extrema import compute_extrema
from rawview.core.slice_reader import extract_slice

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)
logger.propagate = False
if not logger.handlers:
    ch = logging.StreamHandler()
    ch.setLevel(logging.INFO)
    ch.setFormatter(logging.Formatter("%(asctime)s %(levelname)s: %(message)s"))
    logger.addHandler(ch)

def make_volume(path, shape, dtype):
    """Write a random volume of ``shape`` (z, y, x) unless it already exists."""
    if path.exists():
        return path
    rng = np.random.default_rng(0)
    if np.dtype(dtype).kind == 'f':
        vol = rng.standard_normal(shape).astype(dtype)
    else:
        info = np.iinfo(dtype)
        vol = rng.integers(info.min, info.max, size=shape, dtype=dtype, endpoint=True)
    vol.tofile(path)
    logger.info(f"Wrote synthetic volume {path} ({os.path.getsize(path) / (1024*1024):.1f} MiB)")
    return path

def extrema_throughput_benchmark(path, dtype, n_req):
    buffer = Path(path).read_bytes()
    t0 = time.time()
    for i in range(n_req):
        ext = compute_extrema(buffer, dtype)
    t1 = time.time()
    dt = t1 - t0
    print(f"Extrema scan: {len(buffer) * n_req / (1024 * 1024) / dt:.3f} MiB/s "
          f"({n_req / dt:.2f} scans/s), min={ext.min_value}, max={ext.max_value}")

def slice_throughput_benchmark(path, shape, dtype, plane, n_req):
    buffer = Path(path).read_bytes()
    n_slices = shape[0] if plane == 'axial' else shape[1]
    data_size = 0
    t0 = time.time()
    for i in range(n_req):
        sl = extract_slice(buffer, shape[2], shape[1], i % n_slices, dtype, plane)
        data_size += len(sl.data) / (1024 * 1024)  # in MB
    t1 = time.time()
    dt = t1 - t0
    print(f"{plane} slices: {data_size / dt:.3f} MiB/s, {n_req / dt:.2f} slices/s")

def net_throughput_benchmark(url, params, n_req):
    print(f"Throughput benchmark: {n_req} requests to {url}")
    data_size = 0
    t0 = time.time()
    for i in range(n_req):
        r = requests.get(url, params=params)
        r.raise_for_status()
        data_size += len(r.content) / (1024 * 1024)  # in MB
        if (i + 1) % 10 == 0:
            print(f"   Completed {i + 1} requests...")
    t1 = time.time()
    dt = t1 - t0
    print(f"Speed: {data_size / dt:.3f} MiB/s, {n_req / dt:.2f} req/s")

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Benchmark slice extraction, min/max scan and network for rawview")
    parser.add_argument("--base-url", default=None,
                        help="Server base URL for network requests, e.g. http://localhost:8000 (skipped if omitted)")
    parser.add_argument("--data-root", default="./data",
                        help="Path to local data root (default: ./data)")
    parser.add_argument("--dtype", default="uint16", help="Element type of the synthetic volume")
    parser.add_argument("--shape", nargs=3, type=int, default=(256, 512, 512), metavar=("Z", "Y", "X"))
    parser.add_argument("--n-req", type=int, default=10,
                        help="Number of requests to perform for each benchmark (default: 10)")
    args = parser.parse_args()

    data_root = Path(args.data_root)
    data_root.mkdir(parents=True, exist_ok=True)
    shape = tuple(args.shape)
    name = f"bench_{args.dtype}_{shape[2]}x{shape[1]}x{shape[0]}.raw"
    path = make_volume(data_root / name, shape, args.dtype)

    extrema_throughput_benchmark(path, args.dtype, args.n_req)
    slice_throughput_benchmark(path, shape, args.dtype, 'axial', args.n_req * 10)
    slice_throughput_benchmark(path, shape, args.dtype, 'coronal', args.n_req * 10)

    if args.base_url:
        url = f"{args.base_url.rstrip('/')}/volumes/{name}/slice"
        params = {"width": shape[2], "height": shape[1], "slice": shape[0] // 2,
                  "data_type": args.dtype, "encoding": "gray"}
        net_throughput_benchmark(url, params, args.n_req)
