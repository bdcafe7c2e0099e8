"""
Inverse-mapping resampler.

Every destination pixel centre is mapped back into the source image through
the destination -> source transform and a color is sampled there. Output rows
are split into bands that are computed in parallel; each band writes a
disjoint slice of the output array and the source array is only read.
"""

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np

from src.squaring.exceptions import CorrectionCancelled
from src.squaring.transform import Transform3x3

logger = logging.getLogger(__name__)

INTERPOLATIONS = ("bilinear", "nearest")


def map_to_source(
    inverse: Transform3x3,
    width: int,
    row_start: int,
    row_stop: int,
    source_width: int,
    source_height: int,
) -> tuple:
    """
    Source sampling coordinates for destination rows [row_start, row_stop).

    Destination pixel (u, v) is taken at its centre (u + 0.5, v + 0.5); the
    mapped point is shifted by half a pixel into pixel-centre coordinates and
    clamped to the valid sample range [0, W-1] x [0, H-1].

    Returns:
        Tuple (x, y) of float64 arrays with shape (row_stop - row_start, width).
    """
    u = np.arange(width, dtype=np.float64) + 0.5
    v = np.arange(row_start, row_stop, dtype=np.float64) + 0.5
    uu, vv = np.meshgrid(u, v)

    m = inverse.matrix
    xh = m[0, 0] * uu + m[0, 1] * vv + m[0, 2]
    yh = m[1, 0] * uu + m[1, 1] * vv + m[1, 2]
    wh = m[2, 0] * uu + m[2, 1] * vv + m[2, 2]

    with np.errstate(divide="ignore", invalid="ignore"):
        x = xh / wh - 0.5
        y = yh / wh - 0.5

    # Points at infinity land on an edge like any other out-of-bounds point
    x = np.nan_to_num(x, nan=0.0, posinf=source_width - 1, neginf=0.0)
    y = np.nan_to_num(y, nan=0.0, posinf=source_height - 1, neginf=0.0)

    return np.clip(x, 0.0, source_width - 1), np.clip(y, 0.0, source_height - 1)


def _sample_bilinear(source: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    h, w = source.shape[:2]

    x0 = np.minimum(np.floor(x), max(w - 2, 0)).astype(np.intp)
    y0 = np.minimum(np.floor(y), max(h - 2, 0)).astype(np.intp)
    x1 = np.minimum(x0 + 1, w - 1)
    y1 = np.minimum(y0 + 1, h - 1)

    fx = x - x0
    fy = y - y0
    if source.ndim == 3:
        fx = fx[..., None]
        fy = fy[..., None]

    p00 = source[y0, x0].astype(np.float64)
    p01 = source[y0, x1].astype(np.float64)
    p10 = source[y1, x0].astype(np.float64)
    p11 = source[y1, x1].astype(np.float64)

    top = p00 * (1.0 - fx) + p01 * fx
    bottom = p10 * (1.0 - fx) + p11 * fx
    value = top * (1.0 - fy) + bottom * fy

    return np.clip(np.rint(value), 0, 255).astype(np.uint8)


def _sample_nearest(source: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    xi = np.rint(x).astype(np.intp)
    yi = np.rint(y).astype(np.intp)
    return source[yi, xi]


def resample(
    source: np.ndarray,
    inverse: Transform3x3,
    width: int,
    height: int,
    interpolation: str = "bilinear",
    max_workers: Optional[int] = None,
    tile_rows: int = 64,
    cancel_event: Optional[threading.Event] = None,
) -> np.ndarray:
    """
    Produce a width x height image by inverse-mapping into `source`.

    Args:
        source: Source image, uint8 array (H, W) or (H, W, C). Read only.
        inverse: Destination -> source transform.
        width: Output width in pixels (>= 1).
        height: Output height in pixels (>= 1).
        interpolation: "bilinear" (default) or "nearest".
        max_workers: Worker threads; None or 0 means one per CPU core.
        tile_rows: Number of output rows per band.
        cancel_event: Optional event; once set, no further bands start and
            CorrectionCancelled is raised.

    Returns:
        New uint8 array of shape (height, width) or (height, width, C),
        matching the source layout.

    Raises:
        ValueError: On an unknown interpolation or non-positive size.
        CorrectionCancelled: If cancel_event was set before all bands ran.
    """
    if interpolation not in INTERPOLATIONS:
        raise ValueError(
            f"Invalid interpolation: {interpolation}. Must be one of {list(INTERPOLATIONS)}"
        )
    if width < 1 or height < 1:
        raise ValueError(f"Output size must be at least 1x1, got {width}x{height}")
    if tile_rows < 1:
        raise ValueError("tile_rows must be at least 1")

    sampler = _sample_bilinear if interpolation == "bilinear" else _sample_nearest
    src_h, src_w = source.shape[:2]
    output = np.empty((height, width) + source.shape[2:], dtype=np.uint8)

    bands = [
        (start, min(start + tile_rows, height)) for start in range(0, height, tile_rows)
    ]

    def run_band(row_start: int, row_stop: int) -> bool:
        if cancel_event is not None and cancel_event.is_set():
            return False
        x, y = map_to_source(inverse, width, row_start, row_stop, src_w, src_h)
        output[row_start:row_stop] = sampler(source, x, y)
        return True

    workers = max_workers or os.cpu_count() or 1
    workers = min(workers, len(bands))

    logger.debug(
        f"Resampling {src_w}x{src_h} -> {width}x{height} ({interpolation}, "
        f"{len(bands)} bands, {workers} workers)"
    )

    if workers == 1:
        completed = [run_band(start, stop) for start, stop in bands]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(run_band, start, stop) for start, stop in bands]
            completed = [future.result() for future in futures]

    if not all(completed):
        logger.info(f"Resampling cancelled after {sum(completed)}/{len(bands)} bands")
        raise CorrectionCancelled("Perspective correction was cancelled")

    return output
