"""Raw volume endpoints.

Endpoints:
  GET    /metadata?type=volumes|types
  GET    /types/{data_type}
  GET    /volumes/{name}
  GET    /volumes/{name}/slice-count
  GET    /volumes/{name}/slice
  GET    /volumes/{name}/window
  GET    /volumes/{name}/histogram
  DELETE /volumes/{name}/cache
  DELETE /cache

Geometry (width, height, data_type, little_endian, plane) travels with every
request; the server never remembers how a file was interpreted.

Window bounds that are NaN or infinite are sent as null in JSON bodies and as
Python float text ('nan', 'inf', '-inf') in the X-Window-* slice headers.
"""

from fastapi import APIRouter, Query, HTTPException
from fastapi.responses import JSONResponse, Response
import logging
from typing import Literal, Optional

from ..config import settings
from ..core.element_type import ElementType
from ..core.engine import get_bytes_per_pixel
from ..core.errors import SizeLimitExceededError, SliceOutOfRangeError, VolumeError
from ..models.volume import (
    HistogramInfo,
    SliceCount,
    SliceEncoding,
    TypeInfo,
    VolumeInfo,
    WindowInfo,
)
from ..services.volume_service import VolumeService, window_info

router = APIRouter()
logger = logging.getLogger(__name__)

volume_service = VolumeService()


def _http_error(e: Exception) -> HTTPException:
    """Map service exceptions to HTTP errors; unknown ones become 500."""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, FileNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, SizeLimitExceededError):
        return HTTPException(status_code=413, detail=str(e))
    if isinstance(e, SliceOutOfRangeError):
        return HTTPException(status_code=416, detail=str(e))
    if isinstance(e, (VolumeError, ValueError)):
        return HTTPException(status_code=400, detail=str(e))
    logger.exception("Failed to serve volume request")
    return HTTPException(status_code=500, detail="Internal error serving volume data")


@router.get('/metadata')
async def fetch_metadata(
        type: Literal["volumes", "types"] = Query(..., description="Metadata type: volumes | types")):
    try:
        if type == 'volumes':
            volumes = volume_service.list_volumes()
            return JSONResponse(content=[v.model_dump() for v in volumes])
        if type == 'types':
            catalog = [TypeInfo(data_type=t.value, bytes_per_pixel=t.bytes_per_pixel)
                       for t in ElementType]
            return JSONResponse(content=[t.model_dump() for t in catalog])
        raise HTTPException(status_code=400, detail="Unsupported metadata type")
    except Exception as e:
        raise _http_error(e)


@router.get('/types/{data_type}', response_model=TypeInfo)
async def fetch_type(data_type: str):
    try:
        return TypeInfo(data_type=data_type, bytes_per_pixel=get_bytes_per_pixel(data_type))
    except Exception as e:
        raise _http_error(e)


@router.get('/volumes/{name:path}/slice-count', response_model=SliceCount)
async def fetch_slice_count(
        name: str,
        width: int = Query(..., description="Image width in pixels"),
        height: int = Query(..., description="Image height in pixels"),
        data_type: str = Query(settings.default_data_type),
        plane: str = Query(settings.default_plane, description="axial | coronal")):
    try:
        return volume_service.slice_count(name, width, height, data_type, plane)
    except Exception as e:
        raise _http_error(e)


@router.get('/volumes/{name:path}/slice')
async def fetch_slice(
        name: str,
        width: int = Query(..., description="Image width in pixels"),
        height: int = Query(..., description="Image height in pixels"),
        slice: int = Query(0, description="Slice index along the plane"),
        data_type: str = Query(settings.default_data_type),
        little_endian: bool = Query(settings.default_little_endian),
        plane: str = Query(settings.default_plane, description="axial | coronal"),
        window_min: Optional[float] = Query(None),
        window_max: Optional[float] = Query(None),
        encoding: SliceEncoding = Query(SliceEncoding.GRAY, description="raw | gray | png")):
    try:
        result = volume_service.read_slice(
            name, width, height, slice, data_type, little_endian, plane,
            window_min, window_max, encoding)
    except Exception as e:
        raise _http_error(e)
    headers = {
        'X-Slice-Width':  str(result.width),
        'X-Slice-Height': str(result.height),
    }
    if result.window is not None:
        headers['X-Window-Min'] = repr(result.window.window_min)
        headers['X-Window-Max'] = repr(result.window.window_max)
    return Response(content=result.content, media_type=result.media_type, headers=headers)


@router.get('/volumes/{name:path}/window', response_model=WindowInfo)
async def fetch_global_window(
        name: str,
        data_type: str = Query(settings.default_data_type),
        little_endian: bool = Query(settings.default_little_endian)):
    try:
        return window_info(volume_service.global_window(name, data_type, little_endian))
    except Exception as e:
        raise _http_error(e)


@router.get('/volumes/{name:path}/histogram', response_model=HistogramInfo)
async def fetch_histogram(
        name: str,
        width: int = Query(...),
        height: int = Query(...),
        slice: int = Query(0),
        data_type: str = Query(settings.default_data_type),
        little_endian: bool = Query(settings.default_little_endian),
        plane: str = Query(settings.default_plane),
        bins: int = Query(settings.histogram_bins, gt=0, le=65536),
        lower: float = Query(0.0, ge=0.0, le=1.0),
        upper: float = Query(1.0, ge=0.0, le=1.0)):
    try:
        return volume_service.histogram(name, width, height, slice, data_type, little_endian,
                                        plane, bins, lower, upper)
    except Exception as e:
        raise _http_error(e)


@router.get('/volumes/{name:path}', response_model=VolumeInfo)
async def fetch_volume_info(name: str):
    try:
        return volume_service.get_file_info(name)
    except Exception as e:
        raise _http_error(e)


@router.delete('/volumes/{name:path}/cache')
async def evict_volume(name: str):
    try:
        return {"name": name, "evicted": volume_service.evict(name)}
    except Exception as e:
        raise _http_error(e)


@router.delete('/cache')
async def clear_cache():
    volume_service.clear_cache()
    return {"cleared": True}
