"""
Response models for the raw volume API
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

class SliceEncoding(str, Enum):
    """Payload formats for a slice request."""
    RAW = "raw"     # slice bytes as stored in the file
    GRAY = "gray"   # one windowed uint8 per sample
    PNG = "png"     # windowed grayscale PNG

class VolumeFile(BaseModel):
    """A raw volume file under the data root"""
    name: str
    file_size: int

class VolumeInfo(VolumeFile):
    """File info sent before any slice is requested"""
    cached: bool = False
    max_file_size: int

class TypeInfo(BaseModel):
    data_type: str
    bytes_per_pixel: int

class SliceCount(BaseModel):
    name: str
    plane: str
    count: int

class WindowInfo(BaseModel):
    """Display window; None stands for a non-finite bound (NaN or +-inf)"""
    window_min: Optional[float] = None
    window_max: Optional[float] = None

class HistogramInfo(BaseModel):
    slice: int
    plane: str
    bins: List[int] = Field(default_factory=list)
    range_min: float
    range_max: float
    percentile_window: WindowInfo

__all__ = ["SliceEncoding", "VolumeFile", "VolumeInfo", "TypeInfo", "SliceCount", "WindowInfo", "HistogramInfo"]
