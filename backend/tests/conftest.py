"""
Pytest configuration for the raw volume backend tests
"""
import sys
import os
import numpy as np
import pytest

# Add backend to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# 3 slices of 4x2 uint8; voxel value = 10*z + 4*y + x
SMALL_SHAPE = (3, 2, 4)


def small_volume() -> np.ndarray:
    z, y, x = np.indices(SMALL_SHAPE)
    return (10 * z + 4 * y + x).astype(np.uint8)


@pytest.fixture(scope="session")
def backend_path():
    """Get the backend directory path"""
    return os.path.join(os.path.dirname(__file__), '..')


@pytest.fixture
def small_buffer():
    """Raw bytes of the 3-slice 4x2 uint8 volume"""
    return small_volume().tobytes()


@pytest.fixture
def data_root(tmp_path):
    """Data root holding a few synthetic raw volumes"""
    root = tmp_path / "data"
    root.mkdir()
    small_volume().tofile(root / "small_u8.raw")
    # 2 slices of 3x2 big-endian int16 with negatives
    np.arange(-6, 6, dtype='>i2').tofile(root / "signed_be.bin")
    sub = root / "sub"
    sub.mkdir()
    np.linspace(0.0, 1.0, 4 * 4 * 2, dtype='<f4').tofile(sub / "ramp_f32.raw")
    (root / "notes.txt").write_text("not a volume")
    return root


@pytest.fixture
def volume_service(data_root):
    from rawview.services.file_cache import FileCache
    from rawview.services.volume_service import VolumeService
    return VolumeService(data_root=data_root, cache=FileCache(max_file_size=1024 * 1024, max_items=2))


@pytest.fixture
def client(volume_service, monkeypatch):
    """Test client whose API is bound to the synthetic data root"""
    from fastapi.testclient import TestClient
    from rawview.api import volumes
    from rawview.main import app
    monkeypatch.setattr(volumes, "volume_service", volume_service)
    return TestClient(app)
