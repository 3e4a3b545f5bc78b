"""
Integration tests for the raw volume backend

Exercise the modules together: imports, the inspection CLI, and a viewer-like
sequence of calls through the public engine functions.
"""

import numpy as np
import pytest
from PIL import Image


class TestBackendIntegration:
    """Integration tests for backend components"""

    def test_imports(self):
        """Test that all backend modules can be imported"""
        from rawview.config import settings
        assert settings is not None
        assert hasattr(settings, 'app_name')
        assert hasattr(settings, 'data_root_path')
        assert settings.max_file_size == 1024 * 1024 * 1024

        from rawview.models.volume import SliceEncoding, VolumeInfo
        assert SliceEncoding.RAW.value == "raw"
        assert VolumeInfo is not None

        from rawview.services.volume_service import VolumeService
        from rawview.services.file_cache import FileCache
        assert VolumeService is not None and FileCache is not None

        from rawview.main import app
        assert app is not None

    def test_viewer_session(self):
        """File open, slice count, default window, windowed slices in both planes"""
        from rawview.core import engine

        vol = (np.arange(5 * 6 * 7, dtype='<f4').reshape(5, 6, 7) - 100.0) / 10.0
        buffer = vol.tobytes()

        assert engine.get_bytes_per_pixel("float32") == 4
        assert engine.max_slice_count(len(buffer), 7, 6, "float32", "axial") == 5
        assert engine.max_slice_count(len(buffer), 7, 6, "float32", "coronal") == 6

        ext = engine.compute_global_extrema(buffer, "float32", True)
        assert ext.min_value == pytest.approx(vol.min())
        assert ext.max_value == pytest.approx(vol.max())

        axial = engine.extract_slice(buffer, 7, 6, 4, "float32", "axial")
        gray = engine.map_samples_to_grayscale(axial.data, "float32", True,
                                               ext.min_value, ext.max_value)
        assert len(gray) == 7 * 6
        assert gray[-1] == 255

        coronal = engine.extract_slice(buffer, 7, 6, 0, "float32", "coronal")
        gray = engine.map_samples_to_grayscale(coronal.data, "float32", True,
                                               ext.min_value, ext.max_value)
        assert (coronal.width, coronal.height) == (7, 5)
        assert gray[0] == 0

    def test_inspect_cli(self, tmp_path, capsys):
        from rawview.util import raw_inspect

        path = tmp_path / "vol.raw"
        np.arange(2 * 3 * 4, dtype='>u2').tofile(path)
        out = tmp_path / "slice.png"
        rc = raw_inspect.main([str(path), "--width", "4", "--height", "3", "--data-type", "uint16",
                               "--big-endian", "--slice", "1", "--out", str(out)])
        assert rc == 0
        printed = capsys.readouterr().out
        assert "slices: 2" in printed
        assert "max: 23.0" in printed

        img = np.array(Image.open(out))
        assert img.shape == (3, 4)
        assert img.min() == 0 and img.max() == 255

    def test_inspect_cli_reads_file_once(self, tmp_path, monkeypatch):
        from pathlib import Path
        from rawview.util import raw_inspect

        path = tmp_path / "vol.raw"
        np.arange(2 * 3 * 4, dtype='<u2').tofile(path)
        reads = []
        read_bytes = Path.read_bytes

        def counting_read_bytes(self):
            reads.append(self)
            return read_bytes(self)

        monkeypatch.setattr(Path, "read_bytes", counting_read_bytes)
        rc = raw_inspect.main([str(path), "--width", "4", "--height", "3", "--data-type", "uint16",
                               "--slice", "0", "--out", str(tmp_path / "slice.png")])
        assert rc == 0
        assert len(reads) == 1

    def test_inspect_cli_inverted_window(self, tmp_path):
        from rawview.util import raw_inspect

        path = tmp_path / "vol.raw"
        np.arange(2 * 3 * 4, dtype='<u2').tofile(path)
        images = []
        for window in (["0", "23"], ["23", "0"]):
            out = tmp_path / f"slice_{window[0]}.png"
            raw_inspect.main([str(path), "--width", "4", "--height", "3", "--data-type", "uint16",
                              "--slice", "1", "--out", str(out), "--window", *window])
            images.append(np.array(Image.open(out)))
        assert np.array_equal(images[0], images[1])
        assert images[0][-1, -1] == 255

    def test_inspect_cli_rejects_unknown_type(self, tmp_path):
        from rawview.util import raw_inspect

        path = tmp_path / "vol.raw"
        path.write_bytes(b"\x00" * 8)
        with pytest.raises(SystemExit):
            raw_inspect.main([str(path), "--width", "2", "--height", "2", "--data-type", "uint64"])
