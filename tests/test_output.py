"""Tests for PPM and PNG image output.

Tests cover:
- P3 header layout and one triplet per pixel
- Reading PPM files back
- Gamma correction on export
- PNG export through Pillow
- Writing a rendered camera buffer
"""

import numpy as np
import pytest


class TestPPM:
    """Tests for the plain-text PPM writer and reader."""

    def test_header_and_triplets(self, tmp_path):
        from src.rt.output.ppm import write_ppm

        pixels = np.arange(3 * 2 * 3, dtype=np.uint8).reshape(6, 3)
        path = tmp_path / "tiny.ppm"
        write_ppm(path, pixels, 3, 2)

        lines = path.read_text().splitlines()
        assert lines[0] == "P3"
        assert lines[1] == "3 2"
        assert lines[2] == "255"
        assert len(lines) - 3 == 6
        assert lines[3] == "0 1 2"
        assert lines[-1] == "15 16 17"

    def test_pixel_count_mismatch(self, tmp_path):
        from src.rt.output.ppm import write_ppm

        with pytest.raises(ValueError, match="does not match"):
            write_ppm(tmp_path / "bad.ppm", np.zeros((5, 3), dtype=np.uint8), 3, 2)

    def test_read_back(self, tmp_path):
        from src.rt.output.ppm import read_ppm, read_ppm_header, write_ppm

        image = np.random.default_rng(1).integers(0, 256, size=(2, 3, 3), dtype=np.uint8)
        path = tmp_path / "image.ppm"
        write_ppm(path, image, 3, 2)

        assert read_ppm_header(path) == (3, 2, 255)
        np.testing.assert_array_equal(read_ppm(path), image)

    def test_read_rejects_other_formats(self, tmp_path):
        from src.rt.output.ppm import read_ppm

        path = tmp_path / "binary.ppm"
        path.write_text("P6\n1 1\n255\n0 0 0\n")
        with pytest.raises(ValueError, match="Not a P3"):
            read_ppm(path)

    def test_read_rejects_truncated_file(self, tmp_path):
        from src.rt.output.ppm import read_ppm

        path = tmp_path / "short.ppm"
        path.write_text("P3\n2 1\n255\n0 0 0\n")
        with pytest.raises(ValueError, match="Expected 2 triplets"):
            read_ppm(path)


class TestExport:
    """Tests for gamma corrected export of linear pixels."""

    def test_image_to_uint8_applies_gamma(self):
        from src.rt.output.export import image_to_uint8

        pixels = np.full((2 * 2, 3), 127.5)
        image = image_to_uint8(pixels, 2, 2, gamma=2.2)

        assert image.shape == (2, 2, 3)
        assert image.dtype == np.uint8
        assert (image == 186).all()

    def test_gamma_one_is_linear(self):
        from src.rt.output.export import image_to_uint8

        image = image_to_uint8(np.array([[0.0, 255.0, 300.0]]), 1, 1, gamma=1.0)
        assert image.tolist() == [[[0, 255, 255]]]

    def test_ppm_and_png_agree(self, tmp_path):
        from PIL import Image

        from src.rt.output.export import save_png_from_array, save_ppm_from_array
        from src.rt.output.ppm import read_ppm

        pixels = np.random.default_rng(3).uniform(0.0, 255.0, size=(4 * 3, 3))
        save_ppm_from_array(pixels, 4, 3, tmp_path / "a.ppm")
        save_png_from_array(pixels, 4, 3, tmp_path / "a.png")

        from_ppm = read_ppm(tmp_path / "a.ppm")
        from_png = np.asarray(Image.open(tmp_path / "a.png").convert("RGB"))

        assert from_png.shape == (3, 4, 3)
        np.testing.assert_array_equal(from_ppm, from_png)


class TestCameraOutput:
    """Tests for writing a camera's pixel buffer."""

    def test_write_to_ppm(self, tmp_path):
        from src.rt.camera.camera import CameraBuilder

        camera = CameraBuilder().resolution(5, 3).sample_size(1).build()
        camera.pixels[:] = 127.5
        path = tmp_path / "camera.ppm"
        camera.write_to_ppm(path)

        lines = path.read_text().splitlines()
        assert lines[:3] == ["P3", "5 3", "255"]
        assert len(lines) == 3 + 15
        assert all(line == "186 186 186" for line in lines[3:])

    def test_save_png(self, tmp_path):
        from PIL import Image

        from src.rt.camera.camera import CameraBuilder

        camera = CameraBuilder().resolution(5, 3).sample_size(1).build()
        path = tmp_path / "camera.png"
        camera.save_png(path)

        with Image.open(path) as image:
            assert image.size == (5, 3)
