import numpy as np

from mediastudio.domain.services.processing_service import ProcessingService as PS
from mediastudio.domain.services.prompt_builder import Adjustments


def test_brightness_clip():
    img = np.array([[0.0, 0.5], [0.9, 1.0]], dtype=np.float32)
    out = PS.adjust_brightness(img, 30)
    assert out.dtype == np.float32
    assert np.isclose(out[0, 0], 0.3)
    assert np.isclose(out[1, 1], 1.0)


def test_contrast_scales_around_mid_grey():
    img = np.array([[0.25, 0.5, 0.75]], dtype=np.float32)
    out = PS.adjust_contrast(img, 100)
    assert np.allclose(out, [[0.0, 0.5, 1.0]])
    flat = PS.adjust_contrast(img, -100)
    assert np.allclose(flat, 0.5)


def test_saturation_minus_100_is_grayscale():
    rgb = np.array([[[1.0, 0.0, 0.0], [0.2, 0.4, 0.6]]], dtype=np.float32)
    out = PS.adjust_saturation(rgb, -100)
    lum = PS.grayscale_luminosity(rgb)
    assert np.allclose(out[..., 0], lum)
    assert np.allclose(out[..., 1], lum)
    assert np.allclose(out[..., 2], lum)


def test_saturation_ignores_grayscale_input():
    gray = np.linspace(0, 1, 4, dtype=np.float32).reshape(2, 2)
    assert np.allclose(PS.adjust_saturation(gray, 50), gray)


def test_neutral_adjustments_are_identity():
    rgb = np.random.default_rng(0).random((3, 3, 3), dtype=np.float32)
    out = PS.apply_adjustments(rgb, Adjustments())
    assert np.allclose(out, rgb)


def test_apply_adjustments_chains_all_three():
    rgb = np.full((2, 2, 3), 0.5, dtype=np.float32)
    out = PS.apply_adjustments(rgb, Adjustments(brightness=10, contrast=0, saturation=20))
    assert out.shape == rgb.shape
    assert np.allclose(out, 0.6)
