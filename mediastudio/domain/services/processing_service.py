from __future__ import annotations

import numpy as np

from mediastudio.domain.services.prompt_builder import Adjustments


class ProcessingService:
    """Local NumPy approximation of the adjustment sliders.

    Inputs and outputs are float32 arrays normalized to [0, 1].
    Slider values are percentages in [-100, 100].

    Channel convention:
    - Grayscale: (H, W)
    - RGB: (H, W, 3)
    """

    # Brightness: I_out = I_in + p/100
    @staticmethod
    def adjust_brightness(matrix: np.ndarray, percent: float) -> np.ndarray:
        out = np.clip(matrix.astype(np.float32) + float(percent) / 100.0, 0.0, 1.0)
        return out.astype(np.float32)

    # Contrast: I_out = (I_in - 0.5) * (1 + p/100) + 0.5
    @staticmethod
    def adjust_contrast(matrix: np.ndarray, percent: float) -> np.ndarray:
        gain = 1.0 + float(percent) / 100.0
        out = np.clip((matrix.astype(np.float32) - 0.5) * gain + 0.5, 0.0, 1.0)
        return out.astype(np.float32)

    # Grayscale (Luminosity): 0.299*R + 0.587*G + 0.114*B
    @staticmethod
    def grayscale_luminosity(matrix: np.ndarray) -> np.ndarray:
        mat = matrix.astype(np.float32)
        if mat.ndim == 3 and mat.shape[2] >= 3:
            weights = np.array([0.299, 0.587, 0.114], dtype=np.float32)
            return np.dot(mat[..., :3], weights).astype(np.float32)
        return mat

    # Saturation: I_out = L + (I_in - L) * (1 + p/100), L = luminosity
    @staticmethod
    def adjust_saturation(matrix: np.ndarray, percent: float) -> np.ndarray:
        mat = matrix.astype(np.float32)
        if mat.ndim != 3 or mat.shape[2] < 3:
            return mat
        lum = ProcessingService.grayscale_luminosity(mat)[..., np.newaxis]
        gain = 1.0 + float(percent) / 100.0
        out = np.clip(lum + (mat[..., :3] - lum) * gain, 0.0, 1.0)
        return out.astype(np.float32)

    @classmethod
    def apply_adjustments(cls, matrix: np.ndarray, adjustments: Adjustments) -> np.ndarray:
        out = matrix.astype(np.float32)
        if adjustments.brightness:
            out = cls.adjust_brightness(out, adjustments.brightness)
        if adjustments.contrast:
            out = cls.adjust_contrast(out, adjustments.contrast)
        if adjustments.saturation:
            out = cls.adjust_saturation(out, adjustments.saturation)
        return out
