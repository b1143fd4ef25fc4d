"""
DSP Core Module - FFT plans, STFT framing and mel filter banks

Modules:
    - fft: Radix-4 and Bluestein FFT plans (Numba kernels)
    - stft: Windows, padding, decibel scaling and the spectrogram pipeline
    - mel: Mel scale conversions and triangular filter banks
    - extractor: Config-driven spectrogram extractor
"""

from .fft import (
    FFT,
    ArbitrarySizeFFT,
    BluesteinScratch,
    FFTPlanCache,
    FixedSizeFFT,
    fft,
    ifft,
    irfft,
    rfft,
)
from .stft import (
    SpectrogramScratch,
    amplitude_to_db,
    check_spectrogram_options,
    compute_num_frames,
    get_window,
    pad_reflect,
    power_to_db,
    spectrogram,
    window_function,
)
from .mel import hertz_to_mel, mel_filter_bank, mel_to_hertz
from .extractor import SpectrogramExtractor

__all__ = [
    # FFT plans
    'FFT',
    'FixedSizeFFT',
    'ArbitrarySizeFFT',
    'BluesteinScratch',
    'FFTPlanCache',
    'fft',
    'ifft',
    'rfft',
    'irfft',
    # STFT functions
    'window_function',
    'get_window',
    'pad_reflect',
    'amplitude_to_db',
    'power_to_db',
    'compute_num_frames',
    'check_spectrogram_options',
    'spectrogram',
    'SpectrogramScratch',
    # Mel functions
    'hertz_to_mel',
    'mel_to_hertz',
    'mel_filter_bank',
    # Extractor
    'SpectrogramExtractor',
]
