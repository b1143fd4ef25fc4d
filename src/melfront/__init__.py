"""
melfront - numpy/Numba audio front end: FFT plans, STFT and log-mel spectrograms.
"""

import logging

from .config import MelConfig, SpectrogramConfig, load_config, save_config
from .dsp_core import FFT, FFTPlanCache, SpectrogramExtractor, mel_filter_bank, spectrogram, window_function
from .errors import AliasingError, ConfigurationError, MelfrontError

__version__ = '0.1.0'

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'MelConfig',
    'SpectrogramConfig',
    'load_config',
    'save_config',
    'FFT',
    'FFTPlanCache',
    'SpectrogramExtractor',
    'mel_filter_bank',
    'spectrogram',
    'window_function',
    'MelfrontError',
    'ConfigurationError',
    'AliasingError',
]
