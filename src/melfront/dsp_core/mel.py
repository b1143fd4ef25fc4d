"""
Mel scale conversions and triangular mel filter banks.

Three mel scales are supported:

- ``htk``:    mel = 2595 * log10(1 + f / 700)
- ``kaldi``:  mel = 1127 * ln(1 + f / 700)
- ``slaney``: linear below 1000 Hz (3 mels per 200 Hz), logarithmic above,
  with the breakpoint at mel 15.0 (as in librosa's default scale)
"""

from typing import Optional, Union

import numpy as np

from ..errors import ConfigurationError, InvalidMelScaleError, InvalidNormError
from ..utils.logging import get_logger

logger = get_logger(__name__)

MEL_SCALES = ('htk', 'kaldi', 'slaney')

# Slaney scale constants
MIN_LOG_HERTZ = 1000.0
MIN_LOG_MEL = 15.0
LOGSTEP = 27.0 / np.log(6.4)


def _check_mel_scale(mel_scale: str) -> None:
    if mel_scale not in MEL_SCALES:
        raise InvalidMelScaleError(
            f'mel_scale should be one of "htk", "slaney" or "kaldi", got {mel_scale!r}'
        )


def hertz_to_mel(freq: Union[float, np.ndarray], mel_scale: str = 'htk') -> Union[float, np.ndarray]:
    """
    Convert frequencies from hertz to mels.

    Args:
        freq: Frequency (scalar or array) in Hz
        mel_scale: One of "htk", "kaldi" or "slaney"

    Returns:
        Frequencies on the mel scale, same shape as ``freq``
    """
    _check_mel_scale(mel_scale)
    freq_arr = np.asarray(freq, dtype=np.float64)

    if mel_scale == 'htk':
        mels = 2595.0 * np.log10(1.0 + (freq_arr / 700.0))
    elif mel_scale == 'kaldi':
        mels = 1127.0 * np.log(1.0 + (freq_arr / 700.0))
    else:
        # np.where would evaluate log(0) for the linear region
        mels = np.where(
            freq_arr >= MIN_LOG_HERTZ,
            MIN_LOG_MEL + np.log(np.maximum(freq_arr, MIN_LOG_HERTZ) / MIN_LOG_HERTZ) * LOGSTEP,
            3.0 * freq_arr / 200.0,
        )

    if np.ndim(freq) == 0:
        return float(mels)
    return mels


def mel_to_hertz(mels: Union[float, np.ndarray], mel_scale: str = 'htk') -> Union[float, np.ndarray]:
    """
    Convert frequencies from mels to hertz (inverse of ``hertz_to_mel``).
    """
    _check_mel_scale(mel_scale)
    mels_arr = np.asarray(mels, dtype=np.float64)

    if mel_scale == 'htk':
        freq = 700.0 * (np.power(10.0, mels_arr / 2595.0) - 1.0)
    elif mel_scale == 'kaldi':
        freq = 700.0 * (np.exp(mels_arr / 1127.0) - 1.0)
    else:
        freq = np.where(
            mels_arr >= MIN_LOG_MEL,
            MIN_LOG_HERTZ * np.exp((mels_arr - MIN_LOG_MEL) / LOGSTEP),
            200.0 * mels_arr / 3.0,
        )

    if np.ndim(mels) == 0:
        return float(freq)
    return freq


def _create_triangular_filter_bank(fft_freqs: np.ndarray, filter_freqs: np.ndarray) -> np.ndarray:
    """
    Creates a triangular filter bank.

    Args:
        fft_freqs: Frequencies of the FFT bins, shape (num_frequency_bins,)
        filter_freqs: Edge and center frequencies of the filters,
            shape (num_mel_filters + 2,)

    Returns:
        Filter bank of shape (num_mel_filters, num_frequency_bins)
    """
    filter_diff = np.diff(filter_freqs)
    # slopes[i, j] = filter_freqs[i] - fft_freqs[j]
    slopes = filter_freqs[:, np.newaxis] - fft_freqs[np.newaxis, :]
    down_slopes = -slopes[:-2] / filter_diff[:-1, np.newaxis]
    up_slopes = slopes[2:] / filter_diff[1:, np.newaxis]
    return np.maximum(np.zeros(1), np.minimum(down_slopes, up_slopes))


def mel_filter_bank(
    num_frequency_bins: int,
    num_mel_filters: int,
    min_frequency: float,
    max_frequency: float,
    sampling_rate: int,
    norm: Optional[str] = None,
    mel_scale: str = 'htk',
    triangularize_in_mel_space: bool = False,
) -> np.ndarray:
    """
    Create a frequency-bin to mel projection matrix.

    Filters are triangles whose edges are ``num_mel_filters + 2`` points evenly
    spaced on the mel scale between ``min_frequency`` and ``max_frequency``.

    Args:
        num_frequency_bins: Number of frequency bins of the spectrogram
            (``fft_length // 2 + 1`` for a one-sided STFT)
        num_mel_filters: Number of mel filters to generate
        min_frequency: Lowest frequency of interest in Hz
        max_frequency: Highest frequency of interest in Hz (should not
            exceed ``sampling_rate / 2``)
        sampling_rate: Sample rate of the audio waveform
        norm: If "slaney", divide each triangle by the width of its band
            (area normalization)
        mel_scale: One of "htk", "kaldi" or "slaney"
        triangularize_in_mel_space: Build the triangles in mel space rather
            than in frequency space (matches torchaudio / kaldi fbank)

    Returns:
        Mel filter bank, shape (num_mel_filters, num_frequency_bins)
    """
    if norm is not None and norm != 'slaney':
        raise InvalidNormError(f'norm must be one of None or "slaney", got {norm!r}')
    _check_mel_scale(mel_scale)
    if num_mel_filters < 1:
        raise ConfigurationError(f"num_mel_filters must be at least 1, got {num_mel_filters}")
    if num_frequency_bins < 1:
        raise ConfigurationError(f"num_frequency_bins must be at least 1, got {num_frequency_bins}")
    if triangularize_in_mel_space and num_frequency_bins < 2:
        raise ConfigurationError(
            f"triangularize_in_mel_space needs at least 2 frequency bins, got {num_frequency_bins}"
        )

    mel_min = hertz_to_mel(min_frequency, mel_scale=mel_scale)
    mel_max = hertz_to_mel(max_frequency, mel_scale=mel_scale)
    mel_freqs = np.linspace(mel_min, mel_max, num_mel_filters + 2)
    filter_freqs = mel_to_hertz(mel_freqs, mel_scale=mel_scale)

    if triangularize_in_mel_space:
        # FFT bin centres in Hz, converted to mels; filters stay in mel space
        fft_bin_width = sampling_rate / ((num_frequency_bins - 1) * 2)
        fft_freqs = hertz_to_mel(fft_bin_width * np.arange(num_frequency_bins), mel_scale=mel_scale)
        filter_freqs = mel_freqs
    else:
        fft_freqs = np.linspace(0, sampling_rate // 2, num_frequency_bins)

    mel_filters = _create_triangular_filter_bank(fft_freqs, filter_freqs)

    if norm == 'slaney':
        # Slaney-style mel is scaled to be approx constant energy per channel
        enorm = 2.0 / (filter_freqs[2:num_mel_filters + 2] - filter_freqs[:num_mel_filters])
        mel_filters *= enorm[:, np.newaxis]

    empty = np.flatnonzero(mel_filters.max(axis=1) == 0.0)
    if empty.size > 0:
        logger.warning(
            "At least one mel filter has all zero values (filters %s). "
            "The value for `num_mel_filters` (%d) may be set too high, "
            "or `num_frequency_bins` (%d) too low.",
            empty.tolist(), num_mel_filters, num_frequency_bins,
        )

    return mel_filters
