"""
Short-Time Fourier Transform front end: windows, framing and (log-)mel
spectrograms.

``spectrogram`` is a stateless pipeline: every call allocates (or borrows from
``scratch``) its own frame buffers and returns a fresh tensor.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from ..errors import (
    BufferShapeError,
    ConfigurationError,
    UnknownWindowTypeError,
    UnsupportedPadModeError,
)
from .fft import FFT, BluesteinScratch

WINDOW_TYPES = ('boxcar', 'hann', 'hann_window', 'hamming', 'povey')
LOG_MEL_OPTIONS = (None, 'log', 'log10', 'dB')


# ============== Windows ==============

def generalized_cosine_window(M: int, a_0: float) -> np.ndarray:
    """
    Generalized cosine window ``w[i] = a_0 - (1 - a_0) * cos(2 * pi * i / (M - 1))``.

    Hann (a_0 = 0.5) and Hamming (a_0 = 0.54) are special cases.
    See https://www.mathworks.com/help/signal/ug/generalized-cosine-windows.html
    """
    if M < 1:
        return np.zeros(0, dtype=np.float64)
    if M == 1:
        return np.ones(1, dtype=np.float64)

    a_1 = 1.0 - a_0
    factor = (2 * np.pi) / (M - 1)
    return a_0 - a_1 * np.cos(np.arange(M) * factor)


def hanning(M: int) -> np.ndarray:
    return generalized_cosine_window(M, 0.5)


def hamming(M: int) -> np.ndarray:
    return generalized_cosine_window(M, 0.54)


def window_function(
    window_length: int,
    name: str,
    periodic: bool = True,
    frame_length: Optional[int] = None,
    center: bool = True,
) -> np.ndarray:
    """
    Generate an analysis window.

    Parameters
    ----------
    window_length : int
        Number of samples in the window
    name : str
        'boxcar', 'hann' (alias 'hann_window'), 'hamming' or 'povey'
        (Hann raised to the power 0.85, as used by Kaldi)
    periodic : bool
        If True, build a window of ``window_length + 1`` points and drop the
        last one (DFT-even window for spectral analysis). If False, the
        window is symmetric.
    frame_length : int, optional
        Zero-pad the window to this length
    center : bool
        Centre the window inside the padded frame (only with ``frame_length``)

    Returns
    -------
    np.ndarray
        Window of shape (window_length,) or (frame_length,)
    """
    if name not in WINDOW_TYPES:
        raise UnknownWindowTypeError(f"Unknown window type {name!r}")

    if window_length < 1:
        window = np.zeros(0, dtype=np.float64)
    elif window_length == 1:
        window = np.ones(1, dtype=np.float64)
    else:
        length = window_length + 1 if periodic else window_length
        if name == 'boxcar':
            window = np.ones(length, dtype=np.float64)
        elif name in ('hann', 'hann_window'):
            window = hanning(length)
        elif name == 'hamming':
            window = hamming(length)
        else:
            window = np.power(hanning(length), 0.85)

        if periodic:
            window = window[:window_length]

    if frame_length is None:
        return window

    if window_length > frame_length:
        raise ConfigurationError(
            f"Length of the window ({window_length}) may not be larger than frame_length ({frame_length})"
        )

    padded = np.zeros(frame_length, dtype=np.float64)
    offset = (frame_length - window.shape[0]) // 2 if center else 0
    padded[offset:offset + window.shape[0]] = window
    return padded


def get_window(window: Union[str, np.ndarray], win_length: int, periodic: bool = True) -> np.ndarray:
    """
    Resolve a window specification to an array of ``win_length`` values.

    ``window`` is either a name accepted by ``window_function`` or a custom
    array, which must already have ``win_length`` values.
    """
    if isinstance(window, str):
        return window_function(win_length, window, periodic=periodic)

    window = np.asarray(window, dtype=np.float64)
    if window.ndim != 1 or window.shape[0] != win_length:
        raise ConfigurationError(f"Custom window length {window.shape} != win_length {win_length}")
    return window


# ============== Padding ==============

def pad_reflect(array: np.ndarray, left: int, right: int) -> np.ndarray:
    """
    Pad with a mirrored copy of the signal on both ends, without repeating
    the edge sample: ``[1, 2, 3]`` padded by 2 becomes ``[3, 2, 1, 2, 3, 2, 1]``.
    """
    array = np.asarray(array, dtype=np.float64)
    if array.shape[0] == 0:
        raise ConfigurationError("Cannot reflect-pad an empty waveform")
    if array.shape[0] == 1:
        return np.full(array.shape[0] + left + right, array[0])
    return np.pad(array, (left, right), mode='reflect')


# ============== Decibels ==============

def _check_db_options(reference: float, min_value: float, db_range: Optional[float]) -> None:
    if reference <= 0:
        raise ConfigurationError("reference must be greater than zero")
    if min_value <= 0:
        raise ConfigurationError("min_value must be greater than zero")
    if db_range is not None and db_range <= 0:
        raise ConfigurationError("db_range must be greater than zero")


def _db_conversion(
    spectrogram: np.ndarray,
    factor: float,
    reference: float,
    min_value: float,
    db_range: Optional[float],
) -> np.ndarray:
    _check_db_options(reference, min_value, db_range)

    # log10(reference) is computed once, after clamping to min_value
    log_reference = np.log10(max(min_value, reference))
    db = factor * np.log10(np.maximum(min_value, spectrogram)) - factor * log_reference

    if db_range is not None and db.size > 0:
        db = np.maximum(db, db.max() - db_range)
    return db


def amplitude_to_db(
    spectrogram: np.ndarray,
    reference: float = 1.0,
    min_value: float = 1e-5,
    db_range: Optional[float] = None,
) -> np.ndarray:
    """
    Convert an amplitude spectrogram to decibels: ``20 * log10(S / reference)``.

    Args:
        spectrogram: Amplitude (mel) spectrogram
        reference: Value that maps to 0 dB, e.g. ``spectrogram.max()``
        min_value: Values are clipped to this before the log (1e-5 is -100 dB)
        db_range: Maximum dynamic range in dB below the peak

    Returns:
        New array in dB
    """
    return _db_conversion(np.asarray(spectrogram, dtype=np.float64), 20.0, reference, min_value, db_range)


def power_to_db(
    spectrogram: np.ndarray,
    reference: float = 1.0,
    min_value: float = 1e-10,
    db_range: Optional[float] = None,
) -> np.ndarray:
    """
    Convert a power spectrogram to decibels: ``10 * log10(S / reference)``.

    Based on ``librosa.power_to_db`` (``amin`` is ``min_value``, ``top_db``
    is ``db_range``).
    """
    return _db_conversion(np.asarray(spectrogram, dtype=np.float64), 10.0, reference, min_value, db_range)


# ============== Spectrogram ==============

@dataclass
class SpectrogramScratch:
    """
    Per-call working buffers for ``spectrogram``.

    A scratch object belongs to one call at a time; concurrent extractions
    each need their own.
    """
    input_buffer: np.ndarray
    output_buffer: np.ndarray
    fft_scratch: Optional[BluesteinScratch] = None

    @classmethod
    def for_plan(cls, fft: FFT) -> 'SpectrogramScratch':
        return cls(
            input_buffer=np.zeros(fft.fft_length, dtype=np.float64),
            output_buffer=fft.create_output_array(),
            fft_scratch=fft.create_scratch(),
        )


def num_frequency_bins(fft_length: int, onesided: bool = True) -> int:
    return fft_length // 2 + 1 if onesided else fft_length


def compute_num_frames(
    num_samples: int,
    frame_length: int,
    hop_length: int,
    fft_length: Optional[int] = None,
    center: bool = True,
    min_num_frames: Optional[int] = None,
    max_num_frames: Optional[int] = None,
    do_pad: bool = True,
) -> tuple:
    """
    Frame bookkeeping for a waveform of ``num_samples`` samples.

    Returns
    -------
    tuple
        ``(computed, total)``: the number of frames that are actually
        transformed and the number of frames in the output (larger than
        ``computed`` only when padding up to ``max_num_frames``)
    """
    if fft_length is None:
        fft_length = frame_length
    if center:
        num_samples += 2 * ((fft_length - 1) // 2 + 1)

    num_frames = max(0, 1 + (num_samples - frame_length) // hop_length)
    if min_num_frames is not None and num_frames < min_num_frames:
        num_frames = min_num_frames

    computed = total = num_frames
    if max_num_frames is not None:
        if max_num_frames > num_frames:
            # input is too short, so we pad
            if do_pad:
                total = max_num_frames
        else:
            # input is too long, so we truncate
            computed = total = max_num_frames
    return computed, total


def check_spectrogram_options(
    frame_length: int,
    hop_length: int,
    fft_length: Optional[int] = None,
    window_length: Optional[int] = None,
    power: Optional[float] = 1.0,
    center: bool = True,
    pad_mode: str = 'reflect',
    onesided: bool = True,
    mel_filters_shape: Optional[Sequence[int]] = None,
    log_mel: Optional[str] = None,
    reference: float = 1.0,
    min_value: float = 1e-10,
    db_range: Optional[float] = None,
    min_num_frames: Optional[int] = None,
    max_num_frames: Optional[int] = None,
) -> int:
    """
    Validate spectrogram parameters without computing anything.

    Returns the effective ``fft_length``. Raises ``ConfigurationError`` (or a
    subclass) on the first problem found.
    """
    if fft_length is None:
        fft_length = frame_length

    if frame_length <= 0:
        raise ConfigurationError(f"frame_length must be greater than zero, got {frame_length}")
    if frame_length > fft_length:
        raise ConfigurationError(
            f"frame_length ({frame_length}) may not be larger than fft_length ({fft_length})"
        )
    if window_length is not None and window_length != frame_length:
        raise ConfigurationError(
            f"Length of the window ({window_length}) must equal frame_length ({frame_length})"
        )
    if hop_length <= 0:
        raise ConfigurationError("hop_length must be greater than zero")

    if power is None and mel_filters_shape is not None:
        raise ConfigurationError(
            "You have provided `mel_filters` but `power` is `None`. Mel spectrogram computation "
            "is not yet supported for complex-valued spectrogram. Specify `power` to fix this issue."
        )
    if power is not None and power <= 0:
        raise ConfigurationError(f"power must be greater than zero, got {power}")

    if center and pad_mode != 'reflect':
        raise UnsupportedPadModeError(f'pad_mode="{pad_mode}" not implemented yet.')

    if mel_filters_shape is not None:
        expected_bins = num_frequency_bins(fft_length, onesided)
        if len(mel_filters_shape) != 2 or mel_filters_shape[1] != expected_bins:
            raise ConfigurationError(
                f"mel_filters must have shape (num_mel_filters, {expected_bins}), got {tuple(mel_filters_shape)}"
            )

    if log_mel not in LOG_MEL_OPTIONS:
        raise ConfigurationError(f"log_mel must be one of None, 'log', 'log10' or 'dB'. Got {log_mel!r}")
    if log_mel == 'dB' and power is not None:
        if power not in (1.0, 2.0):
            raise ConfigurationError(f"Cannot use log_mel option '{log_mel}' with power {power}")
        _check_db_options(reference, min_value, db_range)

    if min_num_frames is not None and min_num_frames < 0:
        raise ConfigurationError("min_num_frames may not be negative")
    if max_num_frames is not None and max_num_frames < 0:
        raise ConfigurationError("max_num_frames may not be negative")

    return fft_length


def spectrogram(
    waveform: np.ndarray,
    window: np.ndarray,
    frame_length: int,
    hop_length: int,
    fft_length: Optional[int] = None,
    power: Optional[float] = 1.0,
    center: bool = True,
    pad_mode: str = 'reflect',
    onesided: bool = True,
    preemphasis: Optional[float] = None,
    mel_filters: Optional[np.ndarray] = None,
    mel_floor: float = 1e-10,
    log_mel: Optional[str] = None,
    reference: float = 1.0,
    min_value: float = 1e-10,
    db_range: Optional[float] = None,
    remove_dc_offset: bool = False,
    min_num_frames: Optional[int] = None,
    max_num_frames: Optional[int] = None,
    do_pad: bool = True,
    transpose: bool = False,
    dtype=np.float64,
    fft: Optional[FFT] = None,
    scratch: Optional[SpectrogramScratch] = None,
) -> np.ndarray:
    """
    Compute a spectrogram of one mono waveform using the STFT.

    This function can create the following kinds of spectrograms:
      - amplitude spectrogram (``power=1.0``)
      - power spectrogram (``power=2.0``)
      - complex-valued spectrogram (``power=None``)
      - log spectrogram (``log_mel``)
      - mel spectrogram (``mel_filters``)
      - log-mel spectrogram (``mel_filters`` and ``log_mel``)

    Parameters
    ----------
    waveform : np.ndarray
        Mono waveform, shape (length,)
    window : np.ndarray
        Analysis window of exactly ``frame_length`` values (zero-padded if the
        actual window is shorter, see ``window_function``)
    frame_length : int
        Length of the analysis frames in samples
    hop_length : int
        Stride between successive frames in samples
    fft_length : int, optional
        FFT size (number of frequency bins). Defaults to ``frame_length``.
        Powers of two are fastest, any size larger than 1 works.
    power : float or None
        1.0 for amplitude, 2.0 for power, None for the complex STFT. Any
        other value gives ``|X| ** power``: squared magnitudes are raised to
        ``power / 2``. The transformers.js ``spectrogram`` raises them to
        ``2 / power`` instead, so its outputs differ for ``power`` other
        than 2.
    center : bool
        Reflect-pad the waveform so that frame ``t`` is centred at
        ``t * hop_length`` (an empty waveform is padded with zeros)
    pad_mode : str
        Only "reflect" is implemented
    onesided : bool
        Return ``fft_length // 2 + 1`` bins instead of ``fft_length``
    preemphasis : float, optional
        Pre-emphasis coefficient applied per frame
    mel_filters : np.ndarray, optional
        Mel filter bank, shape (num_mel_filters, num_frequency_bins)
    mel_floor : float
        Minimum value of the (mel) spectrogram
    log_mel : str, optional
        None, "log", "log10" or "dB"
    reference, min_value, db_range : float
        Decibel conversion parameters (see ``power_to_db``)
    remove_dc_offset : bool
        Subtract the mean of each frame before pre-emphasis (Kaldi fbank)
    min_num_frames, max_num_frames : int, optional
        Clamp the number of frames; with ``do_pad`` the output is padded up
        to ``max_num_frames`` frames
    transpose : bool
        Return shape (num_frames, bins) instead of (bins, num_frames)
    dtype : numpy dtype
        Output dtype for real spectrograms
    fft : FFT, optional
        Pre-built plan for ``fft_length``
    scratch : SpectrogramScratch, optional
        Frame buffers to use for this call

    Returns
    -------
    np.ndarray
        Shape (num_mel_filters or num_frequency_bins, num_frames), or the
        transpose

    Examples
    --------
    >>> y = np.random.randn(16000)
    >>> S = spectrogram(y, window_function(400, 'hann'), 400, 160, power=2.0)
    >>> S.shape  # (201, 101) -> 201 freq bins, 101 time frames
    """
    waveform = np.asarray(waveform, dtype=np.float64)
    if waveform.ndim != 1:
        raise ConfigurationError(f"Input must be a 1D mono waveform, got shape {waveform.shape}")
    window = np.asarray(window, dtype=np.float64)
    if window.ndim != 1:
        raise ConfigurationError(f"Window must be 1D, got shape {window.shape}")
    if mel_filters is not None:
        mel_filters = np.asarray(mel_filters, dtype=np.float64)

    fft_length = check_spectrogram_options(
        frame_length,
        hop_length,
        fft_length=fft_length,
        window_length=window.shape[0],
        power=power,
        center=center,
        pad_mode=pad_mode,
        onesided=onesided,
        mel_filters_shape=None if mel_filters is None else mel_filters.shape,
        log_mel=log_mel,
        reference=reference,
        min_value=min_value,
        db_range=db_range,
        min_num_frames=min_num_frames,
        max_num_frames=max_num_frames,
    )

    if fft is None:
        fft = FFT(fft_length)
    elif fft.fft_length != fft_length:
        raise ConfigurationError(f"FFT plan has length {fft.fft_length}, expected {fft_length}")

    if scratch is None:
        scratch = SpectrogramScratch.for_plan(fft)
    elif (scratch.input_buffer.shape[0] != fft_length
          or scratch.output_buffer.shape[0] < fft.output_buffer_size):
        raise BufferShapeError("Scratch buffers do not match the FFT plan")

    if center:
        half_window = (fft_length - 1) // 2 + 1
        if waveform.shape[0] == 0:
            # Nothing to mirror: the padded frames are silence
            waveform = np.zeros(2 * half_window, dtype=np.float64)
        else:
            waveform = pad_reflect(waveform, half_window, half_window)

    # split waveform into frames of frame_length size
    num_frames, total_frames = compute_num_frames(
        waveform.shape[0],
        frame_length,
        hop_length,
        fft_length=fft_length,
        center=False,
        min_num_frames=min_num_frames,
        max_num_frames=max_num_frames,
        do_pad=do_pad,
    )
    num_bins = num_frequency_bins(fft_length, onesided)

    input_buffer = scratch.input_buffer
    output_buffer = scratch.output_buffer
    if power is None:
        magnitudes = np.zeros((num_bins, total_frames), dtype=np.complex128)
    else:
        magnitudes = np.zeros((num_bins, total_frames), dtype=np.float64)

    for i in range(num_frames):
        offset = i * hop_length
        buffer_size = min(waveform.shape[0] - offset, frame_length)

        input_buffer[:] = 0.0
        if buffer_size > 0:
            input_buffer[:buffer_size] = waveform[offset:offset + buffer_size]

            if remove_dc_offset:
                input_buffer[:buffer_size] -= np.sum(input_buffer[:buffer_size]) / buffer_size

            if preemphasis is not None:
                # The right-hand side is evaluated before assignment, so every
                # term uses the unmodified previous sample
                input_buffer[1:buffer_size] -= preemphasis * input_buffer[:buffer_size - 1]
                input_buffer[0] *= 1 - preemphasis

        input_buffer[:frame_length] *= window

        fft.real_transform(output_buffer, input_buffer, scratch=scratch.fft_scratch)

        # Bin-major layout: column i holds frame i
        spectrum_r = output_buffer[0:2 * num_bins:2]
        spectrum_i = output_buffer[1:2 * num_bins:2]
        if power is None:
            magnitudes[:, i] = spectrum_r + 1j * spectrum_i
        else:
            magnitudes[:, i] = spectrum_r ** 2 + spectrum_i ** 2

    if power is None:
        return np.ascontiguousarray(magnitudes.T) if transpose else magnitudes

    if power != 2:
        # Values are already squared: |X|^2 -> |X|^power
        magnitudes **= power / 2.0

    if mel_filters is not None:
        # (num_mel_filters, num_bins) @ (num_bins, num_frames)
        spec = mel_filters @ magnitudes
    else:
        spec = magnitudes

    spec = np.maximum(spec, mel_floor)

    # Padded frames hold mel_floor and are scaled like the rest
    if log_mel == 'log':
        spec = np.log(spec)
    elif log_mel == 'log10':
        spec = np.log10(spec)
    elif log_mel == 'dB':
        if power == 1.0:
            spec = amplitude_to_db(spec, reference, min_value, db_range)
        else:
            spec = power_to_db(spec, reference, min_value, db_range)

    if transpose:
        spec = spec.T
    return np.ascontiguousarray(spec, dtype=dtype)
