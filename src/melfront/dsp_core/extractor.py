"""
Configured spectrogram extractor.

``SpectrogramExtractor`` resolves a ``SpectrogramConfig`` once (window, FFT
plan, mel filter bank, option validation) and then turns any number of
waveforms into spectrogram tensors. Everything it holds is read-only, so one
extractor can serve concurrent callers as long as each call has its own
scratch buffers.
"""

from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np

from ..config import SpectrogramConfig, load_config
from ..utils.logging import get_logger
from .fft import FFT, FFTPlanCache
from .mel import mel_filter_bank
from .stft import (
    SpectrogramScratch,
    check_spectrogram_options,
    compute_num_frames,
    num_frequency_bins,
    spectrogram,
    window_function,
)

logger = get_logger(__name__)


class SpectrogramExtractor:
    """
    Waveform to (log-)mel spectrogram front end.

    Args:
        config: Spectrogram configuration
        plans: Optional plan cache shared with other extractors

    Examples:
        >>> extractor = SpectrogramExtractor(SpectrogramConfig(log_mel='dB'))
        >>> features = extractor(np.zeros(16000))
        >>> features.shape  # (80, 101)
    """

    def __init__(self, config: SpectrogramConfig, plans: Optional[FFTPlanCache] = None):
        self.config = config
        fft_length = config.effective_fft_length

        self.window = window_function(
            config.effective_window_length,
            config.window,
            periodic=config.periodic,
            frame_length=config.frame_length,
            center=config.center_window,
        )
        self.window.flags.writeable = False

        self.mel_filters: Optional[np.ndarray] = None
        if config.mel is not None:
            mel = config.mel
            max_frequency = mel.max_frequency
            if max_frequency is None:
                max_frequency = config.sampling_rate / 2
            self.mel_filters = mel_filter_bank(
                num_frequency_bins=num_frequency_bins(fft_length, config.onesided),
                num_mel_filters=mel.num_mel_filters,
                min_frequency=mel.min_frequency,
                max_frequency=max_frequency,
                sampling_rate=config.sampling_rate,
                norm=mel.norm,
                mel_scale=mel.mel_scale,
                triangularize_in_mel_space=mel.triangularize_in_mel_space,
            )
            self.mel_filters.flags.writeable = False

        check_spectrogram_options(
            config.frame_length,
            config.hop_length,
            fft_length=fft_length,
            window_length=self.window.shape[0],
            power=config.power,
            center=config.center,
            pad_mode=config.pad_mode,
            onesided=config.onesided,
            mel_filters_shape=None if self.mel_filters is None else self.mel_filters.shape,
            log_mel=config.log_mel,
            reference=config.reference,
            min_value=config.min_value,
            db_range=config.db_range,
            min_num_frames=config.min_num_frames,
            max_num_frames=config.max_num_frames,
        )

        self.fft = plans.get(fft_length) if plans is not None else FFT(fft_length)

        logger.debug(
            "Spectrogram extractor ready: fft=%r, window=%s(%d), mel_filters=%s",
            self.fft,
            config.window,
            config.effective_window_length,
            None if self.mel_filters is None else self.mel_filters.shape,
        )

    @classmethod
    def from_yaml(cls, config_path: Union[str, Path], plans: Optional[FFTPlanCache] = None) -> 'SpectrogramExtractor':
        return cls(load_config(config_path), plans=plans)

    @property
    def num_frequency_bins(self) -> int:
        return num_frequency_bins(self.config.effective_fft_length, self.config.onesided)

    @property
    def num_features(self) -> int:
        """Size of the feature axis of the output."""
        if self.mel_filters is not None:
            return self.mel_filters.shape[0]
        return self.num_frequency_bins

    def create_scratch(self) -> SpectrogramScratch:
        return SpectrogramScratch.for_plan(self.fft)

    def num_frames(self, num_samples: int) -> int:
        """Number of frames in the output for a waveform of ``num_samples``."""
        cfg = self.config
        _, total = compute_num_frames(
            num_samples,
            cfg.frame_length,
            cfg.hop_length,
            fft_length=cfg.effective_fft_length,
            center=cfg.center,
            min_num_frames=cfg.min_num_frames,
            max_num_frames=cfg.max_num_frames,
            do_pad=cfg.do_pad,
        )
        return total

    def output_shape(self, num_samples: int) -> Tuple[int, int]:
        shape = (self.num_features, self.num_frames(num_samples))
        return shape[::-1] if self.config.transpose else shape

    def extract(self, waveform: np.ndarray, scratch: Optional[SpectrogramScratch] = None) -> np.ndarray:
        """
        Compute the spectrogram of one mono waveform.

        Args:
            waveform: Samples, shape (length,)
            scratch: Frame buffers owned by this call (see ``create_scratch``)

        Returns:
            Tensor of shape ``output_shape(len(waveform))``
        """
        cfg = self.config
        return spectrogram(
            waveform,
            self.window,
            cfg.frame_length,
            cfg.hop_length,
            fft_length=cfg.effective_fft_length,
            power=cfg.power,
            center=cfg.center,
            pad_mode=cfg.pad_mode,
            onesided=cfg.onesided,
            preemphasis=cfg.preemphasis,
            mel_filters=self.mel_filters,
            mel_floor=cfg.mel_floor,
            log_mel=cfg.log_mel,
            reference=cfg.reference,
            min_value=cfg.min_value,
            db_range=cfg.db_range,
            remove_dc_offset=cfg.remove_dc_offset,
            min_num_frames=cfg.min_num_frames,
            max_num_frames=cfg.max_num_frames,
            do_pad=cfg.do_pad,
            transpose=cfg.transpose,
            fft=self.fft,
            scratch=scratch,
        )

    __call__ = extract
