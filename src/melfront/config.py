"""
Spectrogram configuration records and YAML loading.

A configuration file holds the options of ``SpectrogramConfig`` either at the
top level or under a ``spectrogram:`` key; mel filter bank options go in a
nested ``mel:`` mapping::

    spectrogram:
      sampling_rate: 16000
      frame_length: 400
      hop_length: 160
      power: 2.0
      log_mel: log10
      mel:
        num_mel_filters: 80
        mel_scale: slaney
        norm: slaney
"""

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .errors import ConfigurationError


FLOAT_OPTIONS = (
    'min_frequency', 'max_frequency', 'power', 'preemphasis',
    'mel_floor', 'reference', 'min_value', 'db_range',
)


def _reject_unknown(cls, data: Dict[str, Any]) -> None:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown {cls.__name__} option(s): {', '.join(unknown)}")


def _coerce_floats(data: Dict[str, Any]) -> Dict[str, Any]:
    # YAML 1.1 reads exponents without a dot (1e-10) as strings
    for key in FLOAT_OPTIONS:
        value = data.get(key)
        if isinstance(value, str):
            try:
                data[key] = float(value)
            except ValueError:
                raise ConfigurationError(f"Option {key!r} must be a number, got {value!r}") from None
    return data


@dataclass(frozen=True)
class MelConfig:
    """Mel filter bank parameters."""
    num_mel_filters: int = 80
    min_frequency: float = 0.0
    max_frequency: Optional[float] = None  # defaults to sampling_rate / 2
    norm: Optional[str] = None
    mel_scale: str = 'htk'
    triangularize_in_mel_space: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MelConfig':
        if not isinstance(data, dict):
            raise ConfigurationError(f"mel options must be a mapping, got {type(data).__name__}")
        _reject_unknown(cls, data)
        return cls(**_coerce_floats(dict(data)))


@dataclass(frozen=True)
class SpectrogramConfig:
    """
    Every option of ``melfront.dsp_core.stft.spectrogram`` plus the window and
    mel filter bank description.
    """
    sampling_rate: int = 16000
    frame_length: int = 400
    hop_length: int = 160
    fft_length: Optional[int] = None

    # Window
    window: str = 'hann'
    window_length: Optional[int] = None  # defaults to frame_length
    periodic: bool = True
    center_window: bool = True

    # STFT
    power: Optional[float] = 2.0
    center: bool = True
    pad_mode: str = 'reflect'
    onesided: bool = True
    preemphasis: Optional[float] = None
    remove_dc_offset: bool = False

    # Mel / log scaling
    mel: Optional[MelConfig] = field(default_factory=MelConfig)
    mel_floor: float = 1e-10
    log_mel: Optional[str] = None
    reference: float = 1.0
    min_value: float = 1e-10
    db_range: Optional[float] = None

    # Output layout
    min_num_frames: Optional[int] = None
    max_num_frames: Optional[int] = None
    do_pad: bool = True
    transpose: bool = False

    @property
    def effective_fft_length(self) -> int:
        return self.frame_length if self.fft_length is None else self.fft_length

    @property
    def effective_window_length(self) -> int:
        return self.frame_length if self.window_length is None else self.window_length

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SpectrogramConfig':
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration must be a mapping, got {type(data).__name__}")
        data = dict(data)
        _reject_unknown(cls, data)
        _coerce_floats(data)

        if 'mel' in data and data['mel'] is not None:
            data['mel'] = MelConfig.from_dict(data['mel'])
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(config_path: Union[str, Path]) -> SpectrogramConfig:
    """Load a ``SpectrogramConfig`` from a YAML file."""
    with open(config_path, 'r') as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if isinstance(data, dict) and 'spectrogram' in data:
        data = data['spectrogram']
    return SpectrogramConfig.from_dict(data)


def save_config(config: SpectrogramConfig, config_path: Union[str, Path]) -> None:
    """Write a configuration as YAML under a ``spectrogram:`` key."""
    with open(config_path, 'w') as f:
        yaml.safe_dump({'spectrogram': config.to_dict()}, f, sort_keys=False)
