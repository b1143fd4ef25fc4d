"""
Unit tests for mel scale conversions and mel filter banks.

Run:
    pytest tests/test_mel.py -v
"""

import logging

import numpy as np
import pytest
import librosa

from melfront.dsp_core.mel import hertz_to_mel, mel_filter_bank, mel_to_hertz
from melfront.errors import ConfigurationError, InvalidMelScaleError, InvalidNormError


class TestMelScale:
    """Hertz <-> mel conversions."""

    def test_known_values(self):
        assert hertz_to_mel(0.0, 'slaney') == 0.0
        assert hertz_to_mel(1000.0, 'slaney') == pytest.approx(15.0)
        assert hertz_to_mel(200.0, 'slaney') == pytest.approx(3.0)
        assert hertz_to_mel(700.0, 'htk') == pytest.approx(2595.0 * np.log10(2.0))
        assert hertz_to_mel(700.0, 'kaldi') == pytest.approx(1127.0 * np.log(2.0))

    def test_matches_librosa(self):
        freqs = np.linspace(0.0, 8000.0, 101)
        assert np.allclose(hertz_to_mel(freqs, 'slaney'), librosa.hz_to_mel(freqs, htk=False))
        assert np.allclose(hertz_to_mel(freqs, 'htk'), librosa.hz_to_mel(freqs, htk=True))

    def test_round_trip(self):
        freqs = np.array([0.0, 20.0, 440.0, 999.0, 1000.0, 4000.0, 8000.0])
        for mel_scale in ['htk', 'kaldi', 'slaney']:
            restored = mel_to_hertz(hertz_to_mel(freqs, mel_scale), mel_scale)
            assert np.allclose(restored, freqs, atol=1e-8), mel_scale

    def test_scalar_in_scalar_out(self):
        assert isinstance(hertz_to_mel(440.0, 'slaney'), float)
        assert isinstance(mel_to_hertz(10.0, 'slaney'), float)
        assert isinstance(hertz_to_mel(440.0, 'htk'), float)
        assert isinstance(mel_to_hertz(10.0, 'kaldi'), float)

    def test_list_input(self):
        freqs = [0.0, 700.0, 4000.0]
        for mel_scale in ('htk', 'kaldi', 'slaney'):
            mels = hertz_to_mel(freqs, mel_scale)
            assert isinstance(mels, np.ndarray), mel_scale
            assert np.allclose(mels, hertz_to_mel(np.array(freqs), mel_scale))
            restored = mel_to_hertz(list(mels), mel_scale)
            assert np.allclose(restored, freqs, atol=1e-8), mel_scale

    def test_invalid_scale(self):
        with pytest.raises(InvalidMelScaleError):
            hertz_to_mel(440.0, 'bark')
        with pytest.raises(ValueError):
            mel_to_hertz(10.0, 'bark')


class TestMelFilterBank:
    """Triangular filter banks."""

    def test_slaney_matches_librosa(self):
        ours = mel_filter_bank(201, 80, 0.0, 8000.0, 16000, norm='slaney', mel_scale='slaney')
        ref = librosa.filters.mel(sr=16000, n_fft=400, n_mels=80, fmin=0.0, fmax=8000.0,
                                  htk=False, norm='slaney', dtype=np.float64)
        error = np.abs(ours - ref)

        print(f"\n[Mel Filterbank slaney]")
        print(f"  Shape: {ours.shape}")
        print(f"  Max error: {error.max():.2e}")

        assert ours.shape == (80, 201)
        assert error.max() < 1e-10

    def test_htk_matches_librosa(self):
        ours = mel_filter_bank(257, 40, 20.0, 7600.0, 16000, norm=None, mel_scale='htk')
        ref = librosa.filters.mel(sr=16000, n_fft=512, n_mels=40, fmin=20.0, fmax=7600.0,
                                  htk=True, norm=None, dtype=np.float64)
        assert ours.shape == (40, 257)
        assert np.abs(ours - ref).max() < 1e-10

    def test_kaldi_triangles_in_mel_space(self):
        num_bins, num_mel, sr = 257, 23, 16000
        low, high = 20.0, 8000.0
        ours = mel_filter_bank(num_bins, num_mel, low, high, sr, mel_scale='kaldi',
                               triangularize_in_mel_space=True)

        # Kaldi get_mel_banks: slopes measured in mel between equally spaced edges
        mel_low = 1127.0 * np.log(1.0 + low / 700.0)
        mel_high = 1127.0 * np.log(1.0 + high / 700.0)
        delta = (mel_high - mel_low) / (num_mel + 1)
        bin_mels = 1127.0 * np.log(1.0 + (sr / 512.0) * np.arange(num_bins) / 700.0)
        ref = np.zeros((num_mel, num_bins))
        for i in range(num_mel):
            left = mel_low + i * delta
            center = left + delta
            right = center + delta
            up = (bin_mels - left) / (center - left)
            down = (right - bin_mels) / (right - center)
            ref[i] = np.maximum(0.0, np.minimum(up, down))

        assert np.abs(ours - ref).max() < 1e-10

    def test_peaks_without_norm(self):
        filters = mel_filter_bank(513, 64, 0.0, 8000.0, 16000, mel_scale='htk')
        peaks = filters.max(axis=1)

        assert np.all(filters >= 0.0)
        assert np.all(peaks <= 1.0 + 1e-12)
        assert np.all(peaks > 0.5)

    def test_band_edges(self):
        # 0 Hz and the Nyquist frequency are both bins and filter edges
        filters = mel_filter_bank(9, 1, 0.0, 8000.0, 16000, mel_scale='htk')
        assert filters[0, 0] == 0.0
        assert filters[0, -1] < 1e-9
        assert 0.0 < filters[0].max() <= 1.0

    def test_slaney_norm_keeps_support(self):
        plain = mel_filter_bank(201, 80, 0.0, 8000.0, 16000, norm=None)
        normed = mel_filter_bank(201, 80, 0.0, 8000.0, 16000, norm='slaney')
        assert np.all(plain.max(axis=1) <= 1.0 + 1e-12)
        assert np.array_equal(plain > 0, normed > 0)
        # Higher bands are wider, so their weights shrink
        assert normed[-1].max() < normed[0].max()

    def test_invalid_norm(self):
        with pytest.raises(InvalidNormError):
            mel_filter_bank(201, 40, 0.0, 8000.0, 16000, norm='area')
        with pytest.raises(ConfigurationError):
            mel_filter_bank(201, 40, 0.0, 8000.0, 16000, mel_scale='mel')

    def test_empty_filter_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger='melfront'):
            filters = mel_filter_bank(16, 128, 0.0, 8000.0, 16000)
        assert np.any(filters.max(axis=1) == 0.0)
        assert "all zero values" in caplog.text

    def test_degenerate_sizes(self):
        with pytest.raises(ConfigurationError):
            mel_filter_bank(1, 4, 0.0, 8000.0, 16000, triangularize_in_mel_space=True)
        with pytest.raises(ConfigurationError):
            mel_filter_bank(201, 0, 0.0, 8000.0, 16000)
        with pytest.raises(ConfigurationError):
            mel_filter_bank(0, 4, 0.0, 8000.0, 16000)
