"""
Unit tests for the FFT plans.

Radix-4 and Bluestein plans are checked against scipy.fft on power-of-two
and arbitrary lengths, plus the buffer contract (aliasing, shapes, scratch).

Run:
    pytest tests/test_fft.py -v
"""

import numpy as np
import pytest
from scipy.fft import fft as scipy_fft, ifft as scipy_ifft, rfft as scipy_rfft

from melfront.dsp_core.fft import (
    FFT,
    ArbitrarySizeFFT,
    FFTPlanCache,
    FixedSizeFFT,
    fft,
    ifft,
    irfft,
    rfft,
)
from melfront.errors import AliasingError, BufferShapeError, ConfigurationError, InvalidLengthError


def to_interleaved(x: np.ndarray) -> np.ndarray:
    out = np.empty(2 * x.shape[0], dtype=np.float64)
    out[0::2] = x.real
    out[1::2] = x.imag
    return out


def from_interleaved(buf: np.ndarray, n: int) -> np.ndarray:
    return buf[0:2 * n:2] + 1j * buf[1:2 * n:2]


class TestFixedSizeFFT:
    """Radix-4 plan for power-of-two lengths."""

    def test_complex_transform(self):
        rng = np.random.default_rng(0)
        for N in [2, 4, 8, 16, 64, 1024]:
            x = rng.standard_normal(N) + 1j * rng.standard_normal(N)
            plan = FixedSizeFFT(N)
            out = plan.create_complex_array()
            plan.transform(out, to_interleaved(x))

            error = np.abs(from_interleaved(out, N) - scipy_fft(x))
            assert error.max() < 1e-10, f"FFT failed for N={N}: {error.max()}"

        print(f"\n[Radix-4 complex] All sizes passed ✓")

    def test_real_transform(self):
        rng = np.random.default_rng(1)
        for N in [2, 4, 8, 16, 64, 1024]:
            x = rng.standard_normal(N)
            plan = FixedSizeFFT(N)
            out = plan.create_complex_array()
            plan.real_transform(out, x)

            error = np.abs(from_interleaved(out, N) - scipy_fft(x))
            assert error.max() < 1e-10, f"Real FFT failed for N={N}: {error.max()}"

        print(f"\n[Radix-4 real] All sizes passed ✓")

    def test_real_transform_is_hermitian(self):
        N = 256
        x = np.random.default_rng(2).standard_normal(N)
        plan = FixedSizeFFT(N)
        out = plan.create_complex_array()
        plan.real_transform(out, x)

        X = from_interleaved(out, N)
        k = np.arange(1, N)
        assert np.allclose(X[N - k], np.conj(X[k]), atol=1e-10)
        assert abs(X[0].imag) < 1e-12
        assert abs(X[N // 2].imag) < 1e-12

    def test_sinusoid_peak(self):
        """A cosine at bin 37 puts N/2 in bins 37 and N-37."""
        N = 1024
        n = np.arange(N)
        x = np.cos(2 * np.pi * 37 * n / N)

        plan = FixedSizeFFT(N)
        out = plan.create_complex_array()
        plan.real_transform(out, x)
        magnitude = np.abs(from_interleaved(out, N))

        print(f"\n[Sinusoid] peak bin {np.argmax(magnitude[:N // 2])}, value {magnitude[37]:.6f}")
        assert np.argmax(magnitude[:N // 2]) == 37
        assert abs(magnitude[37] - N / 2) < 1e-9
        assert abs(magnitude[N - 37] - N / 2) < 1e-9
        assert magnitude[37] >= 10 * np.median(magnitude)

    def test_inverse_round_trip(self):
        rng = np.random.default_rng(3)
        N = 512
        x = rng.standard_normal(N) + 1j * rng.standard_normal(N)
        plan = FixedSizeFFT(N)

        spectrum = plan.create_complex_array()
        restored = plan.create_complex_array()
        plan.transform(spectrum, to_interleaved(x))
        plan.inverse_transform(restored, spectrum)

        assert np.abs(from_interleaved(restored, N) - x).max() < 1e-9

    def test_complex_array_helpers(self):
        plan = FixedSizeFFT(4)
        interleaved = plan.to_complex_array(np.array([1.0, 2.0, 3.0, 4.0]))
        assert np.array_equal(interleaved, [1.0, 0.0, 2.0, 0.0, 3.0, 0.0, 4.0, 0.0])
        assert np.array_equal(plan.from_complex_array(interleaved), [1.0, 2.0, 3.0, 4.0])

    def test_rejects_non_power_of_two(self):
        for size in [0, 1, 3, 12, 1000]:
            with pytest.raises(InvalidLengthError):
                FixedSizeFFT(size)

    def test_input_output_aliasing(self):
        plan = FixedSizeFFT(8)
        buf = plan.create_complex_array()
        with pytest.raises(AliasingError):
            plan.transform(buf, buf)
        with pytest.raises(AliasingError):
            plan.real_transform(buf, buf[:8])
        # Still a ValueError for callers that catch the generic type
        with pytest.raises(ValueError):
            plan.inverse_transform(buf, buf)

    def test_buffer_shapes(self):
        plan = FixedSizeFFT(8)
        with pytest.raises(BufferShapeError):
            plan.transform(np.zeros(8), np.zeros(16))
        with pytest.raises(BufferShapeError):
            plan.real_transform(np.zeros(16), np.zeros(7))
        with pytest.raises(BufferShapeError):
            plan.transform(np.zeros(16, dtype=np.float32), np.zeros(16))


class TestArbitrarySizeFFT:
    """Bluestein plan for any length larger than 1."""

    def test_complex_transform(self):
        rng = np.random.default_rng(10)
        for N in [2, 3, 5, 8, 100, 400, 1000]:
            x = rng.standard_normal(N) + 1j * rng.standard_normal(N)
            plan = ArbitrarySizeFFT(N)
            out = np.zeros(plan.output_buffer_size)
            plan.transform(out, to_interleaved(x))

            error = np.abs(from_interleaved(out, N) - scipy_fft(x))
            assert error.max() < 1e-8, f"Bluestein failed for N={N}: {error.max()}"

        print(f"\n[Bluestein complex] All sizes passed ✓")

    def test_real_transform(self):
        rng = np.random.default_rng(11)
        for N in [3, 5, 100, 400, 1000]:
            x = rng.standard_normal(N)
            plan = ArbitrarySizeFFT(N)
            out = np.zeros(plan.output_buffer_size)
            plan.real_transform(out, x)

            error = np.abs(from_interleaved(out, N) - scipy_fft(x))
            print(f"\n[Bluestein real] N={N}: max error {error.max():.2e}")
            assert error.max() < 1e-8

    def test_inverse_transform(self):
        rng = np.random.default_rng(12)
        N = 300
        X = rng.standard_normal(N) + 1j * rng.standard_normal(N)
        plan = ArbitrarySizeFFT(N)
        out = np.zeros(plan.output_buffer_size)
        plan.inverse_transform(out, to_interleaved(X))

        assert np.abs(from_interleaved(out, N) - scipy_ifft(X)).max() < 1e-9

    def test_inverse_round_trip(self):
        rng = np.random.default_rng(14)
        for N in [3, 100, 1000]:
            x = rng.standard_normal(N) + 1j * rng.standard_normal(N)
            plan = ArbitrarySizeFFT(N)
            spectrum = np.zeros(plan.output_buffer_size)
            restored = np.zeros(plan.output_buffer_size)
            plan.transform(spectrum, to_interleaved(x))
            plan.inverse_transform(restored, spectrum[:2 * N])

            assert np.abs(from_interleaved(restored, N) - x).max() < 1e-9, f"N={N}"

    def test_convolution_size(self):
        plan = ArbitrarySizeFFT(400)
        # 2 * (2 * 400 - 1) = 1598 floats rounded up to a power of two
        assert plan.buffer_size == 2048
        assert plan.output_buffer_size >= 2 * plan.size

    def test_scratch_reuse(self):
        rng = np.random.default_rng(13)
        plan = ArbitrarySizeFFT(100)
        scratch = plan.create_scratch()

        x1 = rng.standard_normal(100)
        x2 = rng.standard_normal(100)
        out1 = np.zeros(plan.output_buffer_size)
        out2 = np.zeros(plan.output_buffer_size)
        plan.real_transform(out1, x1, scratch=scratch)
        plan.real_transform(out2, x2, scratch=scratch)

        assert np.abs(from_interleaved(out1, 100) - scipy_fft(x1)).max() < 1e-8
        assert np.abs(from_interleaved(out2, 100) - scipy_fft(x2)).max() < 1e-8

    def test_scratch_size_mismatch(self):
        plan = ArbitrarySizeFFT(100)
        other = ArbitrarySizeFFT(1000)
        out = np.zeros(plan.output_buffer_size)
        with pytest.raises(BufferShapeError):
            plan.real_transform(out, np.zeros(100), scratch=other.create_scratch())

    def test_rejects_invalid_sizes(self):
        for size in [0, 1, -4, 2.5, True]:
            with pytest.raises(InvalidLengthError):
                ArbitrarySizeFFT(size)


class TestFFTFacade:
    """Plan selection, plan cache and numpy-style helpers."""

    def test_plan_selection(self):
        assert isinstance(FFT(512).fft, FixedSizeFFT)
        assert isinstance(FFT(400).fft, ArbitrarySizeFFT)
        assert FFT(512).create_scratch() is None
        assert FFT(400).create_scratch() is not None

    def test_invalid_length_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            FFT(1)

    def test_real_transform_matches_scipy(self):
        rng = np.random.default_rng(20)
        for N in [400, 512]:
            x = rng.standard_normal(N)
            plan = FFT(N)
            out = plan.create_output_array()
            plan.real_transform(out, x, scratch=plan.create_scratch())

            num_bins = N // 2 + 1
            error = np.abs(from_interleaved(out, num_bins) - scipy_rfft(x))
            assert error.max() < 1e-8

    def test_plan_cache(self):
        plans = FFTPlanCache()
        plan = plans.get(400)

        assert plans.get(400) is plan
        assert 400 in plans
        assert 512 not in plans
        assert len(plans) == 1

        plans.get(512)
        assert len(plans) == 2
        plans.clear()
        assert len(plans) == 0

    def test_fft_helpers(self):
        rng = np.random.default_rng(21)
        x = rng.standard_normal(1000)

        assert np.abs(fft(x) - scipy_fft(x)).max() < 1e-8
        assert np.abs(ifft(fft(x)) - x).max() < 1e-9

        X = rfft(x)
        assert len(X) == len(x) // 2 + 1
        assert np.abs(X - scipy_rfft(x)).max() < 1e-8

    def test_irfft_round_trip(self):
        rng = np.random.default_rng(22)
        plans = FFTPlanCache()
        for N in [256, 255]:
            x = rng.standard_normal(N)
            restored = irfft(rfft(x, plans=plans), n=N, plans=plans)
            assert restored.shape == (N,)
            assert np.abs(restored - x).max() < 1e-9

    def test_fft_zero_padding(self):
        x = np.array([1.0, 2.0, 1.0, -1.0, 1.5])
        assert np.abs(fft(x, n=8) - scipy_fft(x, n=8)).max() < 1e-10
