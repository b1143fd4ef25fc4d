"""
FFT plans using Numba JIT kernels

Two plan types share one calling convention:

- ``FixedSizeFFT``: iterative radix-4 Cooley-Tukey (decimation in time) for
  power-of-two lengths. When log2(N) is odd the first pass is a radix-2 stage.
- ``ArbitrarySizeFFT``: Bluestein's chirp-z algorithm, which rewrites a DFT of
  any length as a circular convolution evaluated with a power-of-two plan.

``FFT`` picks the right one for a given length. Complex buffers are 1-D
float64 arrays with interleaved ``[re0, im0, re1, im1, ...]`` values, so a
transform of size N reads and writes 2N floats.

Plans are immutable once built (all tables are read-only) and may be shared
between threads. Working memory for Bluestein plans is passed explicitly via
``scratch`` or allocated per call.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Union
import math

import numpy as np
from numba import jit

from ..errors import AliasingError, BufferShapeError, InvalidLengthError
from ..utils.logging import get_logger

logger = get_logger(__name__)


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def _check_size(size) -> int:
    if isinstance(size, (bool, np.bool_)) or not isinstance(size, (int, np.integer)):
        raise InvalidLengthError(f"FFT size must be an integer, got {size!r}")
    size = int(size)
    if size <= 1:
        raise InvalidLengthError(f"FFT size must be larger than 1, got {size}")
    return size


def _readonly(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


def _check_buffers(out: np.ndarray, data: np.ndarray, out_len: int, in_len: int) -> np.ndarray:
    """Validate a transform call and return ``data`` as contiguous float64."""
    if out is data or (isinstance(out, np.ndarray) and isinstance(data, np.ndarray)
                       and np.shares_memory(out, data)):
        raise AliasingError("Input and output buffers must be different")

    if not isinstance(out, np.ndarray) or out.dtype != np.float64 or out.ndim != 1:
        raise BufferShapeError("Output buffer must be a 1-D float64 numpy array")
    if not out.flags.c_contiguous or not out.flags.writeable:
        raise BufferShapeError("Output buffer must be contiguous and writeable")
    if out.shape[0] < out_len:
        raise BufferShapeError(f"Output buffer has {out.shape[0]} values, expected at least {out_len}")

    data = np.ascontiguousarray(data, dtype=np.float64)
    if data.ndim != 1 or data.shape[0] != in_len:
        raise BufferShapeError(f"Input buffer has shape {data.shape}, expected ({in_len},)")
    return data


# ============== Radix-4 kernels ==============

@jit(nopython=True, cache=True)
def _single_transform2(data, out, out_off, off, step):
    # radix-2 butterfly, only used when the first pass has len=4
    even_r = data[off]
    even_i = data[off + 1]
    odd_r = data[off + step]
    odd_i = data[off + step + 1]

    out[out_off] = even_r + odd_r
    out[out_off + 1] = even_i + odd_i
    out[out_off + 2] = even_r - odd_r
    out[out_off + 3] = even_i - odd_i


@jit(nopython=True, cache=True)
def _single_transform4(data, out, out_off, off, step, inv):
    # radix-4 butterfly without twiddles, only used when the first pass has len=8
    step2 = step * 2
    step3 = step * 3

    a_r = data[off]
    a_i = data[off + 1]
    b_r = data[off + step]
    b_i = data[off + step + 1]
    c_r = data[off + step2]
    c_i = data[off + step2 + 1]
    d_r = data[off + step3]
    d_i = data[off + step3 + 1]

    t0_r = a_r + c_r
    t0_i = a_i + c_i
    t1_r = a_r - c_r
    t1_i = a_i - c_i
    t2_r = b_r + d_r
    t2_i = b_i + d_i
    t3_r = inv * (b_r - d_r)
    t3_i = inv * (b_i - d_i)

    out[out_off] = t0_r + t2_r
    out[out_off + 1] = t0_i + t2_i
    out[out_off + 2] = t1_r + t3_i
    out[out_off + 3] = t1_i - t3_r
    out[out_off + 4] = t0_r - t2_r
    out[out_off + 5] = t0_i - t2_i
    out[out_off + 6] = t1_r - t3_i
    out[out_off + 7] = t1_i + t3_r


@jit(nopython=True, cache=True)
def _transform4(out, data, inv, size, width, bitrev, table):
    """
    Complex radix-4 transform of ``size // 2`` points.

    ``inv`` is +1 for the forward transform and -1 for the (unscaled)
    inverse transform.
    """
    # Initial pass: permute and transform
    step = 1 << width
    length = (size // step) << 1

    t = 0
    if length == 4:
        for out_off in range(0, size, length):
            _single_transform2(data, out, out_off, bitrev[t], step)
            t += 1
    else:
        for out_off in range(0, size, length):
            _single_transform4(data, out, out_off, bitrev[t], step, inv)
            t += 1

    # Remaining passes in decreasing step order
    step >>= 2
    while step >= 2:
        length = (size // step) << 1
        quarter_len = length >> 2

        for out_off in range(0, size, length):
            limit = out_off + quarter_len - 1
            for i in range(out_off, limit, 2):
                k = ((i - out_off) >> 1) * step
                a = i
                b = a + quarter_len
                c = b + quarter_len
                d = c + quarter_len

                a_r = out[a]
                a_i = out[a + 1]
                b_r = out[b]
                b_i = out[b + 1]
                c_r = out[c]
                c_i = out[c + 1]
                d_r = out[d]
                d_i = out[d + 1]

                table_br = table[k]
                table_bi = inv * table[k + 1]
                mb_r = b_r * table_br - b_i * table_bi
                mb_i = b_r * table_bi + b_i * table_br

                table_cr = table[2 * k]
                table_ci = inv * table[2 * k + 1]
                mc_r = c_r * table_cr - c_i * table_ci
                mc_i = c_r * table_ci + c_i * table_cr

                table_dr = table[3 * k]
                table_di = inv * table[3 * k + 1]
                md_r = d_r * table_dr - d_i * table_di
                md_i = d_r * table_di + d_i * table_dr

                t0_r = a_r + mc_r
                t0_i = a_i + mc_i
                t1_r = a_r - mc_r
                t1_i = a_i - mc_i
                t2_r = mb_r + md_r
                t2_i = mb_i + md_i
                t3_r = inv * (mb_r - md_r)
                t3_i = inv * (mb_i - md_i)

                out[a] = t0_r + t2_r
                out[a + 1] = t0_i + t2_i
                out[b] = t1_r + t3_i
                out[b + 1] = t1_i - t3_r
                out[c] = t0_r - t2_r
                out[c + 1] = t0_i - t2_i
                out[d] = t1_r - t3_i
                out[d + 1] = t1_i + t3_r

        step >>= 2


@jit(nopython=True, cache=True)
def _single_real_transform2(data, out, out_off, off, step):
    even_r = data[off]
    odd_r = data[off + step]

    out[out_off] = even_r + odd_r
    out[out_off + 1] = 0.0
    out[out_off + 2] = even_r - odd_r
    out[out_off + 3] = 0.0


@jit(nopython=True, cache=True)
def _single_real_transform4(data, out, out_off, off, step, inv):
    step2 = step * 2
    step3 = step * 3

    a_r = data[off]
    b_r = data[off + step]
    c_r = data[off + step2]
    d_r = data[off + step3]

    t0_r = a_r + c_r
    t1_r = a_r - c_r
    t2_r = b_r + d_r
    t3_r = inv * (b_r - d_r)

    out[out_off] = t0_r + t2_r
    out[out_off + 1] = 0.0
    out[out_off + 2] = t1_r
    out[out_off + 3] = -t3_r
    out[out_off + 4] = t0_r - t2_r
    out[out_off + 5] = 0.0
    out[out_off + 6] = t1_r
    out[out_off + 7] = t3_r


@jit(nopython=True, cache=True)
def _real_transform4(out, data, inv, size, width, bitrev, table):
    """
    Real-input radix-4 transform of ``size // 2`` points.

    Only the non-negative half of each pass is computed; the negative
    frequencies are filled in at the end by conjugate mirroring.
    """
    step = 1 << width
    length = (size // step) << 1

    t = 0
    if length == 4:
        for out_off in range(0, size, length):
            _single_real_transform2(data, out, out_off, bitrev[t] >> 1, step >> 1)
            t += 1
    else:
        for out_off in range(0, size, length):
            _single_real_transform4(data, out, out_off, bitrev[t] >> 1, step >> 1, inv)
            t += 1

    step >>= 2
    while step >= 2:
        length = (size // step) << 1
        half_len = length >> 1
        quarter_len = half_len >> 1
        hquarter_len = quarter_len >> 1

        for out_off in range(0, size, length):
            for i in range(0, hquarter_len + 1, 2):
                k = (i >> 1) * step
                a = out_off + i
                b = a + quarter_len
                c = b + quarter_len
                d = c + quarter_len

                a_r = out[a]
                a_i = out[a + 1]
                b_r = out[b]
                b_i = out[b + 1]
                c_r = out[c]
                c_i = out[c + 1]
                d_r = out[d]
                d_i = out[d + 1]

                table_br = table[k]
                table_bi = inv * table[k + 1]
                mb_r = b_r * table_br - b_i * table_bi
                mb_i = b_r * table_bi + b_i * table_br

                table_cr = table[2 * k]
                table_ci = inv * table[2 * k + 1]
                mc_r = c_r * table_cr - c_i * table_ci
                mc_i = c_r * table_ci + c_i * table_cr

                table_dr = table[3 * k]
                table_di = inv * table[3 * k + 1]
                md_r = d_r * table_dr - d_i * table_di
                md_i = d_r * table_di + d_i * table_dr

                t0_r = a_r + mc_r
                t0_i = a_i + mc_i
                t1_r = a_r - mc_r
                t1_i = a_i - mc_i
                t2_r = mb_r + md_r
                t2_i = mb_i + md_i
                t3_r = inv * (mb_r - md_r)
                t3_i = inv * (mb_i - md_i)

                out[a] = t0_r + t2_r
                out[a + 1] = t0_i + t2_i
                out[b] = t1_r + t3_i
                out[b + 1] = t1_i - t3_r

                # Middle point of the pass
                if i == 0:
                    out[c] = t0_r - t2_r
                    out[c + 1] = t0_i - t2_i
                    continue

                # Do not overwrite values still needed by this pass
                if i == hquarter_len:
                    continue

                sa = out_off + quarter_len - i
                sb = out_off + half_len - i

                out[sa] = t1_r - inv * t3_i
                out[sa + 1] = -t1_i - inv * t3_r
                out[sb] = t0_r - inv * t2_r
                out[sb + 1] = -t0_i + inv * t2_i

        step >>= 2

    # Negative frequencies are the complex conjugates of the positive ones
    half = size >> 1
    for i in range(2, half, 2):
        out[size - i] = out[i]
        out[size - i + 1] = -out[i + 1]


# ============== Plans ==============

class FixedSizeFFT:
    """
    Radix-4 FFT plan for a power-of-two length.

    Parameters
    ----------
    size : int
        Number of complex points. Must be a power of two larger than 1.

    Examples
    --------
    >>> plan = FixedSizeFFT(8)
    >>> out = plan.create_complex_array()
    >>> plan.real_transform(out, np.arange(8.0))
    """

    def __init__(self, size: int):
        size = _check_size(size)
        if not is_power_of_two(size):
            raise InvalidLengthError(f"FFT size must be a power of two larger than 1, got {size}")

        self._size = size
        self._csize = size << 1

        # Twiddle factors: (cos, -sin) of pi * i / size for every even i
        angles = np.pi * np.arange(0, self._csize, 2, dtype=np.float64) / size
        table = np.empty(self._csize, dtype=np.float64)
        table[0::2] = np.cos(angles)
        table[1::2] = -np.sin(angles)
        self._table = _readonly(table)

        power = size.bit_length() - 1

        # Width of the first pass: full radix-4 plans start with len=8,
        # odd powers start with a radix-2 pass of len=4
        self._width = power - 1 if power % 2 == 0 else power

        # Base-4 digit reversal of the first-pass offsets (complex-interleaved)
        bitrev = np.zeros(1 << (self._width - 1), dtype=np.int64)
        for j in range(bitrev.shape[0]):
            value = 0
            for shift in range(0, self._width - 1, 2):
                rev_shift = self._width - shift - 2
                value |= ((j >> shift) & 3) << rev_shift
            bitrev[j] = value
        self._bitrev = _readonly(bitrev)

    @property
    def size(self) -> int:
        return self._size

    @property
    def output_buffer_size(self) -> int:
        return self._csize

    def __repr__(self) -> str:
        return f"FixedSizeFFT(size={self._size})"

    def create_complex_array(self) -> np.ndarray:
        """Return a zeroed interleaved complex buffer of length ``2 * size``."""
        return np.zeros(self._csize, dtype=np.float64)

    def to_complex_array(self, data: np.ndarray, storage: Optional[np.ndarray] = None) -> np.ndarray:
        """Interleave a real array with zero imaginary parts."""
        res = self.create_complex_array() if storage is None else storage
        res[0::2] = data[:self._size]
        res[1::2] = 0.0
        return res

    def from_complex_array(self, complex_data: np.ndarray, storage: Optional[np.ndarray] = None) -> np.ndarray:
        """Extract the real parts of an interleaved complex buffer."""
        real = complex_data[0::2]
        if storage is None:
            return real.copy()
        storage[:real.shape[0]] = real
        return storage

    def transform(self, out: np.ndarray, data: np.ndarray) -> None:
        """Forward complex FFT of ``data`` (2N floats) into ``out`` (2N floats)."""
        data = _check_buffers(out, data, self._csize, self._csize)
        _transform4(out, data, 1, self._csize, self._width, self._bitrev, self._table)

    def real_transform(self, out: np.ndarray, data: np.ndarray) -> None:
        """Forward FFT of ``data`` (N real values) into ``out`` (2N floats)."""
        data = _check_buffers(out, data, self._csize, self._size)
        _real_transform4(out, data, 1, self._csize, self._width, self._bitrev, self._table)

    def inverse_transform(self, out: np.ndarray, data: np.ndarray) -> None:
        """Inverse complex FFT, scaled by 1/N."""
        data = _check_buffers(out, data, self._csize, self._csize)
        _transform4(out, data, -1, self._csize, self._width, self._bitrev, self._table)
        out[:self._csize] /= self._size


@dataclass
class BluesteinScratch:
    """Working buffers for one ``ArbitrarySizeFFT`` call at a time."""
    buffer1: np.ndarray
    buffer2: np.ndarray
    out_buffer1: np.ndarray
    out_buffer2: np.ndarray

    @classmethod
    def allocate(cls, buffer_size: int) -> 'BluesteinScratch':
        return cls(*(np.zeros(buffer_size, dtype=np.float64) for _ in range(4)))


class ArbitrarySizeFFT:
    """
    Bluestein (chirp-z) FFT plan for any length larger than 1.

    The DFT is rewritten as a convolution with the chirp
    ``w[n] = exp(-i * pi * n^2 / N)`` and evaluated with a power-of-two plan
    of ``M >= 2N - 1`` points.

    For more information, see:
    https://math.stackexchange.com/questions/77118/non-power-of-2-ffts/77156#77156
    """

    def __init__(self, size: int):
        size = _check_size(size)
        self._size = size

        a = 2 * (size - 1)
        b = 2 * (2 * size - 1)
        buffer_size = 1 << (b - 1).bit_length()
        self._a = a
        self._buffer_size = buffer_size

        # Complex power of exp(-2*pi*i/N), computed via modulus and argument
        theta = (-2 * math.pi) / size
        base_r = math.cos(theta)
        base_i = math.sin(theta)

        n = np.arange(b >> 1, dtype=np.int64) + 1 - size
        e = (n * n) / 2.0
        result_mod = math.sqrt(base_r ** 2 + base_i ** 2) ** e
        result_arg = e * math.atan2(base_i, base_r)

        chirp = np.empty(b, dtype=np.float64)
        chirp[0::2] = result_mod * np.cos(result_arg)
        chirp[1::2] = result_mod * np.sin(result_arg)

        ichirp = np.zeros(buffer_size, dtype=np.float64)
        ichirp[0:b:2] = chirp[0::2]
        ichirp[1:b:2] = -chirp[1::2]

        # Chirp for n = 0 .. N-1
        self._sliced_chirp = _readonly(chirp[a:b].copy())

        self._inner = FixedSizeFFT(buffer_size >> 1)
        chirp_spectrum = np.empty(buffer_size, dtype=np.float64)
        self._inner.transform(chirp_spectrum, ichirp)
        self._chirp_spectrum = _readonly(chirp_spectrum)

    @property
    def size(self) -> int:
        return self._size

    @property
    def buffer_size(self) -> int:
        """Length in floats of the internal convolution buffers."""
        return self._buffer_size

    @property
    def output_buffer_size(self) -> int:
        return self._buffer_size

    def __repr__(self) -> str:
        return f"ArbitrarySizeFFT(size={self._size}, convolution_size={self._buffer_size >> 1})"

    def create_scratch(self) -> BluesteinScratch:
        return BluesteinScratch.allocate(self._buffer_size)

    def _transform(self, output: np.ndarray, data: np.ndarray, real: bool,
                   scratch: Optional[BluesteinScratch]) -> None:
        if scratch is None:
            scratch = self.create_scratch()
        elif scratch.buffer1.shape[0] != self._buffer_size:
            raise BufferShapeError(
                f"Scratch buffers have {scratch.buffer1.shape[0]} values, expected {self._buffer_size}"
            )

        n2 = 2 * self._size
        a = self._a
        ib1 = scratch.buffer1
        ib2 = scratch.buffer2
        ob2 = scratch.out_buffer1
        ob3 = scratch.out_buffer2
        cb = self._chirp_spectrum
        sb_r = self._sliced_chirp[0::2]
        sb_i = self._sliced_chirp[1::2]

        ib1[n2:] = 0.0
        if real:
            x = data[:self._size]
            ib1[0:n2:2] = x * sb_r
            ib1[1:n2:2] = x * sb_i
        else:
            x_r = data[0:n2:2]
            x_i = data[1:n2:2]
            ib1[0:n2:2] = x_r * sb_r - x_i * sb_i
            ib1[1:n2:2] = x_r * sb_i + x_i * sb_r
        self._inner.transform(ob2, ib1)

        ob2_r = ob2[0::2]
        ob2_i = ob2[1::2]
        ib2[0::2] = ob2_r * cb[0::2] - ob2_i * cb[1::2]
        ib2[1::2] = ob2_r * cb[1::2] + ob2_i * cb[0::2]
        self._inner.inverse_transform(ob3, ib2)

        y_r = ob3[a:a + n2:2]
        y_i = ob3[a + 1:a + n2:2]
        output[0:n2:2] = y_r * sb_r - y_i * sb_i
        output[1:n2:2] = y_r * sb_i + y_i * sb_r

    def transform(self, output: np.ndarray, data: np.ndarray,
                  scratch: Optional[BluesteinScratch] = None) -> None:
        """Forward complex DFT; the first 2N floats of ``output`` are written."""
        data = _check_buffers(output, data, 2 * self._size, 2 * self._size)
        self._transform(output, data, False, scratch)

    def real_transform(self, output: np.ndarray, data: np.ndarray,
                       scratch: Optional[BluesteinScratch] = None) -> None:
        """Forward DFT of N real values; the full two-sided spectrum is written."""
        data = _check_buffers(output, data, 2 * self._size, self._size)
        self._transform(output, data, True, scratch)

    def inverse_transform(self, output: np.ndarray, data: np.ndarray,
                          scratch: Optional[BluesteinScratch] = None) -> None:
        """Inverse complex DFT, scaled by 1/N: ``conj(DFT(conj(x))) / N``."""
        data = _check_buffers(output, data, 2 * self._size, 2 * self._size)
        conj = data.copy()
        conj[1::2] *= -1.0
        self._transform(output, conj, False, scratch)

        n2 = 2 * self._size
        output[1:n2:2] *= -1.0
        output[:n2] /= self._size


class FFT:
    """
    FFT facade: radix-4 plan for powers of two, Bluestein plan otherwise.

    ``output_buffer_size`` is the number of floats callers should allocate
    for ``out``; only the first ``2 * fft_length`` values carry the spectrum.
    """

    def __init__(self, fft_length: int):
        fft_length = _check_size(fft_length)
        self.fft_length = fft_length
        self.is_power_of_two = is_power_of_two(fft_length)

        if self.is_power_of_two:
            self.fft: Union[FixedSizeFFT, ArbitrarySizeFFT] = FixedSizeFFT(fft_length)
        else:
            self.fft = ArbitrarySizeFFT(fft_length)
        self.output_buffer_size = self.fft.output_buffer_size

    def __repr__(self) -> str:
        return f"FFT(fft_length={self.fft_length}, plan={self.fft!r})"

    def create_output_array(self) -> np.ndarray:
        return np.zeros(self.output_buffer_size, dtype=np.float64)

    def create_scratch(self) -> Optional[BluesteinScratch]:
        """Scratch buffers for this plan, or None when the plan needs none."""
        if self.is_power_of_two:
            return None
        return self.fft.create_scratch()

    def transform(self, out: np.ndarray, data: np.ndarray,
                  scratch: Optional[BluesteinScratch] = None) -> None:
        if self.is_power_of_two:
            self.fft.transform(out, data)
        else:
            self.fft.transform(out, data, scratch=scratch)

    def real_transform(self, out: np.ndarray, data: np.ndarray,
                       scratch: Optional[BluesteinScratch] = None) -> None:
        if self.is_power_of_two:
            self.fft.real_transform(out, data)
        else:
            self.fft.real_transform(out, data, scratch=scratch)

    def inverse_transform(self, out: np.ndarray, data: np.ndarray,
                          scratch: Optional[BluesteinScratch] = None) -> None:
        if self.is_power_of_two:
            self.fft.inverse_transform(out, data)
        else:
            self.fft.inverse_transform(out, data, scratch=scratch)


class FFTPlanCache:
    """
    Explicit map from transform length to ``FFT`` plan.

    The cache is owned by the caller and is not locked: fill it before
    sharing it between threads. Plans themselves are immutable.
    """

    def __init__(self):
        self._plans: Dict[int, FFT] = {}

    def get(self, fft_length: int) -> FFT:
        fft_length = _check_size(fft_length)
        plan = self._plans.get(fft_length)
        if plan is None:
            plan = FFT(fft_length)
            self._plans[fft_length] = plan
            logger.debug("Built FFT plan %r", plan)
        return plan

    def __contains__(self, fft_length) -> bool:
        return fft_length in self._plans

    def __len__(self) -> int:
        return len(self._plans)

    def clear(self) -> None:
        self._plans.clear()


# ============== numpy-style helpers ==============

def _plan_for(n: int, plans: Optional[FFTPlanCache]) -> FFT:
    return plans.get(n) if plans is not None else FFT(n)


def _fit_length(x: np.ndarray, n: int) -> np.ndarray:
    # Pad or truncate to the requested length
    if x.shape[0] < n:
        return np.pad(x, (0, n - x.shape[0]), mode='constant')
    return x[:n]


def fft(x: np.ndarray, n: Optional[int] = None, plans: Optional[FFTPlanCache] = None) -> np.ndarray:
    """
    Compute the 1-D discrete Fourier Transform.

    Parameters
    ----------
    x : np.ndarray
        1-D real or complex input
    n : int, optional
        Length of the transform. If None, uses the length of x.
    plans : FFTPlanCache, optional
        Cache to take the plan from

    Returns
    -------
    np.ndarray
        Complex spectrum of length n

    Examples
    --------
    >>> x = np.array([1.0, 2.0, 1.0, -1.0, 1.5, 1.0, 0.5, -0.5])
    >>> X = fft(x)
    >>> # Should match scipy.fft.fft(x)
    """
    x = np.asarray(x)
    if x.ndim != 1:
        raise BufferShapeError(f"Input must be 1D, got shape {x.shape}")
    if n is None:
        n = x.shape[0]

    x = _fit_length(x.astype(np.complex128), n)
    plan = _plan_for(n, plans)
    out = plan.create_output_array()
    plan.transform(out, np.ascontiguousarray(x).view(np.float64))
    return out[:2 * n].view(np.complex128).copy()


def ifft(x: np.ndarray, n: Optional[int] = None, plans: Optional[FFTPlanCache] = None) -> np.ndarray:
    """Compute the 1-D inverse DFT, scaled by 1/n."""
    x = np.asarray(x)
    if x.ndim != 1:
        raise BufferShapeError(f"Input must be 1D, got shape {x.shape}")
    if n is None:
        n = x.shape[0]

    x = _fit_length(x.astype(np.complex128), n)
    plan = _plan_for(n, plans)
    out = plan.create_output_array()
    plan.inverse_transform(out, np.ascontiguousarray(x).view(np.float64))
    return out[:2 * n].view(np.complex128).copy()


def rfft(x: np.ndarray, n: Optional[int] = None, plans: Optional[FFTPlanCache] = None) -> np.ndarray:
    """
    Compute the 1-D FFT for real input.

    Returns only the non-negative frequency terms (``n // 2 + 1`` values).
    """
    x = np.asarray(x, dtype=np.float64)
    if x.ndim != 1:
        raise BufferShapeError(f"Input must be 1D, got shape {x.shape}")
    if n is None:
        n = x.shape[0]

    x = _fit_length(x, n)
    plan = _plan_for(n, plans)
    out = plan.create_output_array()
    plan.real_transform(out, x)
    return out[:2 * (n // 2 + 1)].view(np.complex128).copy()


def irfft(x: np.ndarray, n: Optional[int] = None, plans: Optional[FFTPlanCache] = None) -> np.ndarray:
    """
    Compute the inverse FFT of a one-sided spectrum.
    """
    x = np.asarray(x, dtype=np.complex128)
    if x.ndim != 1:
        raise BufferShapeError(f"Input must be 1D, got shape {x.shape}")
    if n is None:
        n = 2 * (x.shape[0] - 1)

    x = _fit_length(x, n // 2 + 1)

    # Reconstruct full spectrum using Hermitian symmetry
    if n % 2 == 0:
        neg_freqs = np.conj(x[-2:0:-1])
    else:
        neg_freqs = np.conj(x[-1:0:-1])

    full = np.concatenate([x, neg_freqs])
    return np.real(ifft(full, n=n, plans=plans))
