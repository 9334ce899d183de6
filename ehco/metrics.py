"""Quality metrics comparing an original and a reconstructed recording."""

from __future__ import annotations

import math
import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from os import PathLike

import numpy as np

from .audio_io import read_wav

DEFAULT_COMPRESSED = "compressed.bin"
_MAX_HARMONIC = 5


@dataclass(frozen=True)
class CompressionRatios:
    """Size ratios of the input to the output WAV and to the compressed file."""

    wav_ratio: float = 0.0
    actual_ratio: float = 0.0


def _pair(original, compressed) -> tuple[np.ndarray, np.ndarray]:
    a = np.asarray(original, dtype=np.float64)
    b = np.asarray(compressed, dtype=np.float64)
    if b.size < a.size:
        raise ValueError("compressed signal is shorter than the original")
    return a, b[:a.size]


def calculate_mse(original, compressed) -> float:
    """Mean squared error over the length of ``original``."""
    a, b = _pair(original, compressed)
    if a.size == 0:
        return math.nan
    return float(np.sum((a - b) ** 2) / a.size)


def calculate_psnr(mse: float) -> float:
    """Peak signal-to-noise ratio in dB for signals normalised to [-1, 1]."""
    if mse == 0:
        return math.inf
    return 10.0 * math.log10(1.0 / mse)


def calculate_snr(original, compressed) -> float:
    """Signal-to-noise ratio in dB."""
    a, b = _pair(original, compressed)
    signal_energy = float(np.sum(a * a))
    noise_energy = float(np.sum((a - b) ** 2))
    if noise_energy == 0:
        return math.inf
    if signal_energy == 0:
        return -math.inf
    return 10.0 * math.log10(signal_energy / noise_energy)


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return math.nan if numerator == 0 else math.inf
    return numerator / denominator


def calculate_compression_ratios(
    input_file: str | PathLike[str],
    output_file: str | PathLike[str],
    compressed_file: str | PathLike[str] = DEFAULT_COMPRESSED,
) -> CompressionRatios:
    """Compare the input file size with the output and compressed file sizes."""
    try:
        input_size = os.path.getsize(input_file)
    except OSError:
        print("Warning: Cannot open input file for size calculation")
        return CompressionRatios()

    try:
        wav_ratio = _ratio(input_size, os.path.getsize(output_file))
    except OSError:
        wav_ratio = 0.0

    try:
        actual_ratio = _ratio(input_size, os.path.getsize(compressed_file))
    except OSError:
        print("Warning: compressed.bin not found")
        actual_ratio = 0.0

    return CompressionRatios(wav_ratio=wav_ratio, actual_ratio=actual_ratio)


def normalize_audio(audio) -> np.ndarray:
    """Scale 16-bit samples to roughly [-1, 1]."""
    return np.asarray(audio, dtype=np.float64) / 32767.0


def fft(values) -> np.ndarray:
    """Discrete Fourier transform of a signal whose length is a power of two."""
    data = np.asarray(values, dtype=np.float64)
    n = data.size
    if n == 0:
        return np.zeros(0, dtype=np.complex128)
    if n & (n - 1):
        raise ValueError("FFT input size must be a power of 2")
    return np.fft.fft(data)


def calculate_thd(signal, sample_rate: float) -> float:
    """Total harmonic distortion from the 2nd to 5th harmonic of the strongest bin."""
    data = np.asarray(signal, dtype=np.float64)
    n = 1
    while n < data.size:
        n <<= 1
    if n < 4:
        raise ValueError("signal is too short for harmonic analysis")
    padded = np.zeros(n)
    padded[:data.size] = data
    half = n // 2
    magnitudes = np.abs(fft(padded)[:half]) / half

    fundamental = int(np.argmax(magnitudes[1:])) + 1
    v1 = magnitudes[fundamental] / math.sqrt(2.0)
    harmonics = sum(
        (magnitudes[fundamental * h] / math.sqrt(2.0)) ** 2
        for h in range(2, _MAX_HARMONIC + 1)
        if fundamental * h < half
    )
    return math.sqrt(harmonics) / v1 if v1 > 0 else 0.0


def _open(path: str | PathLike[str], role: str):
    try:
        return read_wav(path)
    except (OSError, ValueError) as exc:
        raise ValueError(f"Cannot open {role} file: {exc}") from exc


def analyze_audio(
    input_file: str | PathLike[str], output_file: str | PathLike[str]
) -> dict[str, float]:
    """Print and return quality metrics of ``output_file`` against ``input_file``."""
    print("Opening files...")
    input_audio, input_info = _open(input_file, "input")
    print("Input audio format: Integer (not floating-point)")
    output_audio, output_info = _open(output_file, "output")

    print("Reading audio data...")
    print("Processing...")
    normalized_input = normalize_audio(input_audio)
    normalized_output = normalize_audio(output_audio)

    mse = calculate_mse(normalized_input, normalized_output)
    psnr = calculate_psnr(mse)
    snr = calculate_snr(normalized_input, normalized_output)
    ratios = calculate_compression_ratios(input_file, output_file)
    thd = calculate_thd(normalized_output, output_info.samplerate)
    duration = (
        input_info.frames / input_info.samplerate if input_info.samplerate else math.nan
    )

    print("\n=== Audio Quality Analysis Results ===")
    print(f"Sample Rate: {input_info.samplerate} Hz")
    print(f"Channels: {input_info.channels}")
    print(f"Duration: {duration:g} seconds")
    print("\nQuality Metrics:")
    print(f"MSE: {mse:g}")
    print(f"PSNR: {psnr:g} dB")
    print(f"SNR: {snr:g} dB")
    print(f"WAV Compression Ratio (input.wav:output.wav): {ratios.wav_ratio:g}:1")
    print(
        "Actual Compression Ratio (input.wav:compressed.bin): "
        f"{ratios.actual_ratio:g}:1"
    )
    print(f"THD: {thd * 100:g}%")

    return {
        "mse": mse,
        "psnr": psnr,
        "snr": snr,
        "wav_ratio": ratios.wav_ratio,
        "actual_ratio": ratios.actual_ratio,
        "thd": thd,
        "duration": duration,
    }


def main(argv: Sequence[str] | None = None) -> int:
    """Compare the two WAV files named on the command line."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2:
        print("Usage: ehco-metrics <input.wav> <output.wav>")
        return 1
    print("Starting audio analysis...")
    print(f"Input file: {args[0]}")
    print(f"Output file: {args[1]}\n")
    try:
        analyze_audio(args[0], args[1])
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0