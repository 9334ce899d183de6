"""Chunked DCT, run-length and adaptive Huffman compression of WAV audio."""

from __future__ import annotations

import os
import struct
import sys
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from itertools import accumulate
from os import PathLike

import numpy as np

from . import dct, rle
from .audio_io import AudioMetadata, read_wav, write_wav
from .huffman import AdaptiveHuffman, InvalidCodeError, pack_bits, unpack_bits

CHUNK_SIZE = 4096
QUANTIZATION_FACTOR = 256
QUANTIZATION_THRESHOLD = 0.7
DEFAULT_COMPRESSED = "compressed.bin"
DEFAULT_OUTPUT = "output.wav"

_METADATA = struct.Struct("<iiq")
_COUNT = struct.Struct("<I")
_PAIR = struct.Struct("<hH")

RunPairs = list[tuple[int, int]]


def _band_scales(length: int) -> np.ndarray:
    idx = np.arange(length)
    return np.select(
        [idx < CHUNK_SIZE // 8, idx < CHUNK_SIZE // 4, idx < CHUNK_SIZE // 2],
        [1.0, 2.0, 4.0],
        8.0,
    )


def quantize_chunk(coefficients: Sequence[float] | np.ndarray) -> np.ndarray:
    """Quantize DCT coefficients with coarser steps for higher frequency bands."""
    coeffs = np.asarray(coefficients, dtype=np.float64)
    scales = _band_scales(coeffs.size)
    values = coeffs / (QUANTIZATION_FACTOR * scales)
    values[np.abs(values) < QUANTIZATION_THRESHOLD * scales] = 0.0
    rounded = np.sign(values) * np.floor(np.abs(values) + 0.5)
    return np.clip(rounded, -32768, 32767).astype(np.int16)


def dequantize_chunk(quantized: Sequence[int] | np.ndarray) -> np.ndarray:
    """Scale quantized values back to DCT coefficient magnitudes."""
    values = np.asarray(quantized, dtype=np.float64)
    return values * QUANTIZATION_FACTOR * _band_scales(values.size)


def save_compressed(
    rle_data: Iterable[Iterable[tuple[int, int]]],
    bits: Iterable[bool],
    metadata: AudioMetadata,
    path: str | PathLike[str],
) -> None:
    """Write metadata, run-length chunks and the packed Huffman stream."""
    chunks = [list(chunk) for chunk in rle_data]
    bit_list = list(bits)
    packed = pack_bits(bit_list)
    with open(path, "wb") as out:
        out.write(_METADATA.pack(metadata.samplerate, metadata.channels, metadata.frames))
        out.write(_COUNT.pack(len(chunks)))
        for chunk in chunks:
            out.write(_COUNT.pack(len(chunk)))
            out.write(b"".join(_PAIR.pack(value, count) for value, count in chunk))
        out.write(_COUNT.pack(len(bit_list)))
        out.write(_COUNT.pack(len(packed)))
        out.write(packed)


class _Cursor:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._offset = 0

    def take(self, size: int) -> bytes:
        end = self._offset + size
        if end > len(self._data):
            raise ValueError("Truncated compressed file")
        chunk = self._data[self._offset:end]
        self._offset = end
        return chunk

    def unpack(self, layout: struct.Struct) -> tuple:
        return layout.unpack(self.take(layout.size))


def load_compressed(
    path: str | PathLike[str],
) -> tuple[list[RunPairs], list[bool], AudioMetadata]:
    """Read a file written by :func:`save_compressed`."""
    with open(path, "rb") as source:
        cursor = _Cursor(source.read())
    samplerate, channels, frames = cursor.unpack(_METADATA)
    (num_chunks,) = cursor.unpack(_COUNT)
    rle_data: list[RunPairs] = []
    for _ in range(num_chunks):
        (num_pairs,) = cursor.unpack(_COUNT)
        raw = cursor.take(num_pairs * _PAIR.size)
        rle_data.append([(value, count) for value, count in _PAIR.iter_unpack(raw)])
    (num_bits,) = cursor.unpack(_COUNT)
    (num_bytes,) = cursor.unpack(_COUNT)
    packed = cursor.take(num_bytes)
    metadata = AudioMetadata(samplerate=samplerate, channels=channels, frames=frames)
    return rle_data, unpack_bits(packed, num_bits), metadata


def _workers() -> int:
    return os.cpu_count() or 4


def compress_audio(
    input_path: str | PathLike[str],
    compressed_path: str | PathLike[str] = DEFAULT_COMPRESSED,
) -> tuple[int, int]:
    """Compress a WAV file; return the original and compressed sizes in bytes."""
    samples, metadata = read_wav(input_path)
    original_size = samples.size * 2
    print(f"Original: {original_size / 1024.0:g} KB")

    matrix = dct.precompute_dct_matrix(CHUNK_SIZE)

    def encode_chunk(start: int) -> RunPairs:
        length = min(CHUNK_SIZE, samples.size - start)
        coefficients = dct.apply(samples, start, length, matrix)
        return rle.encode(quantize_chunk(coefficients).tolist())

    with ThreadPoolExecutor(max_workers=_workers()) as pool:
        rle_data = list(pool.map(encode_chunk, range(0, samples.size, CHUNK_SIZE)))

    huffman = AdaptiveHuffman()
    bits = [
        bit
        for chunk in rle_data
        for value, _ in chunk
        for bit in huffman.encode(value)
    ]

    save_compressed(rle_data, bits, metadata, compressed_path)
    compressed_size = os.path.getsize(compressed_path)
    percent = 100.0 * compressed_size / original_size if original_size else float("nan")
    print(f"Compressed: {compressed_size / 1024.0:g} KB ({percent:g}%)")
    return original_size, compressed_size


def _decode_symbols(bits: Sequence[bool]) -> list[int]:
    huffman = AdaptiveHuffman()
    symbols: list[int] = []
    pos = 0
    while pos < len(bits):
        try:
            symbol, pos = huffman.decode(bits, pos)
        except InvalidCodeError:
            break
        symbols.append(symbol)
    return symbols


def decompress_audio(
    output_path: str | PathLike[str] = DEFAULT_OUTPUT,
    compressed_path: str | PathLike[str] = DEFAULT_COMPRESSED,
) -> np.ndarray:
    """Restore a WAV file from compressed data; return the written samples."""
    rle_data, bits, metadata = load_compressed(compressed_path)
    symbols = np.asarray(_decode_symbols(bits), dtype=np.int16)
    starts = list(accumulate((len(chunk) for chunk in rle_data), initial=0))
    matrix = dct.precompute_dct_matrix(CHUNK_SIZE)

    def decode_chunk(index: int) -> np.ndarray:
        chunk = rle_data[index]
        start = starts[index]
        if chunk and start + len(chunk) > symbols.size:
            raise ValueError("Symbol mismatch")
        counts = [count for _, count in chunk]
        quantized = np.repeat(symbols[start:start + len(chunk)], counts)
        return dct.inverse(dequantize_chunk(quantized), matrix)

    with ThreadPoolExecutor(max_workers=_workers()) as pool:
        chunks = list(pool.map(decode_chunk, range(len(rle_data))))

    decoded = np.concatenate(chunks) if chunks else np.zeros(0, dtype=np.int16)
    target = max(metadata.frames * metadata.channels, 0)
    output = np.zeros(target, dtype=np.int16)
    kept = min(target, decoded.size)
    output[:kept] = decoded[:kept]

    if metadata.channels <= 0:
        raise ValueError("Error creating output")
    write_wav(
        output_path,
        output,
        AudioMetadata(
            samplerate=metadata.samplerate,
            channels=metadata.channels,
            frames=output.size // metadata.channels,
        ),
    )
    print(f"Decompressed to {output_path}")
    return output


def main(argv: Sequence[str] | None = None) -> int:
    """Compress the WAV file named on the command line, or decompress with -d."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        if args and args[0] == "-d":
            decompress_audio(DEFAULT_OUTPUT)
        elif args:
            compress_audio(args[0])
        else:
            print(
                "Usage: ehco <input.wav> (compress)\n"
                "       ehco -d (decompress)",
                file=sys.stderr,
            )
            return 1
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0