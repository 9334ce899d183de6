"""Reading and writing PCM WAV files as interleaved 16-bit samples."""

from __future__ import annotations

import wave
from collections.abc import Sequence
from dataclasses import dataclass
from os import PathLike

import numpy as np


@dataclass(frozen=True)
class AudioMetadata:
    """Sample rate, channel count and frame count of a sound file."""

    samplerate: int
    channels: int
    frames: int


def _to_int16(raw: bytes, width: int) -> np.ndarray:
    if width == 1:
        data = np.frombuffer(raw, dtype=np.uint8).astype(np.int16)
        return ((data - 128) << 8).astype(np.int16)
    if width == 2:
        return np.frombuffer(raw, dtype="<i2").astype(np.int16)
    if width == 3:
        triples = np.frombuffer(raw, dtype=np.uint8).reshape(-1, 3).astype(np.int32)
        values = triples[:, 0] | (triples[:, 1] << 8) | (triples[:, 2] << 16)
        values = np.where(values >= 1 << 23, values - (1 << 24), values)
        return (values >> 8).astype(np.int16)
    if width == 4:
        return (np.frombuffer(raw, dtype="<i4") >> 16).astype(np.int16)
    raise ValueError(f"unsupported sample width: {width} bytes")


def read_wav(path: str | PathLike[str]) -> tuple[np.ndarray, AudioMetadata]:
    """Read a PCM WAV file as interleaved int16 samples and its metadata."""
    try:
        with wave.open(str(path), "rb") as reader:
            channels = reader.getnchannels()
            samplerate = reader.getframerate()
            width = reader.getsampwidth()
            frames = reader.getnframes()
            raw = reader.readframes(frames)
    except (wave.Error, EOFError) as exc:
        raise ValueError(f"Error opening file: {exc}") from exc
    samples = _to_int16(raw, width)
    metadata = AudioMetadata(samplerate=samplerate, channels=channels, frames=frames)
    return samples, metadata


def write_wav(
    path: str | PathLike[str],
    samples: Sequence[int] | np.ndarray,
    metadata: AudioMetadata,
) -> None:
    """Write interleaved samples as a 16-bit PCM WAV file."""
    if metadata.channels <= 0:
        raise ValueError("channel count must be positive")
    data = np.asarray(samples, dtype="<i2")
    if data.size % metadata.channels:
        raise ValueError("sample count is not a multiple of the channel count")
    with wave.open(str(path), "wb") as writer:
        writer.setnchannels(metadata.channels)
        writer.setsampwidth(2)
        writer.setframerate(metadata.samplerate)
        writer.writeframes(data.tobytes())