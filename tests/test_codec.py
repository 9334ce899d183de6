import struct

import numpy as np
import pytest

from ehco import codec
from ehco.audio_io import AudioMetadata, read_wav, write_wav


def _write(path, samples, samplerate=8000, channels=1):
    samples = np.asarray(samples, dtype=np.int16)
    meta = AudioMetadata(samplerate=samplerate, channels=channels,
                         frames=samples.size // channels)
    write_wav(path, samples, meta)
    return meta


def test_quantize_zero_is_zero():
    result = codec.quantize_chunk(np.zeros(codec.CHUNK_SIZE))
    assert not result.any()
    assert result.size == codec.CHUNK_SIZE


def test_quantize_low_band_unit_step():
    coeffs = np.zeros(codec.CHUNK_SIZE)
    coeffs[0] = codec.QUANTIZATION_FACTOR
    assert codec.quantize_chunk(coeffs)[0] == 1


def test_quantize_high_band_threshold_zeroes():
    coeffs = np.zeros(codec.CHUNK_SIZE)
    coeffs[-1] = codec.QUANTIZATION_FACTOR
    assert codec.quantize_chunk(coeffs)[-1] == 0


def test_quantize_dequantize_round_trip_on_steps():
    coeffs = np.zeros(codec.CHUNK_SIZE)
    coeffs[0] = -3 * codec.QUANTIZATION_FACTOR
    coeffs[-1] = 6 * 8 * codec.QUANTIZATION_FACTOR
    restored = codec.dequantize_chunk(codec.quantize_chunk(coeffs))
    np.testing.assert_allclose(restored, coeffs)


def test_save_load_round_trip(tmp_path):
    path = tmp_path / "data.bin"
    meta = AudioMetadata(samplerate=44100, channels=2, frames=10)
    rle_data = [[(1, 2), (0, 3)], [], [(-5, 65535)]]
    bits = [True, False, True, True, False, False, True, False, True]
    codec.save_compressed(rle_data, bits, meta, path)
    loaded_rle, loaded_bits, loaded_meta = codec.load_compressed(path)
    assert loaded_rle == rle_data
    assert loaded_bits == bits
    assert loaded_meta == meta


def test_save_layout(tmp_path):
    path = tmp_path / "data.bin"
    meta = AudioMetadata(samplerate=8000, channels=1, frames=5)
    codec.save_compressed([[(1, 2), (0, 3)]], [True, False, True], meta, path)
    data = path.read_bytes()
    assert data[:16] == struct.pack("<iiq", 8000, 1, 5)
    assert len(data) == 41
    assert data[-1] == 0xA0


def test_load_truncated_raises(tmp_path):
    path = tmp_path / "data.bin"
    meta = AudioMetadata(samplerate=8000, channels=1, frames=5)
    codec.save_compressed([[(1, 2)]], [True], meta, path)
    path.write_bytes(path.read_bytes()[:-3])
    with pytest.raises(ValueError):
        codec.load_compressed(path)


def test_zero_signal_round_trip(tmp_path):
    wav = tmp_path / "in.wav"
    meta = _write(wav, np.zeros(codec.CHUNK_SIZE + 904))
    comp = tmp_path / "c.bin"
    out = tmp_path / "out.wav"
    original_size, compressed_size = codec.compress_audio(wav, comp)
    assert original_size == (codec.CHUNK_SIZE + 904) * 2
    assert compressed_size == comp.stat().st_size
    result = codec.decompress_audio(out, comp)
    samples, out_meta = read_wav(out)
    assert not samples.any()
    assert samples.size == codec.CHUNK_SIZE + 904
    assert out_meta == meta
    np.testing.assert_array_equal(result, samples)


def test_sine_round_trip_is_close(tmp_path):
    n = codec.CHUNK_SIZE + 1000
    t = np.arange(n)
    signal = (8000 * np.sin(2 * np.pi * 5 * t / codec.CHUNK_SIZE)).astype(np.int16)
    wav = tmp_path / "in.wav"
    _write(wav, signal)
    comp = tmp_path / "c.bin"
    out = tmp_path / "out.wav"
    codec.compress_audio(wav, comp)
    codec.decompress_audio(out, comp)
    restored, meta = read_wav(out)
    assert restored.size == n
    assert meta.frames == n
    assert np.corrcoef(signal.astype(float), restored.astype(float))[0, 1] > 0.9


def test_stereo_metadata_preserved(tmp_path):
    wav = tmp_path / "in.wav"
    meta = _write(wav, np.zeros(200), samplerate=22050, channels=2)
    comp = tmp_path / "c.bin"
    out = tmp_path / "out.wav"
    codec.compress_audio(wav, comp)
    codec.decompress_audio(out, comp)
    _, out_meta = read_wav(out)
    assert out_meta == meta


def test_main_without_arguments_fails():
    assert codec.main([]) == 1


def test_main_decompress_missing_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert codec.main(["-d"]) == 1


def test_main_compress_then_decompress(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(tmp_path / "in.wav", np.zeros(100))
    assert codec.main(["in.wav"]) == 0
    assert (tmp_path / codec.DEFAULT_COMPRESSED).exists()
    assert codec.main(["-d"]) == 0
    samples, _ = read_wav(tmp_path / codec.DEFAULT_OUTPUT)
    assert samples.size == 100