# ehco

A small lossy audio codec for PCM WAV files, with a companion tool that
measures how much quality was lost.

Compression works chunk by chunk over the interleaved samples (4096 samples
per chunk):

1. each chunk is transformed with an orthonormal DCT-II;
2. the coefficients are quantized with a step of 256, multiplied by 1, 2, 4
   or 8 for successively higher frequency bands, and values below 0.7 of the
   band's multiplier are dropped to zero;
3. the quantized coefficients are run-length encoded (runs of at most 65535);
4. the run values are coded with an adaptive Huffman coder and packed into
   bits, most significant bit first.

Decompression reverses these steps and writes a 16-bit PCM WAV file with the
original sample rate, channel count and length.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Command line

Compress a WAV file. The result is always written to `compressed.bin` in the
current directory, and the original and compressed sizes are printed:

```
ehco input.wav
```

Decompress `compressed.bin` from the current directory into `output.wav`:

```
ehco -d
```

Run without arguments to see the usage message. Errors are reported on
standard error and the command exits with status 1.

Compare the original with the decompressed result:

```
ehco-metrics input.wav output.wav
```

This reports the sample rate, channel count and duration of the input, the
mean squared error, PSNR and SNR (on samples divided by 32767), the size
ratios of the input file to the output file and of the input file to
`compressed.bin` in the current directory, and the total harmonic distortion
(2nd to 5th harmonic of the strongest frequency bin) of the output.

## Library use

The building blocks are importable on their own:

```python
from ehco import dct, rle
from ehco.huffman import AdaptiveHuffman, pack_bits, unpack_bits

matrix = dct.precompute_dct_matrix(8)
coefficients = dct.apply([1, 2, 3, 4, 5, 6, 7, 8], 0, 8, matrix)
restored = dct.inverse(coefficients, matrix)   # int16 array

runs = rle.encode([0, 0, 0, 5, 5, 1])   # [(0, 3), (5, 2), (1, 1)]
values = rle.decode(runs)               # [0, 0, 0, 5, 5, 1]

encoder = AdaptiveHuffman()
bits = [bit for symbol in (3, 3, -2) for bit in encoder.encode(symbol)]
packed = pack_bits(bits)

decoder = AdaptiveHuffman()
stream = unpack_bits(packed, len(bits))
pos = 0
decoded = []
while pos < len(stream):
    symbol, pos = decoder.decode(stream, pos)
    decoded.append(symbol)              # [3, 3, -2]
```

`AdaptiveHuffman.decode` raises `InvalidCodeError` (a `ValueError`) when the
bits run out in the middle of a code.

`ehco.codec` works with whole files:

- `compress_audio(input_path, compressed_path="compressed.bin")` returns the
  original and compressed sizes in bytes;
- `decompress_audio(output_path="output.wav", compressed_path="compressed.bin")`
  writes the WAV file and returns its samples;
- `save_compressed` and `load_compressed` write and read the compressed file
  format;
- `quantize_chunk` and `dequantize_chunk` apply the band-dependent
  quantization.

`ehco.metrics` holds `calculate_mse`, `calculate_psnr`, `calculate_snr`,
`calculate_thd`, `normalize_audio`, `fft`, `calculate_compression_ratios`
(returning a `CompressionRatios` record) and `analyze_audio`, which prints the
report and also returns the figures as a dictionary.

WAV files are read with `ehco.audio_io.read_wav`, which returns interleaved
int16 samples and an `AudioMetadata` record (sample rate, channels, frames),
and written with `ehco.audio_io.write_wav`.

## Limitations

- Only uncompressed PCM WAV files can be read. 8-, 24- and 32-bit samples are
  converted to 16 bits; floating-point WAV and other audio formats are not
  supported, and output is always 16-bit PCM WAV.
- The command-line tools use the fixed file names `compressed.bin` and
  `output.wav` in the current directory; other paths are available only
  through the library functions.
- The metrics report always describes the input format as integer, since only
  integer PCM input can be read.