"""Lossy WAV audio compression with DCT, run-length and adaptive Huffman coding, and quality metrics."""

__version__ = "0.1.0"
__all__ = ["__version__"]