"""Adaptive Huffman coding of 16-bit symbols and bit packing helpers."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

NYT_SYMBOL = 32767


class InvalidCodeError(ValueError):
    """Raised when a bit stream ends in the middle of a code."""


@dataclass(eq=False)
class _Node:
    symbol: int
    weight: int
    order: int
    parent: _Node | None = field(default=None, repr=False)
    left: _Node | None = field(default=None, repr=False)
    right: _Node | None = field(default=None, repr=False)

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


def _to_int16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value >= 0x8000 else value


class AdaptiveHuffman:
    """Adaptive Huffman coder; encoder and decoder keep identical trees."""

    def __init__(self) -> None:
        self._root = _Node(NYT_SYMBOL, 0, 512)
        self._next_order = 511
        self._symbols: dict[int, _Node] = {NYT_SYMBOL: self._root}

    def _new_node(self, symbol: int) -> _Node:
        node = _Node(symbol, 0, self._next_order)
        self._next_order -= 1
        return node

    @staticmethod
    def _code_of(node: _Node) -> list[bool]:
        code: list[bool] = []
        while node.parent is not None:
            code.append(node is node.parent.right)
            node = node.parent
        code.reverse()
        return code

    @staticmethod
    def _swap(a: _Node, b: _Node) -> None:
        if a.parent is None or b.parent is None:
            return
        if a.parent.left is a:
            a.parent.left = b
        else:
            a.parent.right = b
        if b.parent.left is b:
            b.parent.left = a
        else:
            b.parent.right = a
        a.parent, b.parent = b.parent, a.parent
        a.order, b.order = b.order, a.order

    def _find_swap_candidate(self, node: _Node) -> _Node | None:
        candidate: _Node | None = None
        queue = deque([self._root])
        while queue:
            current = queue.popleft()
            if (
                current is not node
                and current.weight == node.weight
                and current.order > node.order
                and (candidate is None or current.order > candidate.order)
            ):
                candidate = current
            if current.left is not None:
                queue.append(current.left)
            if current.right is not None:
                queue.append(current.right)
        return candidate

    def _update(self, symbol: int) -> None:
        node = self._symbols.get(symbol)
        if node is None:
            nyt = self._symbols[NYT_SYMBOL]
            internal = self._new_node(0)
            internal.parent = nyt.parent
            if nyt.parent is None:
                self._root = internal
            elif nyt.parent.left is nyt:
                nyt.parent.left = internal
            else:
                nyt.parent.right = internal

            new_nyt = self._new_node(NYT_SYMBOL)
            new_nyt.parent = internal
            internal.left = new_nyt
            self._symbols[NYT_SYMBOL] = new_nyt

            node = self._new_node(symbol)
            node.parent = internal
            internal.right = node
            self._symbols[symbol] = node

        current: _Node | None = node
        while current is not None:
            other = self._find_swap_candidate(current)
            if other is not None and other is not current.parent:
                self._swap(current, other)
            current.weight += 1
            current = current.parent

    def encode(self, symbol: int) -> list[bool]:
        """Return the bits for ``symbol`` and update the model."""
        symbol = _to_int16(symbol)
        node = self._symbols.get(symbol)
        if node is not None:
            code = self._code_of(node)
        else:
            code = self._code_of(self._symbols[NYT_SYMBOL])
            magnitude = abs(symbol) & 0xFFFF
            width = magnitude.bit_length()
            code.extend(bool((width >> i) & 1) for i in range(3, -1, -1))
            code.append(symbol < 0)
            code.extend(bool((magnitude >> i) & 1) for i in range(width - 1, -1, -1))
        self._update(symbol)
        return code

    def decode(self, bits: Sequence[bool], pos: int) -> tuple[int, int]:
        """Decode one symbol from ``bits`` at ``pos``; return it and the next position."""

        def take() -> bool:
            nonlocal pos
            if pos >= len(bits):
                raise InvalidCodeError("Invalid code")
            bit = bool(bits[pos])
            pos += 1
            return bit

        node = self._root
        while not node.is_leaf:
            child = node.right if take() else node.left
            if child is None:
                raise InvalidCodeError("Invalid code")
            node = child

        if node.symbol == NYT_SYMBOL:
            width = 0
            for _ in range(4):
                width = (width << 1) | take()
            negative = take()
            magnitude = 0
            for _ in range(width):
                magnitude = ((magnitude << 1) | take()) & 0xFFFF
            symbol = _to_int16(-magnitude if negative else magnitude)
        else:
            symbol = node.symbol

        self._update(symbol)
        return symbol, pos


def pack_bits(bits: Iterable[bool]) -> bytes:
    """Pack bits most significant first, zero-padding the last byte."""
    packed = bytearray()
    byte = 0
    filled = 0
    for bit in bits:
        byte = (byte << 1) | (1 if bit else 0)
        filled += 1
        if filled == 8:
            packed.append(byte)
            byte = 0
            filled = 0
    if filled:
        packed.append(byte << (8 - filled))
    return bytes(packed)


def unpack_bits(packed: bytes | Iterable[int], total_bits: int) -> list[bool]:
    """Unpack at most ``total_bits`` bits, most significant first."""
    bits: list[bool] = []
    for byte in packed:
        for shift in range(7, -1, -1):
            if len(bits) >= total_bits:
                return bits
            bits.append(bool((byte >> shift) & 1))
    return bits