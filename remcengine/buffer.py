"""Vertex layouts and CPU-side vertex and index buffers."""

from __future__ import annotations

import dataclasses
import enum
from array import array
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional


class ShaderDataType(enum.Enum):
    NONE = 0
    FLOAT = 1
    FLOAT2 = 2
    FLOAT3 = 3
    FLOAT4 = 4
    MAT3 = 5
    MAT4 = 6
    INT = 7
    INT2 = 8
    INT3 = 9
    INT4 = 10
    BOOL = 11


_SIZES = {
    ShaderDataType.FLOAT: 4,
    ShaderDataType.FLOAT2: 4 * 2,
    ShaderDataType.FLOAT3: 4 * 3,
    ShaderDataType.FLOAT4: 4 * 4,
    ShaderDataType.MAT3: 4 * 3 * 3,
    ShaderDataType.MAT4: 4 * 4 * 4,
    ShaderDataType.INT: 4,
    ShaderDataType.INT2: 4 * 2,
    ShaderDataType.INT3: 4 * 3,
    ShaderDataType.INT4: 4 * 4,
    ShaderDataType.BOOL: 1,
}

_COMPONENTS = {
    ShaderDataType.FLOAT: 1,
    ShaderDataType.FLOAT2: 2,
    ShaderDataType.FLOAT3: 3,
    ShaderDataType.FLOAT4: 4,
    ShaderDataType.MAT3: 3 * 3,
    ShaderDataType.MAT4: 4 * 4,
    ShaderDataType.INT: 1,
    ShaderDataType.INT2: 2,
    ShaderDataType.INT3: 3,
    ShaderDataType.INT4: 4,
    ShaderDataType.BOOL: 1,
}


def shader_data_type_size(data_type: ShaderDataType) -> int:
    """Size in bytes of one value of ``data_type``."""
    try:
        return _SIZES[data_type]
    except KeyError:
        raise ValueError("Unknown ShaderDataType!") from None


@dataclass
class BufferElement:
    """One named attribute in a vertex layout."""

    data_type: ShaderDataType
    name: str
    normalized: bool = False
    size: int = field(init=False)
    offset: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self.size = shader_data_type_size(self.data_type)

    def component_count(self) -> int:
        try:
            return _COMPONENTS[self.data_type]
        except KeyError:
            raise ValueError("Unknown ShaderDataType!") from None


class BufferLayout:
    """Ordered attributes of a vertex, with offsets and stride worked out."""

    def __init__(self, elements: Iterable[BufferElement] = ()) -> None:
        self._elements = [dataclasses.replace(e) for e in elements]
        offset = 0
        for element in self._elements:
            element.offset = offset
            offset += element.size
        self.stride = offset

    @property
    def elements(self) -> tuple[BufferElement, ...]:
        return tuple(self._elements)

    def __iter__(self) -> Iterator[BufferElement]:
        return iter(self._elements)

    def __len__(self) -> int:
        return len(self._elements)


class VertexBuffer:
    """Fixed-capacity byte store for vertex data with an attached layout."""

    def __init__(self, size: Optional[int] = None, vertices: Optional[Iterable[float]] = None) -> None:
        initial = array("f", vertices).tobytes() if vertices is not None else b""
        capacity = len(initial) if size is None else size
        if capacity < len(initial):
            raise ValueError("vertex data larger than buffer size")
        self._storage = bytearray(capacity)
        self._storage[: len(initial)] = initial
        self.layout = BufferLayout()
        self.bound = False

    @property
    def size(self) -> int:
        return len(self._storage)

    @property
    def data(self) -> bytes:
        return bytes(self._storage)

    def bind(self) -> None:
        self.bound = True

    def unbind(self) -> None:
        self.bound = False

    def set_data(self, data) -> None:
        """Overwrite the start of the buffer with the given bytes-like data."""
        raw = memoryview(data).tobytes()
        if len(raw) > len(self._storage):
            raise ValueError("data larger than buffer size")
        self._storage[: len(raw)] = raw


class IndexBuffer:
    """32-bit index store."""

    def __init__(self, indices: Iterable[int]) -> None:
        values = tuple(int(i) for i in indices)
        if any(not 0 <= i < 2**32 for i in values):
            raise ValueError("indices must fit in 32 unsigned bits")
        self.indices = values
        self.bound = False

    @property
    def count(self) -> int:
        return len(self.indices)

    def bind(self) -> None:
        self.bound = True

    def unbind(self) -> None:
        self.bound = False