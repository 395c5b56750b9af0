"""
Курсорный байтовый буфер для буферного представления сессий.

ByteCursor хранит изменяемый bytearray фиксированной ёмкости и два
индекса: position (текущая позиция чтения/записи) и limit (граница
доступной области). Все переходы состояния явные: write(), read(),
advance(), flip(), rewind(), clear().

Инвариант: 0 <= position <= limit <= capacity.

Example:
    >>> out = ByteCursor.allocate(32)
    >>> out.write(b"abc")
    3
    >>> out.flip().read()
    b'abc'
"""

from __future__ import annotations

from typing import Optional, Union

from cipherkat.core.exceptions import BufferOverflowError

BytesLike = Union[bytes, bytearray, memoryview]


class ByteCursor:
    """
    Буфер с курсором position/limit поверх bytearray.

    Attributes:
        capacity: Полная ёмкость буфера
        position: Индекс следующего байта для чтения или записи
        limit: Первый недоступный индекс
    """

    __slots__ = ("_data", "_position", "_limit")

    def __init__(
        self,
        data: bytearray,
        *,
        position: int = 0,
        limit: Optional[int] = None,
    ) -> None:
        if not isinstance(data, bytearray):
            raise TypeError(f"data must be bytearray, got {type(data).__name__}")

        self._data = data
        self._limit = len(data) if limit is None else limit
        self._position = position
        self._check_bounds(self._position, self._limit)

    @classmethod
    def allocate(cls, capacity: int) -> ByteCursor:
        """Пустой буфер для записи: position=0, limit=capacity."""
        if capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {capacity}")
        return cls(bytearray(capacity))

    @classmethod
    def wrap(cls, data: BytesLike) -> ByteCursor:
        """Буфер для чтения с копией data: position=0, limit=len(data)."""
        return cls(bytearray(data))

    # --------------------------------------------------------------------------
    # Cursor state
    # --------------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return len(self._data)

    @property
    def position(self) -> int:
        return self._position

    @position.setter
    def position(self, value: int) -> None:
        self._check_bounds(value, self._limit)
        self._position = value

    @property
    def limit(self) -> int:
        return self._limit

    @limit.setter
    def limit(self, value: int) -> None:
        self._check_bounds(min(self._position, value), value)
        self._limit = value
        if self._position > value:
            self._position = value

    def remaining(self) -> int:
        return self._limit - self._position

    def has_remaining(self) -> bool:
        return self._position < self._limit

    def flip(self) -> ByteCursor:
        """Переключить с записи на чтение: limit=position, position=0."""
        self._limit = self._position
        self._position = 0
        return self

    def rewind(self) -> ByteCursor:
        """Вернуть position в 0, limit не меняется."""
        self._position = 0
        return self

    def clear(self) -> ByteCursor:
        """Сбросить курсор: position=0, limit=capacity. Данные не стираются."""
        self._position = 0
        self._limit = len(self._data)
        return self

    def advance(self, count: int) -> None:
        """Сдвинуть position на count байт в пределах limit."""
        if count < 0 or count > self.remaining():
            raise ValueError(
                f"Cannot advance by {count}: {self.remaining()} bytes remaining"
            )
        self._position += count

    # --------------------------------------------------------------------------
    # Data access
    # --------------------------------------------------------------------------

    def peek(self) -> bytes:
        """Копия байтов [position, limit) без сдвига курсора."""
        return bytes(self._data[self._position : self._limit])

    def read(self, count: Optional[int] = None) -> bytes:
        """
        Прочитать count байт (по умолчанию все оставшиеся) и сдвинуть курсор.

        Raises:
            ValueError: count больше оставшегося
        """
        if count is None:
            count = self.remaining()
        if count < 0 or count > self.remaining():
            raise ValueError(
                f"Cannot read {count} bytes: {self.remaining()} bytes remaining"
            )
        chunk = bytes(self._data[self._position : self._position + count])
        self._position += count
        return chunk

    def write(self, data: BytesLike) -> int:
        """
        Записать data с текущей позиции и сдвинуть курсор.

        Returns:
            Число записанных байт

        Raises:
            BufferOverflowError: data не помещается до limit (ничего не пишется)
        """
        size = len(data)
        if size > self.remaining():
            raise BufferOverflowError(size, self.remaining())
        self._data[self._position : self._position + size] = data
        self._position += size
        return size

    # --------------------------------------------------------------------------
    # Helpers
    # --------------------------------------------------------------------------

    def _check_bounds(self, position: int, limit: int) -> None:
        if not 0 <= position <= limit <= len(self._data):
            raise ValueError(
                f"Invalid cursor bounds: position={position}, limit={limit}, "
                f"capacity={len(self._data)}"
            )

    def __eq__(self, other: object) -> bool:
        # Сравниваются только оставшиеся байты, как у курсорных буферов
        if not isinstance(other, ByteCursor):
            return NotImplemented
        return self.peek() == other.peek()

    __hash__ = None  # type: ignore[assignment]

    def __len__(self) -> int:
        return self.remaining()

    def __repr__(self) -> str:
        return (
            f"ByteCursor(position={self._position}, limit={self._limit}, "
            f"capacity={len(self._data)})"
        )


__all__: list[str] = ["ByteCursor", "BytesLike"]
