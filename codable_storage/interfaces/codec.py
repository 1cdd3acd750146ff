"""
Codec abstract base class for value serialization.
"""

from abc import ABC, abstractmethod
from typing import Any


class Codec(ABC):
    """
    Converts typed values to bytes and back.

    Implementations:
    - JSONCodec: JSON documents, dataclasses encoded as objects
    """

    @abstractmethod
    def encode(self, value: Any) -> bytes:
        """
        Serialize a value.

        Args:
            value: The value to serialize.

        Returns:
            The encoded bytes.

        Raises:
            EncodeError: If the value cannot be serialized.
        """
        pass

    @abstractmethod
    def decode(self, data: bytes, value_type: Any) -> Any:
        """
        Deserialize bytes into a value of the requested type.

        Args:
            data: The encoded bytes.
            value_type: The type the result must conform to.

        Returns:
            The decoded value.

        Raises:
            DecodeError: If the bytes are malformed or incompatible with value_type.
        """
        pass
