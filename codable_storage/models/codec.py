"""
JSONCodec - default value serialization.
"""

import dataclasses
import json
import types
import typing
from typing import Any

from codable_storage.interfaces.codec import Codec
from codable_storage.models.exceptions import DecodeError, EncodeError

# JSON shapes accepted for each plain target type
_JSON_SHAPES: dict[type, tuple[type, ...]] = {
    dict: (dict,),
    list: (list,),
    str: (str,),
    int: (int,),
    float: (int, float),
    bool: (bool,),
    tuple: (list,),
}


def _encode_default(obj: Any) -> Any:
    """json.dumps hook: encode dataclass instances as objects."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class JSONCodec(Codec):
    """
    Encodes values as compact UTF-8 JSON.

    Decoding checks the document against the requested type:
    - None, Any and object accept any document
    - dict, list, tuple, str, int, float, bool require a matching JSON value
      (float accepts integers, int rejects booleans, tuple is a JSON array)
    - element types of list[X], tuple[X, ...], tuple[X, Y] and dict[str, X]
      are checked and rebuilt item by item
    - Optional[X] and X | Y accept null when None is a member, else the first
      member that fits
    - dataclass types are rebuilt from a JSON object, each field coerced to
      its annotated type, so nested dataclasses come back as dataclasses
    """

    def encode(self, value: Any) -> bytes:
        try:
            text = json.dumps(
                value,
                default=_encode_default,
                allow_nan=False,
                ensure_ascii=False,
                separators=(",", ":"),
            )
        except (TypeError, ValueError, RecursionError) as e:
            raise EncodeError(f"Cannot encode value of type {type(value).__name__}: {e}") from e
        return text.encode("utf-8")

    def decode(self, data: bytes, value_type: Any) -> Any:
        try:
            obj = json.loads(data)
        except ValueError as e:
            raise DecodeError(f"Stored data is not valid JSON: {e}") from e
        return self._coerce(obj, value_type)

    def _coerce(self, obj: Any, value_type: Any) -> Any:
        """Check a decoded document against value_type, rebuilding nested types."""
        if value_type is None or value_type is Any or value_type is object:
            return obj

        if value_type is type(None):
            if obj is not None:
                raise DecodeError(f"Expected null, got {type(obj).__name__}")
            return None

        if dataclasses.is_dataclass(value_type) and isinstance(value_type, type):
            return self._coerce_dataclass(obj, value_type)

        origin = typing.get_origin(value_type)
        args = typing.get_args(value_type)

        if origin is typing.Union or origin is types.UnionType:
            return self._coerce_union(obj, value_type, args)

        base = origin or value_type
        shapes = _JSON_SHAPES.get(base)
        if shapes is None:
            raise DecodeError(f"Unsupported value type: {value_type!r}")

        # bool is an int subclass in Python but a distinct JSON type
        if isinstance(obj, bool) and base is not bool:
            raise DecodeError(f"Expected {base.__name__}, got bool")
        if not isinstance(obj, shapes):
            raise DecodeError(f"Expected {base.__name__}, got {type(obj).__name__}")

        if base is float:
            return float(obj)
        if base is list:
            if args:
                return [self._coerce(item, args[0]) for item in obj]
            return obj
        if base is tuple:
            return self._coerce_tuple(obj, args)
        if base is dict:
            if len(args) == 2:
                return {k: self._coerce(v, args[1]) for k, v in obj.items()}
            return obj
        return obj

    def _coerce_dataclass(self, obj: Any, value_type: type) -> Any:
        if not isinstance(obj, dict):
            raise DecodeError(
                f"Expected a JSON object for {value_type.__name__}, got {type(obj).__name__}"
            )
        try:
            hints = typing.get_type_hints(value_type)
        except (NameError, TypeError) as e:
            raise DecodeError(f"Cannot resolve fields of {value_type.__name__}: {e}") from e

        init_fields = {f.name for f in dataclasses.fields(value_type) if f.init}
        kwargs = {}
        for name, item in obj.items():
            if name in init_fields:
                item = self._coerce(item, hints.get(name, Any))
            kwargs[name] = item

        try:
            return value_type(**kwargs)
        except TypeError as e:
            raise DecodeError(f"Cannot build {value_type.__name__}: {e}") from e

    def _coerce_union(self, obj: Any, value_type: Any, args: tuple) -> Any:
        if obj is None and type(None) in args:
            return None
        for arg in args:
            if arg is type(None):
                continue
            try:
                return self._coerce(obj, arg)
            except DecodeError:
                continue
        raise DecodeError(f"Value of type {type(obj).__name__} matches no member of {value_type!r}")

    def _coerce_tuple(self, obj: list, args: tuple) -> tuple:
        if not args:
            return tuple(obj)
        if len(args) == 2 and args[1] is Ellipsis:
            return tuple(self._coerce(item, args[0]) for item in obj)
        if len(args) != len(obj):
            raise DecodeError(f"Expected {len(args)} items, got {len(obj)}")
        return tuple(self._coerce(item, arg) for item, arg in zip(obj, args))
