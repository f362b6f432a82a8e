"""
cpihex.struct - little-endian binary structures

(c) 2019--2024 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import ctypes
from types import SimpleNamespace

from .errors import TruncatedInput


##############################################################################
# field types

# type strings
TYPES = {
    'byte': ctypes.c_uint8,
    'uint8': ctypes.c_uint8,
    'int8': ctypes.c_int8,

    'word': ctypes.c_uint16,
    'uint16': ctypes.c_uint16,
    'short': ctypes.c_int16,
    'int16': ctypes.c_int16,

    'dword': ctypes.c_uint32,
    'uint32': ctypes.c_uint32,
    'long': ctypes.c_int32,
    'int32': ctypes.c_int32,
}


def _parse_type(atype):
    """Convert field type specification to ctypes type."""
    if isinstance(atype, _WrappedCType):
        return atype._ctype
    try:
        return TYPES[atype]
    except KeyError:
        pass
    # fixed-length byte strings: '7s'
    if isinstance(atype, str) and atype.endswith('s'):
        return ctypes.c_char * int(atype[:-1])
    raise ValueError(f'Field type `{atype}` not understood')


class _WrappedCType:
    """Wrapper for ctypes type, factory for values."""

    def __mul__(self, count):
        """Create an array."""
        return ArrayType(self, count)

    __rmul__ = __mul__

    def from_cvalue(self, cvalue):
        # pylint: disable=no-member
        return self._value_cls.from_cvalue(cvalue, self)

    def from_bytes(self, data, offset=0):
        """Decode from a bytes-like buffer, starting at offset."""
        if len(data) < offset + self.size:
            raise TruncatedInput(
                f'Expected {self.size} bytes at offset {offset}, '
                f'found {max(0, len(data) - offset)}.'
            )
        # pylint: disable=no-member
        return self.from_cvalue(self._ctype.from_buffer_copy(data, offset))

    @property
    def size(self):
        # pylint: disable=no-member
        return ctypes.sizeof(self._ctype)


class _WrappedCValue:
    """Wrapper for ctypes value."""

    @classmethod
    def from_cvalue(cls, cvalue, type):
        obj = cls()
        obj._cvalue = cvalue
        obj._type = type
        return obj

    def __bytes__(self):
        return bytes(self._cvalue)


class ScalarValue(_WrappedCValue):
    """Wrapper for integer scalars."""

    def __int__(self):
        return self._cvalue.value

    __index__ = __int__

    def __repr__(self):
        return f'{type(self).__name__}({self._cvalue.value})'


class ScalarType(_WrappedCType):
    """Little-endian scalar type, used to build arrays and structs."""

    _value_cls = ScalarValue

    def __init__(self, ctype):
        self._ctype = ctype.__ctype_le__

    def __call__(self, value=0):
        return self.from_cvalue(self._ctype(value))


class ArrayValue(_WrappedCValue):
    """Wrapper for ctypes arrays."""

    def __getitem__(self, item):
        value = self._cvalue[item]
        if isinstance(value, (ctypes.Array, ctypes.Structure)):
            return self._type.element_type.from_cvalue(value)
        return value

    def __iter__(self):
        return (self[_i] for _i in range(len(self)))

    def __len__(self):
        return len(self._cvalue)

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(str(_s) for _s in self)})"


class ArrayType(_WrappedCType):
    """Fixed-length array of a scalar or structure type."""

    _value_cls = ArrayValue

    def __init__(self, element_type, count):
        self.element_type = element_type
        self._ctype = element_type._ctype * count

    def __call__(self, *values):
        return self.from_cvalue(self._ctype(*values))


class StructValue(_WrappedCValue):
    """Wrapper for ctypes Structure."""

    def __getattr__(self, attr):
        if attr.startswith('_'):
            raise AttributeError(attr)
        value = getattr(self._cvalue, attr)
        if isinstance(value, (ctypes.Array, ctypes.Structure)):
            return self._type.element_types[attr].from_cvalue(value)
        return value

    def __setattr__(self, attr, value):
        if attr.startswith('_'):
            return super().__setattr__(attr, value)
        if isinstance(value, _WrappedCValue):
            value = value._cvalue
        return setattr(self._cvalue, attr, value)

    @property
    def __dict__(self):
        return {
            _field: getattr(self, _field)
            for _field, *_ in self._cvalue._fields_
        }

    def __repr__(self):
        return '{}({})'.format(
            type(self).__name__,
            ', '.join(f'{_k}={_v}' for _k, _v in vars(self).items())
        )


class StructType(_WrappedCType):
    """
    Represent a packed little-endian structured type.

    header = StructType(first='uint8', second='uint16')
    s = header(first=1, second=2)

    assert bytes(s) == b'\1\2\0'
    assert header.from_bytes(b'\1\2\0').second == 2
    """

    _value_cls = StructValue

    def __init__(self, **description):
        """Create a structured type."""

        class _CStruct(ctypes.LittleEndianStructure):
            _fields_ = tuple(
                (_field, _parse_type(_type))
                for _field, _type in description.items()
            )
            _pack_ = 1
            _layout_ = 'ms'

        self._ctype = _CStruct
        self.element_types = description

    def __call__(self, **kwargs):
        """Instantiate a struct value."""
        kwargs = {
            _k: (_v._cvalue if isinstance(_v, _WrappedCValue) else _v)
            for _k, _v in kwargs.items()
        }
        return self.from_cvalue(self._ctype(**kwargs))


little_endian = SimpleNamespace(
    Struct=StructType,
    uint8=ScalarType(ctypes.c_uint8),
    int8=ScalarType(ctypes.c_int8),
    uint16=ScalarType(ctypes.c_uint16),
    int16=ScalarType(ctypes.c_int16),
    uint32=ScalarType(ctypes.c_uint32),
    int32=ScalarType(ctypes.c_int32),
)
