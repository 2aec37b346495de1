# scalargrad/__init__.py

from .autograd import (
    Value,
    Op,
    Tape,
    use_tape,
    backward,
    zero_grad,
    apply,
    StructuralError,
)
from .config import EngineConfig

__all__ = [
    'Value',
    'Op',
    'Tape',
    'use_tape',
    'backward',
    'zero_grad',
    'apply',
    'StructuralError',
    'EngineConfig',
]
