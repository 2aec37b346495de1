# autograd/errors.py


class StructuralError(RuntimeError):
    """
    Raised when a graph cannot be traversed: a reference cycle, an operand
    index outside the tape, a node whose operands and partials disagree, or
    operands that live on different tapes.
    """
