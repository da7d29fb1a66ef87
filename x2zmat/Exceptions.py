"""
This module contains classes which extend Exception for usage in x2zmat.
"""


class X2ZError(ValueError):
    """
    Base class of the errors raised while perceiving a molecular structure.
    """
    pass


class UnknownElementError(X2ZError):
    """
    An exception raised when an element has no data in the element table.
    """
    pass


class DisconnectedStructureError(X2ZError):
    """
    An exception raised when the atoms cannot be spanned by a single connectivity tree.
    """
    pass


class StructureTooComplexError(X2ZError):
    """
    An exception raised when a combinatorial search exceeds its configured bound.
    """
    pass


class DegenerateGeometryError(X2ZError):
    """
    An exception raised when no valid reference atom exists for an internal coordinate.
    """
    pass
