"""Errors raised while building or training a computation graph."""


class MicrogradError(Exception):
    """Base class for all errors raised by micrograd_mlp."""


class ConversionError(MicrogradError, TypeError):
    """
    A value could not be stored as a 64-bit float.

    Raised when constructing a Value from something that is not a real
    number (strings, None, complex numbers) or from an integer too large
    to fit in a float64.
    """


class ShapeMismatchError(MicrogradError, ValueError):
    """
    Two sequences that must line up have different lengths.

    Raised by Neuron.__call__ when the input vector does not match the
    number of weights, and by mse_loss when targets and predictions differ
    in length.
    """
