class BeadPatternError(ValueError):
    """Base class for precondition failures raised by the pattern pipeline."""


class InvalidDimensions(BeadPatternError):
    pass


class RenderTargetUnavailable(BeadPatternError):
    pass


class InvalidK(BeadPatternError):
    pass


class EmptySampleSet(BeadPatternError):
    pass


class EmptyPalette(BeadPatternError):
    pass
