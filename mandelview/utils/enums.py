from enum import Enum, IntEnum, auto


class PrecisionMode(Enum):
    Single = auto()
    Double = auto()
    Arbitrary = auto()


class EscapeStatus(IntEnum):
    # Values match the status codes returned by the compiled kernels.
    EXTERIOR = 0
    INTERIOR = 1
    UNRESOLVED = 2


class Origin(Enum):
    BOTTOM_LEFT = auto()
    TOP_LEFT = auto()
