"""
waila: "what am I looking at?" for bitcoin payment strings.

    >>> import waila
    >>> record = waila.decode("1andreas3batLhQa2FawWjeyjCqyBzypd")
    >>> record.family.value, record.network.value
    ('onchain', 'bitcoin')
"""

from .config import Capabilities
from .dispatcher import decode, try_decode
from .errors import (
    DecodeError,
    FormatError,
    InconsistentNetwork,
    MalformedFormat,
    NoMatchingFormat,
)
from .models import FormatFamily
from .networks import Network
from .record import PaymentRecord
from .serialization import from_json

__all__: list[str] = [
    "Capabilities",
    "DecodeError",
    "FormatError",
    "FormatFamily",
    "InconsistentNetwork",
    "MalformedFormat",
    "Network",
    "NoMatchingFormat",
    "PaymentRecord",
    "decode",
    "from_json",
    "try_decode",
]
