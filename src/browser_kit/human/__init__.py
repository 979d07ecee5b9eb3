"""human — human-like timing policies for browser automation."""
from .behavior import (  # noqa: F401
    HumanizationPolicy,
    RandomDelays,
    NoDelays,
    human_type,
)
