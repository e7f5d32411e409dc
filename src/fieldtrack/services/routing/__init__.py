"""Geocoding and visit sequencing for field tasks."""

from .geocoder import GeocodeResolver, extract_coordinates
from .sequencer import RouteSequencer, sequence_by_pincode

__all__ = ["GeocodeResolver", "RouteSequencer", "extract_coordinates", "sequence_by_pincode"]
