"""Top-level package for the POI search client.

This package holds the search orchestration layer of a nearby-places
directory: interchangeable place-search backends (Google Places,
Geoapify, HERE), a cached single-flight resolver for the search origin,
and a debounced, cancelable search coordinator that publishes its state
as observable values.
"""

__version__ = "0.1.0"
