"""Domain types, configuration, a content-type registry, circuit-broken upstream clients and mock upstream APIs for a social likes service."""

__version__ = "0.1.0"