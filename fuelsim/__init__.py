"""
fuelsim package initializer.

This package contains the discrete-event engine, the forecourt primitives
(event queue, pumps), the allocation policy, the sampling model and metric
collection used by the multi-pump fuel station simulation.
"""
__all__ = [
    "entities", "queues", "arrivals", "policies", "stations",
    "engine", "metrics", "tracelog", "config", "simulation",
]
