"""
Shared Kernel

Base classes and plumbing used by every bounded context of the
reservation engine: domain errors, results, interval math, the unit of
work and the message bus.
"""
