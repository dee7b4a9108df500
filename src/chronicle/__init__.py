"""Chronicle: entity change tracking, versioning and change notifications.

Records immutable versions of tracked business entities, computes
field-level deltas, analyzes metric trends across analysis runs, and
raises threshold alerts and periodic change summaries.
"""

__version__ = "0.1.0"
