"""
Shared Kernel

Building blocks shared by every FieldHub domain app: value objects,
money/calendar helpers, the error taxonomy, the unit of work and the
message bus used to publish domain events after commit.
"""
