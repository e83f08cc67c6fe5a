"""Critical path scheduling for project phases.

Each phase names at most one predecessor, so the dependency structure is a
forest. Graph, memo tables and visiting sets are built per call and never
shared between calls.
"""
