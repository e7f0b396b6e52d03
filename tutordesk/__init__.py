"""
Tutordesk: operations dashboard for a tutoring business.

This package holds the deferred class deletion used by the schedule screens:
a visible, undoable countdown that commits the delete only when it elapses,
survives restarts and stays consistent across every session of a profile.
"""

__version__ = "1.0.0"
__author__ = "Tutordesk Development Team"
__description__ = "Deferred, undoable class deletion for the tutoring dashboard"
