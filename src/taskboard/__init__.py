"""Taskboard: shared task lists and to-dos.

The backend behind the mobile to-do client: sign-up/sign-in, task lists
shared between collaborators, and the checkable items inside them.
"""

__version__ = "0.1.0"
