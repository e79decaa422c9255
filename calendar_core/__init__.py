"""
calendar-core: recurrence expansion, resource availability and
collision-free event layout for calendar views.
"""

__version__ = "0.1.0"
