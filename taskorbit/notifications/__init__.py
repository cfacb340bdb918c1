"""
Real-time task notifications.
"""
from .broadcaster import StatusBroadcaster, TASK_STATUS_CHANGED

__all__ = ['StatusBroadcaster', 'TASK_STATUS_CHANGED']
