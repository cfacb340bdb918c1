"""
API route modules.
"""
from . import auth, events, health, tasks, users

all_routers = [
    health.router,
    auth.router,
    users.router,
    tasks.router,
    events.router,
]

__all__ = ['all_routers']
