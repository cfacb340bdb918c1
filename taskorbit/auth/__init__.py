"""
Password hashing, access tokens and request authentication.
"""
from .passwords import hash_password, verify_password
from .tokens import create_access_token, decode_token

__all__ = ['hash_password', 'verify_password', 'create_access_token', 'decode_token']
