"""
Adapter for HTTP framework (FastAPI).
Isolates FastAPI-specific imports to make library replacement easier.
"""
from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer


class HTTPFrameworkAdapter:
    """Adapter for HTTP framework operations."""

    def __init__(self):
        self.FastAPI = FastAPI
        self.APIRouter = APIRouter
        self.HTTPException = HTTPException
        self.Query = Query
        self.Body = Body
        self.Request = Request
        self.Depends = Depends
        self.RequestValidationError = RequestValidationError
        self.JSONResponse = JSONResponse
        self.Response = Response
        self.HTTPBearer = HTTPBearer
        self.HTTPAuthorizationCredentials = HTTPAuthorizationCredentials
        self.WebSocket = WebSocket
        self.WebSocketDisconnect = WebSocketDisconnect

    def create_app(self, *args, **kwargs):
        """Create a FastAPI application instance."""
        return self.FastAPI(*args, **kwargs)

    def create_router(self, *args, **kwargs):
        """Create an APIRouter instance."""
        return self.APIRouter(*args, **kwargs)
