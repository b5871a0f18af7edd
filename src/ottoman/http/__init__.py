"""HTTP primitives: immutable Request, QueryParams, and Response."""

from ottoman.http.query import QueryParams
from ottoman.http.request import Request
from ottoman.http.response import Response, json_response

__all__ = ["QueryParams", "Request", "Response", "json_response"]
