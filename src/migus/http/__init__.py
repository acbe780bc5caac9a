"""HTTP primitives: the request snapshot, the response buffer, and their parts."""

from migus.http.cookies import SetCookie, parse_cookies
from migus.http.forms import FormData, UploadFile, parse_form
from migus.http.headers import Headers
from migus.http.query import QueryParams
from migus.http.request import Request
from migus.http.response import Redirect, Response, ResponseSink

__all__ = [
    "FormData",
    "Headers",
    "QueryParams",
    "Redirect",
    "Request",
    "Response",
    "ResponseSink",
    "SetCookie",
    "UploadFile",
    "parse_cookies",
    "parse_form",
]
