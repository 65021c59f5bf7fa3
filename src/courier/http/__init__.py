"""HTTP value types: Request, Response, Status, Headers."""

from courier.http.headers import Headers
from courier.http.request import Request
from courier.http.response import Response
from courier.http.status import Family, Status

__all__ = ["Family", "Headers", "Request", "Response", "Status"]
