"""Problem Details (RFC 9457) errors raised by keyset pagination."""

from typing import Optional
from pydantic import BaseModel, Field
from fastapi import Request
from fastapi.responses import JSONResponse


class ProblemDetail(BaseModel):
    """Problem Details as defined in RFC 9457."""
    
    type: str = Field(default="about:blank", description="A URI reference that identifies the problem type")
    title: str = Field(description="A short, human-readable summary of the problem type")
    status: int = Field(description="The HTTP status code")
    detail: Optional[str] = Field(default=None, description="A human-readable explanation specific to this occurrence")
    instance: Optional[str] = Field(default=None, description="Request path the problem occurred on")


class ProblemDetailException(Exception):
    """Base exception for Problem Details responses."""
    
    def __init__(
        self,
        status: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: str = "about:blank"
    ):
        self.status = status
        self.title = title
        self.detail = detail
        self.type_uri = type_uri
        super().__init__(detail or title)
    
    def to_problem_detail(self, request: Optional[Request] = None) -> ProblemDetail:
        """Convert to ProblemDetail model, tagged with the request path if any."""
        return ProblemDetail(
            type=self.type_uri,
            title=self.title,
            status=self.status,
            detail=self.detail,
            instance=str(request.url.path) if request else None
        )
    
    def to_response(self, request: Optional[Request] = None) -> JSONResponse:
        """Convert to JSONResponse with Problem Details format."""
        problem = self.to_problem_detail(request)
        return JSONResponse(
            status_code=self.status,
            content=problem.model_dump(exclude_none=True),
            headers={"Content-Type": "application/problem+json"}
        )


class PaginationError(ProblemDetailException):
    """Base class for every error raised by the pagination core.
    
    Subclasses only declare their status, title, problem type and default
    detail.
    """
    
    status_code = 400
    problem_title = "Pagination Error"
    problem_type = "urn:keyset-pagination:error"
    default_detail = "Pagination failed"
    
    def __init__(self, detail: Optional[str] = None):
        super().__init__(
            status=self.status_code,
            title=self.problem_title,
            detail=detail or self.default_detail,
            type_uri=self.problem_type
        )


class InvalidCursorError(PaginationError):
    """400 error for an `after`/`before` token that cannot be used.
    
    Raised when the token is not valid URL-safe base64, does not carry a
    well-formed position payload, or carries a position whose fields do not
    line up with the active sort.
    """
    
    problem_title = "Invalid Cursor"
    problem_type = "urn:keyset-pagination:invalid-cursor"
    default_detail = "Invalid cursor"


class InvalidParametersError(PaginationError):
    """400 error for pagination arguments that cannot form a valid plan."""
    
    problem_title = "Invalid Pagination Parameters"
    problem_type = "urn:keyset-pagination:invalid-parameters"
    default_detail = "Invalid pagination parameters"


class StoreFailureError(PaginationError):
    """502 error for a failed document store call."""
    
    status_code = 502
    problem_title = "Store Failure"
    problem_type = "urn:keyset-pagination:store-failure"
    default_detail = "Document store query failed"
