"""FastAPI application package for the Response CMS.

Operators curate key/response text pairs held in a Google Sheet through the
management surface; an external bot reads them through the delivery surface.
Business logic lives in `response_cms/logic/` and route handlers in
`response_cms/routes/`.
"""

from __future__ import annotations

from response_cms.main import create_app

__all__ = ["create_app"]
