"""
Response assembly - the single exit point for feed bodies and status codes.
"""
from dataclasses import dataclass
from typing import Any, Dict

from pydantic import BaseModel

from pluggable_feed.core.exceptions import AppException
from pluggable_feed.services.dispatcher import DispatchResult


@dataclass
class AssembledResponse:
    """Status code plus JSON-ready body."""

    status_code: int
    body: Dict[str, Any]


class ResponseAssembler:
    """Shapes strategy output into ``{posts, algorithm}`` or ``{error, details?}``."""

    def assemble(self, result: DispatchResult) -> AssembledResponse:
        if result.error is not None:
            return self.error(result.error)
        return AssembledResponse(
            status_code=200,
            body={
                "posts": self._serialize(result.posts),
                "algorithm": result.algorithm.value,
            },
        )

    @staticmethod
    def error(exc: AppException) -> AssembledResponse:
        return AssembledResponse(status_code=exc.status_code, body=exc.to_dict())

    @staticmethod
    def _serialize(posts: Any) -> Any:
        if isinstance(posts, list) and all(isinstance(p, BaseModel) for p in posts):
            return [post.model_dump(mode="json") for post in posts]
        # Third-party bodies are opaque JSON and pass through as-is
        return posts
