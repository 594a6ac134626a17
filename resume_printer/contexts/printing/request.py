"""
Data structures flowing through the printing pipeline.

RenderRequest wraps the resume payload the artboard front end consumes. Only
the fields the printer reads are interpreted here:

    data.metadata.layout  - list of pages, each a [main, sidebar] pair of section keys
    data.metadata.css     - {"visible": bool, "value": str}

Everything else in the payload is passed through to the front end untouched.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List

from resume_printer.contexts.printing.exceptions import InvalidResumeRequestError

Layout = List[List[List[str]]]


@dataclass(frozen=True)
class CustomCss:
    """User-supplied stylesheet and whether it should be applied."""

    visible: bool = False
    value: str = ""


@dataclass(frozen=True)
class RenderRequest:
    """
    One resume to print or preview.

    Attributes:
        id: Resume identifier (used for preview object names and logging)
        user_id: Owner of the resume, namespace for published artifacts
        title: Resume title, used as the published document name
        data: Resume payload stored in the front end's localStorage
    """

    id: str
    user_id: str
    title: str
    data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        metadata = self.data.get("metadata")
        if not isinstance(metadata, dict):
            raise InvalidResumeRequestError(f"Resume {self.id} has no 'metadata' block")

        layout = metadata.get("layout")
        if not isinstance(layout, list) or not layout:
            raise InvalidResumeRequestError(
                f"Resume {self.id} must define a non-empty 'metadata.layout' page list"
            )

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RenderRequest":
        """Build a request from the API/JSON shape {id, userId, title, data}."""
        missing = [key for key in ("id", "userId", "data") if key not in payload]
        if missing:
            raise InvalidResumeRequestError(f"Resume payload missing keys: {missing}")

        return cls(
            id=str(payload["id"]),
            user_id=str(payload["userId"]),
            title=payload.get("title") or str(payload["id"]),
            data=payload["data"],
        )

    @property
    def layout(self) -> Layout:
        return self.data["metadata"]["layout"]

    @property
    def page_count(self) -> int:
        return len(self.layout)

    @property
    def css(self) -> CustomCss:
        css = self.data["metadata"].get("css") or {}
        return CustomCss(visible=bool(css.get("visible", False)), value=css.get("value") or "")

    def with_layout(self, layout: Layout) -> "RenderRequest":
        """Return a copy of this request with a different page layout."""
        data = copy.deepcopy(self.data)
        data["metadata"]["layout"] = layout
        return RenderRequest(id=self.id, user_id=self.user_id, title=self.title, data=data)


@dataclass
class PageBuffer:
    """
    A captured PDF holding one or more physical pages.

    Attributes:
        position: 1-based logical page order the buffer was captured for
        data: Stand-alone PDF bytes
    """

    position: int
    data: bytes
