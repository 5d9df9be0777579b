"""
Schemas - Page Models

Pydantic models for scanned site pages and their hierarchy.
"""

from pydantic import BaseModel
from typing import List, Optional, Literal


PageStatus = Literal["publish", "draft", "private", "future", "pending"]


class SiteNode(BaseModel):
    """One scanned content item (page, post, or custom post type entry)."""
    id: str
    title: str
    slug: str
    url: str
    parent_id: Optional[str] = None
    type: str = "page"
    status: PageStatus = "publish"
    manual_tags: List[str] = []  # e.g. "Location Hub", "Practice Page", "Ignore"
    date_modified: Optional[str] = None
    content_excerpt: Optional[str] = None


class SiteTreeNode(SiteNode):
    """Page hierarchy tree node."""
    children: List["SiteTreeNode"] = []

    def to_site_node(self) -> SiteNode:
        """Strip the children decoration."""
        return SiteNode(**self.model_dump(exclude={"children"}))


# Allow recursive model
SiteTreeNode.model_rebuild()
