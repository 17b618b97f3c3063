"""
Pydantic schemas for cleaner configuration and tree snapshots.

CleanOptions: which CleanPipeline steps run, and with which tag/attribute lists
NodeSnapshot: plain-data view of a tree produced by dom.to_array()
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# Structural noise removed by default (besides meta/style/script, which have their own flags)
DEFAULT_REMOVE_TAGS = [
    "header", "footer", "nav", "aside",
    "svg", "noscript", "iframe", "frame",
    "advertisement", "ad",
]

# Attributes kept by default; everything else is stripped
DEFAULT_ALLOW_ATTRIBUTES = ["id", "name", "src", "href", "alt", "data-*"]


class CleanOptions(BaseModel):
    """
    Configuration of the clean pipeline.

    Steps always run in this order when enabled:
    remove_meta → remove_styles → remove_scripts → remove_tags →
    remove_hidden_elements → remove_empty_nodes → attribute filtering →
    remove_comments
    """
    model_config = ConfigDict(extra="forbid")

    remove_meta: bool = True            # <meta> and <link>
    remove_styles: bool = True          # <style>
    remove_scripts: bool = True         # <script>
    remove_tags: list[str] = Field(default_factory=lambda: list(DEFAULT_REMOVE_TAGS))  # empty list disables
    remove_hidden_elements: bool = True
    remove_empty_nodes: bool = True
    allow_attributes: Optional[list[str]] = Field(default_factory=lambda: list(DEFAULT_ALLOW_ATTRIBUTES))
    deny_attributes: Optional[list[str]] = None  # applied after the allow-list
    remove_comments: bool = True
    compress_whitespace: bool = True    # False returns beautified (indented) output


class NodeSnapshot(BaseModel):
    """One node of a tree snapshot."""
    tag: str = Field(description="Element tag, or '#text' / '#comment'")
    level: int = Field(description="Depth below the first walked element")
    attrs: Optional[dict[str, str]] = None
    text: Optional[str] = None
    children: list["NodeSnapshot"] = Field(default_factory=list)
