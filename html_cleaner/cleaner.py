"""
Main orchestrator for the HTML Cleaner package.

Coordinates the clean pipeline: DocumentParser → TreeMutators → Serializer.
Enabled mutators always run in the order listed on CleanOptions.
"""

from pathlib import Path
from typing import Any, Optional, Union

from lxml import etree

from . import mutators
from .logger import get_module_logger, setup_logger
from .nodes import Document
from .parser import DocumentParser
from .preprocessor import Preprocessor
from .schemas import CleanOptions
from .serializer import to_html_string

logger = get_module_logger("cleaner")

OptionsLike = Union[CleanOptions, dict, None]


def resolve_options(options: OptionsLike = None, **overrides: Any) -> CleanOptions:
    """
    Merge ``options`` and keyword ``overrides`` onto the defaults.

    A dict only needs the keys it changes, like the overrides.
    """
    if isinstance(options, CleanOptions):
        base = options.model_dump()
    else:
        base = dict(options or {})
    base.update(overrides)
    return CleanOptions.model_validate(base)


class Cleaner:
    """
    Main orchestrator for HTML cleaning.

    Coordinates the pipeline:
    1. DocumentParser: sanitize and parse
    2. TreeMutators: drop noise in a fixed order
    3. Serializer: compressed or beautified string
    """

    def __init__(
        self,
        options: OptionsLike = None,
        parser: Optional[DocumentParser] = None,
        log_level: Union[int, str, None] = None
    ):
        if log_level is not None:
            setup_logger(level=log_level)

        self.options = resolve_options(options)
        self.parser = parser or DocumentParser()

    def _load(self, html: Union[str, bytes, Document, etree._Element]) -> Document:
        if isinstance(html, Document):
            return html
        if isinstance(html, etree._Element):
            # A bare node is cleaned as a fresh copy, never in place
            html = to_html_string(html)
        return self.parser.parse(html)

    def apply(self, document: Document, options: CleanOptions) -> Document:
        """Run the enabled mutators on ``document`` in pipeline order."""
        if options.remove_meta:
            mutators.remove_meta(document)

        if options.remove_styles:
            mutators.remove_styles(document)

        if options.remove_scripts:
            mutators.remove_scripts(document)

        if options.remove_tags:
            mutators.remove_tags(document, options.remove_tags)

        if options.remove_hidden_elements:
            mutators.remove_hidden_elements(document)

        if options.remove_empty_nodes:
            mutators.remove_empty_nodes(document)

        # An empty allow-list disables filtering rather than stripping everything
        allow = options.allow_attributes or None
        deny = options.deny_attributes or None
        if allow is not None or deny is not None:
            mutators.remove_attributes(document, allow, deny)

        if options.remove_comments:
            mutators.remove_comments(document)

        return document

    def clean(
        self,
        html: Union[str, bytes, Document, etree._Element],
        options: OptionsLike = None,
        as_string: bool = True,
        **overrides: Any
    ) -> Union[str, Document]:
        """
        Clean HTML.

        Args:
            html: Raw HTML, a Document (cleaned in place) or a node (cleaned as a copy)
            options: CleanOptions or dict of overrides (default: the cleaner's options)
            as_string: Return the serialized string instead of the Document
            **overrides: Individual option overrides

        Returns:
            Cleaned HTML string, or the Document for further querying

        Raises:
            ParseError: If the input cannot be parsed at all
        """
        if options is None:
            options = self.options
        options = resolve_options(options, **overrides)

        logger.info("Starting clean")

        document = self._load(html)
        self.apply(document, options)

        logger.info(f"Clean complete ({len(document.diagnostics)} parser diagnostics)")

        if not as_string:
            return document
        return to_html_string(document, compress=options.compress_whitespace)

    def clean_file(
        self,
        file_path: Union[str, Path],
        options: OptionsLike = None,
        as_string: bool = True,
        **overrides: Any
    ) -> Union[str, Document]:
        """Clean an HTML file, decoding it with the charset it declares."""
        file_path = Path(file_path)

        # Read bytes so the declared charset is known before decoding
        raw_bytes = file_path.read_bytes()
        declared_charset = Preprocessor.detect_charset_from_bytes(raw_bytes)
        logger.debug(f"{file_path.name}: declared charset {declared_charset}")

        document = self.parser.parse(raw_bytes, encoding=declared_charset)
        return self.clean(document, options, as_string=as_string, **overrides)


def clean(
    html: Union[str, bytes, Document, etree._Element],
    options: OptionsLike = None,
    as_string: bool = True,
    **overrides: Any
) -> Union[str, Document]:
    """Convenience function to clean HTML with default settings."""
    return Cleaner().clean(html, options, as_string=as_string, **overrides)
