"""
Preprocessor module for string-level HTML cleanup.

Runs before the markup reaches libxml2:
- Decodes byte input (declared encoding first, then detection)
- Strips characters lxml refuses to parse (NULL, control characters, BOM)
- Rewrites bare <source> tags into self-closed form
- Removes <meta http-equiv="Content-Type"> so it cannot fight the decoded text

Design principle: NEVER FAIL on bad markup. Every fix is recorded as a
diagnostic instead.

Pipeline position: Stage 1 of DocumentParser (Preprocessor → libxml2/html5lib).
Input:  raw HTML (str or bytes)
Output: (sanitized str, list of diagnostics)
"""

import re
from typing import Optional, Union

from bs4 import UnicodeDammit

from .exceptions import ParseError
from .logger import get_module_logger

logger = get_module_logger("preprocessor")

# libxml2's HTML parser does not know <source> is void and would nest the
# following markup inside it
SOURCE_TAG_PATTERN = re.compile(r"<source\b([^>]*?)\s*/?>", re.IGNORECASE)

# A Content-Type meta re-declares the charset of text that is already decoded
CONTENT_TYPE_META_PATTERN = re.compile(
    r"""<meta\b[^>]*\bhttp-equiv\s*=\s*["']?Content-Type["']?[^>]*>""",
    re.IGNORECASE
)

# Control characters other than tab, newline and carriage return
CONTROL_CHARS = "".join(chr(c) for c in range(32) if c not in (9, 10, 13))
_CONTROL_TABLE = str.maketrans("", "", CONTROL_CHARS)


class Preprocessor:
    """
    Rule-based string sanitizer.

    Fixes the input patterns that would otherwise make lxml raise or
    build the wrong tree.
    """

    # WHATWG encoding spec: browsers silently remap these charsets.
    # https://encoding.spec.whatwg.org/#names-and-labels
    WHATWG_CHARSET_MAP = {
        'iso-8859-1': 'windows-1252',
        'iso8859-1': 'windows-1252',
        'iso88591': 'windows-1252',
        'latin-1': 'windows-1252',
        'latin1': 'windows-1252',
        'us-ascii': 'windows-1252',
        'ascii': 'windows-1252',
        'iso-8859-9': 'windows-1254',
        'iso-8859-11': 'windows-874',
    }

    @staticmethod
    def detect_charset_from_bytes(raw_bytes: bytes) -> str:
        """
        Detect charset from raw HTML bytes by scanning the first 2048 bytes
        for <meta charset=...> or <meta http-equiv="Content-Type" content="...; charset=...">.

        Applies WHATWG browser charset mapping (e.g. iso-8859-1 → windows-1252).

        Returns the browser-equivalent charset or 'utf-8' as default.
        """
        # Charset declarations must appear within the first 1024 bytes; 2048 for safety
        head_str = raw_bytes[:2048].decode('ascii', errors='ignore')

        charset = None

        # Modern form first: <meta charset="...">
        m = re.search(r'<meta[^>]+charset=["\']?\s*([^\s"\';>]+)', head_str, re.IGNORECASE)
        if m:
            charset = m.group(1).strip().lower()

        # Legacy: <meta http-equiv="Content-Type" content="...; charset=...">
        if not charset:
            m = re.search(
                r'<meta[^>]+content=["\'][^"\']*charset=([^\s"\';>]+)',
                head_str, re.IGNORECASE
            )
            if m:
                charset = m.group(1).strip().lower()

        if not charset:
            return 'utf-8'

        return Preprocessor.WHATWG_CHARSET_MAP.get(charset, charset)

    def decode(self, html: Union[str, bytes], encoding: str = "UTF-8") -> tuple[str, list[str]]:
        """
        Turn byte input into text.

        The declared ``encoding`` is tried first; if the bytes are not valid
        in it, BeautifulSoup's UnicodeDammit guesses (BOM, meta declaration,
        then statistical detection).

        Raises:
            ParseError: If no encoding can decode the bytes
        """
        if isinstance(html, str):
            return html, []

        try:
            return html.decode(encoding), []
        except (UnicodeDecodeError, LookupError) as e:
            logger.debug(f"Declared encoding {encoding!r} failed: {e}")

        dammit = UnicodeDammit(html, [encoding])
        if dammit.unicode_markup is None:
            raise ParseError(
                f"Could not decode input as {encoding} or any detected encoding",
                diagnostics=[f"Undecodable input ({len(html)} bytes)"]
            )

        return dammit.unicode_markup, [
            f"Decoded as {dammit.original_encoding} instead of {encoding}"
        ]

    def sanitize(self, html: str) -> tuple[str, list[str]]:
        """
        Sanitize raw HTML text before parsing.

        Args:
            html: Raw HTML string

        Returns:
            Tuple of (sanitized HTML, list of diagnostics)
        """
        diagnostics = []
        sanitized = html

        # 1. Byte order marks survive decoding of some inputs and show up as text
        if '\ufeff' in sanitized:
            sanitized = sanitized.replace('\ufeff', '')
            diagnostics.append("Removed byte order mark")

        # 2. lxml refuses strings containing NULL bytes outright
        if '\x00' in sanitized:
            sanitized = sanitized.replace('\x00', '')
            diagnostics.append("Removed NULL bytes")

        # 3. Normalize line endings before the control-character pass removes \r
        sanitized = sanitized.replace('\r\n', '\n').replace('\r', '\n')

        # 4. Remaining control characters are rejected by lxml as well
        if any(c in sanitized for c in CONTROL_CHARS):
            sanitized = sanitized.translate(_CONTROL_TABLE)
            diagnostics.append("Removed control characters")

        # 5. Force <source> into self-closed form
        if SOURCE_TAG_PATTERN.search(sanitized):
            sanitized = SOURCE_TAG_PATTERN.sub(r"<source\1 />", sanitized)

        # 6. Drop Content-Type declarations; the text is already decoded
        if CONTENT_TYPE_META_PATTERN.search(sanitized):
            sanitized = CONTENT_TYPE_META_PATTERN.sub('', sanitized)
            diagnostics.append("Removed Content-Type meta declaration")

        logger.debug(f"Sanitization complete. {len(diagnostics)} fixes applied.")
        return sanitized, diagnostics

    def process(self, html: Union[str, bytes], encoding: str = "UTF-8") -> tuple[str, list[str]]:
        """Decode (if needed) and sanitize ``html``."""
        text, diagnostics = self.decode(html, encoding)
        sanitized, sanitize_diagnostics = self.sanitize(text)
        return sanitized, diagnostics + sanitize_diagnostics


def preprocess(html: Union[str, bytes], encoding: Optional[str] = None) -> str:
    """
    Convenience function to sanitize HTML without parsing it.

    Args:
        html: Raw HTML string or bytes
        encoding: Encoding of byte input (default: UTF-8)

    Returns:
        Sanitized HTML string
    """
    sanitized, _ = Preprocessor().process(html, encoding or "UTF-8")
    return sanitized
