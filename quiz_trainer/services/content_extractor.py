"""
Content Extraction Service
Turns web pages and uploaded files into plain source text for quiz generation
"""
import logging
import re
from typing import Optional
from urllib.parse import urlparse

import fitz  # PyMuPDF
import httpx

from quiz_trainer.core.errors import InvalidInputError, MissingInputError, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_MAX_LENGTH = 10000
TRUNCATION_MARKER = "..."
USER_AGENT = "Mozilla/5.0 (compatible; QuizGenerator/1.0)"

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")

HTML_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&mdash;", "—"),
    ("&ndash;", "–"),
)


def html_to_text(html: str, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """
    Reduce an HTML page to plain text

    Removes script/style blocks and all tags, decodes a fixed set of
    entities, collapses whitespace and truncates to max_length characters
    (appending "..." when truncated).

    Args:
        html: Raw HTML
        max_length: Maximum number of characters kept

    Returns:
        Plain text
    """
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)

    for entity, replacement in HTML_ENTITIES:
        text = text.replace(entity, replacement)

    text = _WHITESPACE_RE.sub(" ", text).strip()

    if len(text) > max_length:
        text = text[:max_length] + TRUNCATION_MARKER

    return text


def validate_url(url: Optional[str]) -> str:
    """Accept only absolute http(s) URLs"""
    if not url or not url.strip():
        raise InvalidInputError("URL fehlt")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidInputError("Ungültige URL")

    return url


async def fetch_url_text(
    url: str,
    max_length: int = DEFAULT_MAX_LENGTH,
    timeout: float = 30.0
) -> str:
    """
    Fetch a web page and return its text content

    Raises:
        InvalidInputError: If the URL is not an absolute http(s) URL
        UpstreamError: If the page cannot be fetched
    """
    url = validate_url(url)
    logger.info(f"🌐 Fetching {url}")

    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.get(url, headers={"User-Agent": USER_AGENT})
            response.raise_for_status()
            html = response.text

    except httpx.HTTPStatusError as e:
        logger.error(f"❌ Fetch failed with HTTP {e.response.status_code}: {url}")
        raise UpstreamError(f"HTTP error! status: {e.response.status_code}")

    except httpx.HTTPError as e:
        logger.error(f"❌ Fetch failed: {url}: {e}")
        raise UpstreamError(f"Failed to fetch URL: {e}")

    text = html_to_text(html, max_length)
    logger.info(f"📄 Extracted {len(text)} characters from {url}")
    return text


def extract_pdf_text(data: bytes) -> str:
    """
    Extract text from PDF bytes using PyMuPDF (fitz)

    Raises:
        InvalidInputError: If the PDF cannot be opened
    """
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except (fitz.FileDataError, RuntimeError, ValueError) as e:
        logger.error(f"Invalid PDF file structure: {e}")
        raise InvalidInputError(f"Ungültige PDF-Datei: {e}")

    try:
        page_count = len(doc)
        extracted_text = "".join(page.get_text() for page in doc)
    finally:
        doc.close()

    logger.info(f"📄 Extracted {len(extracted_text)} characters from {page_count} pages")
    return extracted_text.strip()


def extract_upload_text(filename: Optional[str], data: bytes) -> str:
    """
    Extract source text from an uploaded file

    PDFs (detected by their %PDF- magic bytes) go through PyMuPDF; any
    other file is decoded as UTF-8.

    Raises:
        MissingInputError: If the file yields no text
    """
    if data.startswith(b"%PDF-"):
        text = extract_pdf_text(data)
    else:
        text = data.decode("utf-8", errors="replace").strip()

    if not text:
        raise MissingInputError(f"Datei enthält keinen Text: {filename or 'upload'}")

    return text
