import io
import re
from typing import Optional

import docx
import fitz  # PyMuPDF
import structlog
from pypdf import PdfReader

from studyai.services.results import Failure, Result, Success

logger = structlog.get_logger()


PDF_TYPES = {"application/pdf"}
# python-docx reads only the OOXML format; legacy binary .doc is rejected
WORD_TYPES = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
TEXT_TYPES = {"text/plain"}

EXTENSION_TYPES = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
    ".md": "text/plain",
}

UNWANTED_INLINE = ["\u00ad", "\uf0b7", "\u2022", "\u200b", "\u200c", "\u200d"]


# -------------------- TEXT EXTRACTION --------------------

def resolve_content_type(filename: Optional[str], content_type: Optional[str]) -> Optional[str]:
    if content_type in PDF_TYPES | WORD_TYPES | TEXT_TYPES:
        return content_type
    if filename:
        match = re.search(r"\.[^./]+$", filename.lower())
        if match:
            return EXTENSION_TYPES.get(match.group(0))
    return None


def _pdf_text(content: bytes) -> Result:
    # 1) PyMuPDF
    try:
        with fitz.open(stream=content, filetype="pdf") as doc:
            pages = [page.get_text("text") or "" for page in doc]
        raw = "\n\n".join(pages)
        if raw.strip():
            return Success(raw)
    except Exception as e:
        logger.warning("pymupdf_extraction_failed", error=str(e))

    # 2) pypdf
    try:
        reader = PdfReader(io.BytesIO(content))
        if reader.is_encrypted:
            reader.decrypt("")
        pages = [page.extract_text() or "" for page in reader.pages]
        return Success("\n\n".join(pages))
    except Exception as e:
        return Failure(f"PDF extraction failed: {e}")


def _word_text(content: bytes) -> Result:
    try:
        document = docx.Document(io.BytesIO(content))
    except Exception as e:
        return Failure(f"Word document extraction failed: {e}")
    return Success("\n\n".join(p.text for p in document.paragraphs))


def _plain_text(content: bytes) -> Result:
    return Success(content.decode("utf-8", errors="ignore"))


def extract_text(content: bytes, filename: Optional[str] = None, content_type: Optional[str] = None) -> Result:
    """Extract raw text from an uploaded PDF, Word or plain-text document."""
    kind = resolve_content_type(filename, content_type)
    if kind in PDF_TYPES:
        return _pdf_text(content)
    if kind in WORD_TYPES:
        return _word_text(content)
    if kind in TEXT_TYPES:
        return _plain_text(content)
    return Failure("Unsupported file type; upload a PDF, .docx or plain-text file")


# -------------------- CLEANING --------------------

def clean_text(raw_text: str) -> str:
    """Collapse whitespace inside paragraphs, keep blank-line paragraph breaks."""
    text = raw_text or ""
    for ch in UNWANTED_INLINE:
        text = text.replace(ch, " ")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"-\s*\n\s*(?=\w)", "", text)  # de-hyphenate across linebreaks
    paragraphs = [re.sub(r"\s+", " ", p).strip() for p in re.split(r"\n\s*\n", text)]
    return "\n\n".join(p for p in paragraphs if p)


def get_text_preview(text: str, max_length: int = 200) -> str:
    if len(text) <= max_length:
        return text
    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > 0:
        truncated = truncated[:last_space]
    return truncated + "..."


def title_from_filename(filename: str) -> str:
    return re.sub(r"\.[^/.]+$", "", filename or "") or "Untitled"
