from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from io import BytesIO
from zipfile import ZipFile

import defusedxml.ElementTree as ET

from hiring_compass.core.config import settings
from hiring_compass.core.errors import ResumeInputError, UnsupportedResumeFile

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"
ZIP_MAGICS = (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
ALLOWED_RESUME_EXTENSIONS = {"pdf", "docx"}

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"\s+")
_ENTITY_NAME_RE = re.compile(r"^[\w .,'()&\-/+]+$")

ROLE_LENGTH = (3, 120)
COMPANY_LENGTH = (2, 120)


@dataclass(frozen=True)
class AnalysisInput:
    resume_text: str
    job_role: str
    company: str


def sanitize_text(value: object, max_length: int = 200) -> str:
    if not isinstance(value, str):
        return ""
    cleaned = _CONTROL_CHARS_RE.sub(" ", value)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    return cleaned[:max_length]


def is_valid_entity_name(value: str, min_length: int, max_length: int) -> bool:
    if not value or not isinstance(value, str):
        return False
    trimmed = value.strip()
    if len(trimmed) < min_length or len(trimmed) > max_length:
        return False
    # \w also admits "_" and non-Latin letters/digits, which role and company names may carry.
    return bool(_ENTITY_NAME_RE.match(trimmed))


def clean_role_and_company(raw_job_role: object, raw_company: object) -> tuple[str, str]:
    # One past the limit so over-long names fail the length check instead of being cut.
    job_role = sanitize_text(raw_job_role, ROLE_LENGTH[1] + 1)
    company = sanitize_text(raw_company, COMPANY_LENGTH[1] + 1)
    if not is_valid_entity_name(job_role, *ROLE_LENGTH):
        raise ResumeInputError(f"Job role is required ({ROLE_LENGTH[0]}-{ROLE_LENGTH[1]} characters).")
    if not is_valid_entity_name(company, *COMPANY_LENGTH):
        raise ResumeInputError(f"Company name is required ({COMPANY_LENGTH[0]}-{COMPANY_LENGTH[1]} characters).")
    return job_role, company


def check_resume_length(resume_text: str) -> str:
    if len(resume_text) < settings.min_resume_text_chars:
        raise ResumeInputError(
            f"Resume content must be at least {settings.min_resume_text_chars} characters."
        )
    if len(resume_text) > settings.max_resume_text_chars:
        raise ResumeInputError(
            f"Resume content exceeds maximum allowed length ({settings.max_resume_text_chars} chars).",
            status_code=413,
        )
    return resume_text


def prepare_text_input(raw_resume_text: object, raw_job_role: object, raw_company: object) -> AnalysisInput:
    job_role, company = clean_role_and_company(raw_job_role, raw_company)
    if not isinstance(raw_resume_text, str) or not raw_resume_text.strip():
        raise ResumeInputError("Please provide a resume (PDF/DOCX file or pasted text).")
    # Truncate one past the limit so over-long input is reported as 413 rather than silently cut.
    resume_text = sanitize_text(raw_resume_text, settings.max_resume_text_chars + 1)
    return AnalysisInput(resume_text=check_resume_length(resume_text), job_role=job_role, company=company)


def _is_zip_payload(content: bytes) -> bool:
    return any(content.startswith(prefix) for prefix in ZIP_MAGICS)


def _zip_has_paths(content: bytes, prefixes: tuple[str, ...]) -> bool:
    try:
        with ZipFile(BytesIO(content)) as archive:
            names = archive.namelist()
        return any(any(name.startswith(prefix) for prefix in prefixes) for name in names)
    except Exception:
        return False


def resume_extension(filename: str, content_type: str | None = None) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext in ALLOWED_RESUME_EXTENSIONS:
        return ext
    if content_type == "application/pdf":
        return "pdf"
    if content_type == DOCX_CONTENT_TYPE:
        return "docx"
    raise UnsupportedResumeFile(
        f"Invalid file type: {content_type or filename}. Only PDF and DOCX files are allowed."
    )


def validate_resume_signature(ext: str, content: bytes) -> None:
    if ext == "pdf":
        if not content.startswith(PDF_MAGIC):
            raise UnsupportedResumeFile("File signature does not match .pdf content.")
        return
    if ext == "docx":
        if not _is_zip_payload(content) or not _zip_has_paths(content, ("word/",)):
            raise UnsupportedResumeFile("File signature does not match .docx content.")
        return
    raise UnsupportedResumeFile(f"Unsupported file type '.{ext}'. Please upload a PDF or DOCX file.")


def _extract_pdf_text(content: bytes) -> str:
    from pypdf import PdfReader

    reader = PdfReader(BytesIO(content))
    page_chunks: list[str] = []
    for page in reader.pages:
        page_text = page.extract_text() or ""
        if page_text.strip():
            page_chunks.append(page_text)
    return "\n\n".join(page_chunks)


def _extract_docx_text_fallback(content: bytes) -> str:
    with ZipFile(BytesIO(content)) as archive:
        raw = archive.read("word/document.xml")
    root = ET.fromstring(raw)
    paragraphs: list[str] = []
    for paragraph in root.iter():
        if not paragraph.tag.endswith("}p"):
            continue
        texts = [node.text.strip() for node in paragraph.iter() if node.tag.endswith("}t") and node.text]
        texts = [value for value in texts if value]
        if texts:
            paragraphs.append(" ".join(texts))
    return "\n".join(paragraphs)


def _extract_docx_text(content: bytes) -> str:
    try:
        from docx import Document

        document = Document(BytesIO(content))
        return "\n".join(paragraph.text for paragraph in document.paragraphs if paragraph.text.strip())
    except Exception as exc:  # noqa: BLE001 - retry with the raw XML reader
        logger.info("docx_parser_fallback reason=%s", exc)
        return _extract_docx_text_fallback(content)


def extract_resume_text(filename: str, content: bytes, content_type: str | None = None) -> str:
    """Pull plain text out of an uploaded PDF or DOCX resume."""
    if not content:
        raise ResumeInputError("Empty file uploaded. Please provide a valid resume file.")
    if len(content) > settings.max_upload_bytes:
        raise ResumeInputError(
            f"File is too large. Maximum file size is {settings.max_upload_bytes // (1024 * 1024)} MB.",
            status_code=413,
        )

    ext = resume_extension(filename, content_type)
    validate_resume_signature(ext, content)

    try:
        text = _extract_pdf_text(content) if ext == "pdf" else _extract_docx_text(content)
    except Exception as exc:
        label = "PDF" if ext == "pdf" else "DOCX"
        raise UnsupportedResumeFile(f"Failed to parse resume: {label} file appears to be unreadable.") from exc

    text = text.strip()
    if not text:
        label = "PDF" if ext == "pdf" else "DOCX"
        raise ResumeInputError(f"Failed to parse resume: {label} file appears to be empty or unreadable.")
    return text


def prepare_file_input(
    filename: str,
    content: bytes,
    content_type: str | None,
    raw_job_role: object,
    raw_company: object,
) -> AnalysisInput:
    job_role, company = clean_role_and_company(raw_job_role, raw_company)
    resume_text = extract_resume_text(filename, content, content_type)
    return AnalysisInput(resume_text=check_resume_length(resume_text), job_role=job_role, company=company)
