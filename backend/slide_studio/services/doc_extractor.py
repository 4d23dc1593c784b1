import logging
from pathlib import Path

from docx import Document as DocxDocument
from pypdf import PdfReader


logger = logging.getLogger("slide_studio.documents")

SUPPORTED_EXTENSIONS = {".txt", ".md", ".pdf", ".docx"}


def extract_text(file_path: Path) -> str:
    """Return the plain text of an uploaded reference document."""
    suffix = file_path.suffix.lower()
    if suffix in {".txt", ".md"}:
        text = file_path.read_text(encoding="utf-8", errors="ignore")
    elif suffix == ".pdf":
        reader = PdfReader(str(file_path))
        text = "\n".join((page.extract_text() or "") for page in reader.pages)
    elif suffix == ".docx":
        doc = DocxDocument(str(file_path))
        text = "\n".join(p.text for p in doc.paragraphs)
    else:
        raise ValueError(f"Unsupported document extension: {suffix}")

    logger.info("document_extracted name=%s suffix=%s chars=%d", file_path.name, suffix, len(text))
    return text.strip()
