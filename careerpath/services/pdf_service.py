import re
import zipfile
from io import BytesIO
from typing import Any, Dict
from xml.etree import ElementTree

import PyPDF2

PDF_TYPE = "application/pdf"
DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_W_NS = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"


class ResumeTextService:
    @staticmethod
    def extract_text(file_bytes: bytes, content_type: str) -> Dict[str, Any]:
        """
        Extract plain text from a PDF or DOCX resume.
        Returns: {
            'text': str,
            'word_count': int
        }
        """
        if content_type == PDF_TYPE:
            text = ResumeTextService._pdf_text(file_bytes)
        elif content_type == DOCX_TYPE:
            text = ResumeTextService._docx_text(file_bytes)
        else:
            raise ValueError(f"Unsupported resume type: {content_type}")

        text = re.sub(r"\n{3,}", "\n\n", text).strip()
        return {
            'text': text,
            'word_count': len(text.split())
        }

    @staticmethod
    def _pdf_text(file_bytes: bytes) -> str:
        try:
            pdf_reader = PyPDF2.PdfReader(BytesIO(file_bytes))
            text = ""
            for page in pdf_reader.pages:
                text += (page.extract_text() or "") + "\n"
            return text
        except Exception as e:
            raise ValueError(f"PDF extraction failed: {str(e)}")

    @staticmethod
    def _docx_text(file_bytes: bytes) -> str:
        try:
            with zipfile.ZipFile(BytesIO(file_bytes)) as archive:
                root = ElementTree.fromstring(archive.read("word/document.xml"))
        except (zipfile.BadZipFile, KeyError, ElementTree.ParseError) as e:
            raise ValueError(f"DOCX extraction failed: {str(e)}")

        paragraphs = []
        for paragraph in root.iter(f"{_W_NS}p"):
            runs = [node.text or "" for node in paragraph.iter(f"{_W_NS}t")]
            paragraphs.append("".join(runs))
        return "\n".join(paragraphs)
