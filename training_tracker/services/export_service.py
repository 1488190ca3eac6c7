import io
import re
from typing import Iterable, List, Tuple

from docx import Document
from docx.shared import Pt, RGBColor
from fpdf import FPDF
from fpdf.enums import XPos, YPos

from training_tracker.utils.resources import safe_filename

PDF_MEDIA_TYPE = "application/pdf"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

BULLET_RE = re.compile(r"^[\-\*•]\s+")
HEADING_RE = re.compile(r"^#+\s*")
BOLD_RE = re.compile(r"(\*\*.*?\*\*)")

def clean_text(text: str) -> str:
    """Clean text to be compatible with FPDF's core latin-1 fonts."""
    if not text:
        return ""
    text = str(text).replace("\r", "")
    text = text.replace("\u2013", "-").replace("\u2014", "-").replace("\u2019", "'").replace("\u2018", "'")
    text = text.replace("\u201c", '"').replace("\u201d", '"').replace("\u2022", "\x95")
    return text.encode("latin-1", "replace").decode("latin-1")

def clean_markdown_symbols(text: str) -> str:
    if not text:
        return ""
    text = text.replace("***", "").replace("**", "").replace("*", "")
    text = text.replace("__", "")
    return text.strip()

def parse_markdown(content: str) -> List[Tuple[str, int, str]]:
    """Split resource notes into ("heading", level, text), ("bullet", 0, text),
    ("text", 0, text) and ("blank", 0, "") blocks."""
    blocks = []
    for raw in (content or "").split("\n"):
        line = raw.strip()
        if not line:
            blocks.append(("blank", 0, ""))
        elif line.startswith("#"):
            level = min(len(line) - len(line.lstrip("#")), 3)
            blocks.append(("heading", level, HEADING_RE.sub("", line)))
        elif BULLET_RE.match(line):
            blocks.append(("bullet", 0, BULLET_RE.sub("", line)))
        else:
            blocks.append(("text", 0, line))
    return blocks

def _sections(topic) -> Iterable[Tuple[str, str, list]]:
    for subtopic in topic.subtopics:
        yield subtopic.title, subtopic.resources or "", list(subtopic.resource_links or [])

def _link_fields(link) -> Tuple[str, str]:
    if isinstance(link, dict):
        return link.get("title", ""), link.get("url", "")
    return link.title, link.url

def export_filename(topic, extension: str) -> str:
    return f"Module_{safe_filename(topic.title)}.{extension}"

def build_pdf(topic) -> bytes:
    pdf = FPDF()
    pdf.add_page()

    pdf.set_text_color(0, 0, 0)
    pdf.set_font("Helvetica", "B", 11)
    pdf.cell(190, 10, "TRAINING MODULE", new_x=XPos.LMARGIN, new_y=YPos.NEXT, align="C")
    pdf.set_font("Helvetica", "B", 18)
    pdf.multi_cell(190, 12, clean_text(clean_markdown_symbols(topic.title)), align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.ln(2)
    pdf.set_draw_color(200, 200, 200)
    pdf.line(20, pdf.get_y(), 190, pdf.get_y())
    pdf.ln(6)

    for title, resources, links in _sections(topic):
        pdf.set_font("Helvetica", "B", 15)
        pdf.set_x(10)
        pdf.multi_cell(0, 9, clean_text(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font("Helvetica", "", 11)

        for kind, level, text in parse_markdown(resources):
            pdf.set_x(10)
            if kind == "blank":
                pdf.ln(2)
            elif kind == "heading":
                pdf.set_font("Helvetica", "B", {1: 14, 2: 13}.get(level, 12))
                pdf.ln(6 - level)
                pdf.multi_cell(0, 8, clean_text(clean_markdown_symbols(text)), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
                pdf.set_font("Helvetica", "", 11)
            elif kind == "bullet":
                pdf.set_x(15)
                pdf.multi_cell(0, 7, clean_text(f"\x95 {clean_markdown_symbols(text)}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            else:
                pdf.multi_cell(0, 7, clean_text(clean_markdown_symbols(text)), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        if links:
            pdf.ln(2)
            pdf.set_font("Helvetica", "I", 10)
            for link in links:
                link_title, url = _link_fields(link)
                pdf.set_x(15)
                pdf.multi_cell(0, 6, clean_text(f"{link_title}: {url}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            pdf.set_font("Helvetica", "", 11)
        pdf.ln(6)

    return bytes(pdf.output())

def _add_runs(paragraph, text: str) -> None:
    for part in BOLD_RE.split(text):
        if not part:
            continue
        if part.startswith("**") and part.endswith("**"):
            run = paragraph.add_run(part[2:-2])
            run.bold = True
        else:
            run = paragraph.add_run(part)
        run.font.color.rgb = RGBColor(0, 0, 0)

def build_docx(topic) -> bytes:
    doc = Document()

    h0 = doc.add_heading("TRAINING MODULE", 0)
    h0.alignment = 1
    for run in h0.runs:
        run.font.color.rgb = RGBColor(0, 0, 0)

    p_title = doc.add_paragraph()
    p_title.alignment = 1
    run_title = p_title.add_run(topic.title)
    run_title.bold = True
    run_title.font.size = Pt(18)

    for title, resources, links in _sections(topic):
        doc.add_heading(title, level=1)
        for kind, level, text in parse_markdown(resources):
            if kind == "blank":
                continue
            if kind == "heading":
                # Subtopic titles use level 1
                h = doc.add_heading(text, level=min(level + 1, 4))
                for run in h.runs:
                    run.font.color.rgb = RGBColor(0, 0, 0)
            elif kind == "bullet":
                _add_runs(doc.add_paragraph(style="List Bullet"), text)
            else:
                _add_runs(doc.add_paragraph(), text)

        for link in links:
            link_title, url = _link_fields(link)
            p = doc.add_paragraph()
            run = p.add_run(f"{link_title}: ")
            run.italic = True
            p.add_run(url)

    file_stream = io.BytesIO()
    doc.save(file_stream)
    return file_stream.getvalue()

EXPORTERS = {
    "pdf": (build_pdf, PDF_MEDIA_TYPE),
    "docx": (build_docx, DOCX_MEDIA_TYPE),
}
