import io
from types import SimpleNamespace

from docx import Document

from training_tracker.services.export_service import (
    build_docx,
    build_pdf,
    clean_markdown_symbols,
    clean_text,
    export_filename,
    parse_markdown,
)

TOPIC = SimpleNamespace(
    id="t1",
    title="Safety First",
    subtopics=[
        SimpleNamespace(
            title="Emergency Procedures",
            resources="# Emergency Procedures\n\nIn case of **emergency**...\n- Raise the alarm\n- Muster at station",
            resource_links=[{"id": "l1", "type": "video", "title": "Drill video", "url": "https://youtu.be/dQw4w9WgXcQ"}],
        ),
        SimpleNamespace(title="PPE Guidelines", resources="", resource_links=[]),
    ],
)

def test_parse_markdown_blocks():
    blocks = parse_markdown("## Gear\n\n- Helmet\n**Always** check\n*   Gloves")
    assert blocks == [
        ("heading", 2, "Gear"),
        ("blank", 0, ""),
        ("bullet", 0, "Helmet"),
        ("text", 0, "**Always** check"),
        ("bullet", 0, "Gloves"),
    ]

def test_clean_text_replaces_typographic_characters():
    assert clean_text("“Hi” – it’s") == '"Hi" - it\'s'
    assert clean_text("emoji 🚢") == "emoji ?"

def test_clean_markdown_symbols():
    assert clean_markdown_symbols("**Bold** and *italic* ") == "Bold and italic"

def test_build_pdf():
    content = build_pdf(TOPIC)
    assert content.startswith(b"%PDF")

def test_build_docx_contains_sections_and_links():
    document = Document(io.BytesIO(build_docx(TOPIC)))
    texts = [p.text for p in document.paragraphs]

    assert "Emergency Procedures" in texts
    assert "PPE Guidelines" in texts
    assert "Raise the alarm" in texts
    assert "In case of emergency..." in texts
    assert "Drill video: https://youtu.be/dQw4w9WgXcQ" in texts

def test_export_filename():
    assert export_filename(TOPIC, "pdf") == "Module_Safety_First.pdf"
