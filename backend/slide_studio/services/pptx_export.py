from __future__ import annotations

import logging
import re
from pathlib import Path

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_AUTO_SHAPE_TYPE
from pptx.util import Inches, Pt

from slide_studio.services.slide_parser import Slide
from slide_studio.services.themes import SlideTheme


logger = logging.getLogger("slide_studio.export")

_BULLET_PREFIX = re.compile(r"^\s*(?:•|-|\*|\d+[.)])\s+")
_TITLE_LAYOUT = 0
_CONTENT_LAYOUT = 1


def _rgb(hex_color: str) -> RGBColor:
    return RGBColor.from_string(hex_color.lstrip("#")[:6].upper())


def _is_dark(hex_color: str) -> bool:
    raw = hex_color.lstrip("#")
    r, g, b = (int(raw[i : i + 2], 16) for i in (0, 2, 4))
    return (0.299 * r + 0.587 * g + 0.114 * b) < 128


def _palette(theme: SlideTheme) -> dict[str, RGBColor]:
    dark = _is_dark(theme.primary_color)
    return {
        "bg": _rgb(theme.primary_color),
        "accent": _rgb(theme.accent_color),
        "title": RGBColor(248, 250, 252) if dark else RGBColor(15, 23, 42),
        "body": RGBColor(226, 232, 240) if dark else RGBColor(30, 41, 59),
    }


def _normalize_lines(text: str) -> list[str]:
    lines: list[str] = []
    for raw in (text or "").splitlines():
        line = _BULLET_PREFIX.sub("", raw.strip()).strip()
        if line:
            lines.append(line)
    return lines


def _style_text(text_frame, *, color: RGBColor, size_pt: float, bold: bool) -> None:
    for paragraph in text_frame.paragraphs:
        paragraph.font.size = Pt(size_pt)
        paragraph.font.bold = bold
        paragraph.font.color.rgb = color
        for run in paragraph.runs:
            run.font.size = Pt(size_pt)
            run.font.bold = bold
            run.font.color.rgb = color


def _write_lines(text_frame, lines: list[str]) -> None:
    text_frame.clear()
    for idx, line in enumerate(lines):
        paragraph = text_frame.paragraphs[0] if idx == 0 else text_frame.add_paragraph()
        paragraph.text = line
        paragraph.level = 0


def _decorate(slide, palette: dict[str, RGBColor], slide_width) -> None:
    bg = slide.background
    bg.fill.solid()
    bg.fill.fore_color.rgb = palette["bg"]

    strip = slide.shapes.add_shape(MSO_AUTO_SHAPE_TYPE.RECTANGLE, 0, 0, slide_width, Inches(0.16))
    strip.fill.solid()
    strip.fill.fore_color.rgb = palette["accent"]
    strip.line.fill.background()


def build_deck_pptx(slides: list[Slide], theme: SlideTheme, output_path: Path) -> Path:
    prs = Presentation()
    palette = _palette(theme)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    for idx, row in enumerate(slides):
        is_title = idx == 0
        slide = prs.slides.add_slide(prs.slide_layouts[_TITLE_LAYOUT if is_title else _CONTENT_LAYOUT])
        _decorate(slide, palette, prs.slide_width)

        title_shape = slide.shapes.title
        if title_shape is not None:
            title_shape.text = (row.title or "Untitled")[:120]
            _style_text(title_shape.text_frame, color=palette["title"], size_pt=34 if is_title else 28, bold=True)

        body_lines = _normalize_lines(row.body)
        if len(slide.placeholders) > 1:
            body_frame = slide.placeholders[1].text_frame
        else:
            body_frame = slide.shapes.add_textbox(Inches(0.9), Inches(1.7), Inches(8.2), Inches(4.5)).text_frame
        _write_lines(body_frame, body_lines)
        _style_text(body_frame, color=palette["body"], size_pt=16 if is_title else 18, bold=False)

    prs.save(str(output_path))
    logger.info("deck_exported path=%s slides=%d theme=%s", output_path.name, len(slides), theme.id)
    return output_path
