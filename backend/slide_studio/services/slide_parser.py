from __future__ import annotations

import re
from dataclasses import dataclass


FALLBACK_TITLE = "Presentation"
_HEADING = re.compile(r"^#{1,2} ")


@dataclass(frozen=True)
class Slide:
    title: str
    body: str


def _is_heading(line: str) -> bool:
    return bool(_HEADING.match(line))


def _heading_title(line: str) -> str:
    return _HEADING.sub("", line, count=1).strip()


def parse_slides(text: str) -> list[Slide]:
    """Split generated text into slides at level-1 and level-2 heading lines.

    Body lines are kept verbatim (minus blank lines) and joined with ``\\n``.
    A heading with nothing under it still yields a slide; text before the
    first heading becomes an untitled slide. Input with no usable lines yields
    a single slide titled ``Presentation``.
    """
    slides: list[Slide] = []
    title: str | None = None
    body: list[str] = []

    def close() -> None:
        if title is None and not body:
            return
        slides.append(Slide(title=title or "", body="\n".join(body)))

    for raw in (text or "").splitlines():
        line = raw.rstrip("\r")
        if _is_heading(line):
            close()
            title = _heading_title(line)
            body = []
        elif line.strip():
            body.append(line)

    close()

    if not slides:
        # only blank lines were seen, so the raw text reduces to nothing
        return [Slide(title=FALLBACK_TITLE, body=(text or "").strip())]
    return slides


def render_slides(slides: list[Slide]) -> str:
    blocks: list[str] = []
    for slide in slides:
        lines = [f"# {slide.title}"]
        if slide.body:
            lines.append(slide.body)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
