from __future__ import annotations

from slide_studio.presentation.settings import CamelModel


class SlideTheme(CamelModel):
    id: str
    name: str
    description: str
    primary_color: str
    secondary_color: str
    font_family: str
    accent_color: str


DEFAULT_THEMES: list[SlideTheme] = [
    SlideTheme(
        id="clean",
        name="Classic",
        description="Minimal, professional design",
        primary_color="#ffffff",
        secondary_color="#f8f9fa",
        font_family="'Inter', sans-serif",
        accent_color="#3b82f6",
    ),
    SlideTheme(
        id="education",
        name="Educational",
        description="Colourful and classroom friendly",
        primary_color="#f0f9ff",
        secondary_color="#e0f2fe",
        font_family="'Nunito', sans-serif",
        accent_color="#0ea5e9",
    ),
    SlideTheme(
        id="dark",
        name="Dark",
        description="High contrast, good for bright rooms",
        primary_color="#1e293b",
        secondary_color="#0f172a",
        font_family="'Inter', sans-serif",
        accent_color="#38bdf8",
    ),
    SlideTheme(
        id="pastel",
        name="Pastel",
        description="Soft, welcoming colours",
        primary_color="#fdf2f8",
        secondary_color="#fbcfe8",
        font_family="'Quicksand', sans-serif",
        accent_color="#ec4899",
    ),
    SlideTheme(
        id="nature",
        name="Nature",
        description="Greens and natural tones",
        primary_color="#f0fdf4",
        secondary_color="#dcfce7",
        font_family="'Poppins', sans-serif",
        accent_color="#22c55e",
    ),
]

_BY_ID = {theme.id: theme for theme in DEFAULT_THEMES}


def _normalize(theme_id: str | None) -> str:
    return (theme_id or "").strip().lower()


def is_known_theme(theme_id: str | None) -> bool:
    return _normalize(theme_id) in _BY_ID


def get_theme(theme_id: str | None, default: str = "clean") -> SlideTheme:
    return _BY_ID.get(_normalize(theme_id)) or _BY_ID.get(_normalize(default)) or DEFAULT_THEMES[0]
