from __future__ import annotations

import logging
from time import perf_counter

import requests

from slide_studio.config import settings
from slide_studio.providers.base import BaseLLMProvider, preview_text
from slide_studio.schemas import ResearchOut, ResearchRequest
from slide_studio.services.prompt_templates import build_research_prompts
from slide_studio.services.themes import is_known_theme


logger = logging.getLogger("slide_studio.research")

GENERIC_FAILURE = "Failed to process research request"


def _clip(text: str, limit: int) -> str:
    return (text or "")[:limit]


def _exa_search(query: str, max_results: int) -> list[dict]:
    if not settings.exa_api_key:
        return []

    headers = {
        "x-api-key": settings.exa_api_key,
        "Content-Type": "application/json",
    }
    payload = {
        "query": query,
        "type": "auto",
        "numResults": max_results,
        "text": True,
    }

    response = requests.post(settings.exa_search_url, headers=headers, json=payload, timeout=20)
    response.raise_for_status()
    rows = response.json().get("results", [])

    results: list[dict] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        url = str(row.get("url") or "").strip()
        if not url:
            continue
        excerpt = str(row.get("text") or row.get("summary") or "").strip()
        results.append(
            {
                "title": str(row.get("title") or "Untitled"),
                "url": url,
                "excerpt": _clip(excerpt, 1200),
            }
        )
    return results


def search_web(query: str, max_results: int = 4) -> list[dict]:
    try:
        return _exa_search(query, max_results=max_results)
    except Exception as exc:
        logger.warning("web_search_failed query=%s reason=%s", preview_text(query, 80), exc)
        return []


def web_source_documents(topic: str) -> list[str]:
    return [
        f"{row['title']} ({row['url']})\n{row['excerpt']}"
        for row in search_web(topic, max_results=settings.web_search_results)
        if row.get("excerpt")
    ]


def run_research(req: ResearchRequest, provider: BaseLLMProvider) -> ResearchOut:
    """Ask the model for slide text about ``req.topic``.

    Never raises: any failure while building, sending or reading the request
    comes back as ``success=False`` with a generic message.
    """
    started = perf_counter()
    try:
        if not is_known_theme(req.theme_id):
            logger.info("research_unknown_theme theme_id=%s", req.theme_id)

        documents = list(req.documents)
        if req.include_web_sources:
            documents.extend(web_source_documents(req.topic))

        system, user = build_research_prompts(
            topic=req.topic,
            slide_count=req.slide_count,
            flags={
                "is_educational_focus": req.is_educational_focus,
                "include_images": req.include_images,
                "include_examples": req.include_examples,
                "simple_language": req.simple_language,
                "include_questions": req.include_questions,
            },
            documents=documents,
            prompt_template=req.prompt_template,
            prompt_preset=req.prompt_preset,
        )
        result = provider.generate_text(system_prompt=system, user_prompt=user)
    except Exception as exc:
        logger.error(
            "research_failed provider=%s topic=%s duration_sec=%.2f reason=%s",
            provider.name,
            preview_text(req.topic, 80),
            perf_counter() - started,
            exc,
        )
        return ResearchOut(success=False, error=GENERIC_FAILURE)

    logger.info(
        "research_done provider=%s topic=%s documents=%d duration_sec=%.2f output_chars=%d",
        provider.name,
        preview_text(req.topic, 80),
        len(documents),
        perf_counter() - started,
        len(result.text),
    )
    return ResearchOut(success=True, content=result.text, usage=result.usage)
