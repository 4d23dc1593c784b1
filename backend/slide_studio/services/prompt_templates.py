from __future__ import annotations

import json


PROMPT_PRESETS: dict[str, str] = {
    "standard": """You are an expert in building presentations and in academic research. Your job is to:

1. Research the given topic in depth
2. Organise the content into coherent, well-structured slides
3. Include current, relevant information
4. Cite reliable sources for each piece of information

Expected response format:
- Presentation title
- Slide structure with titles and detailed content
- Suggested visual elements
- Sources and references

Keep a professional, educational tone.""",
    "educational": """You are an expert in education and in building teaching material. Your job is to:

1. Create classroom-ready educational slides on the given topic
2. Adapt the content to the appropriate school level
3. Structure the slides clearly and didactically
4. Include practical examples and analogies that aid understanding
5. Suggest activities or questions for class discussion

Expected response format:
- An engaging title slide
- Learning objectives
- Explanatory content in accessible language
- Concrete examples and suggested images
- Activities that reinforce the content
- Questions that spark discussion

Keep an educational, engaging tone suited to students.""",
    "simplified": """You are an expert in simplifying complex ideas. Your job is to:

1. Create slides on the given topic using plain, accessible language
2. Explain hard concepts so that beginners can follow them
3. Use everyday analogies and examples
4. Avoid unnecessary technical jargon

Expected response format:
- A simple, direct title
- Explanations in everyday language
- Comparisons with familiar situations
- Suggested illustrations and practical examples

Keep a conversational, friendly tone.""",
}

FLAG_CLAUSES: list[tuple[str, str]] = [
    (
        "is_educational_focus",
        "This presentation will be used in a classroom.\n"
        "Adapt the content for teaching, using language suited to students.\n"
        "Include learning objectives at the start and a summary at the end.",
    ),
    ("include_images", "Suggest relevant images or visual elements for each slide."),
    ("include_examples", "Include practical examples and real cases that illustrate the concepts."),
    (
        "simple_language",
        "Use simple, accessible language and avoid unnecessary technical terms.\n"
        "Explain complex concepts clearly and directly.",
    ),
    ("include_questions", "Add discussion or reflection questions at the end of the presentation."),
]

CHAT_DEFAULT_CONTEXT = "Slide creation"


def system_directive(prompt_template: str | None, prompt_preset: str = "standard") -> str:
    if prompt_template and prompt_template.strip():
        return prompt_template
    return PROMPT_PRESETS.get(prompt_preset, PROMPT_PRESETS["standard"])


def build_research_prompts(
    *,
    topic: str,
    slide_count: int,
    flags: dict[str, bool],
    documents: list[str] | None = None,
    prompt_template: str | None = None,
    prompt_preset: str = "standard",
) -> tuple[str, str]:
    """Return ``(system, user)`` prompts for a research request.

    The user prompt is the base directive, then one fixed clause per enabled
    flag in a stable order, then the reference documents verbatim.
    """
    user = (
        f"Create a complete presentation about: {topic}\n\n"
        f"Desired number of slides: {slide_count}\n\n"
        "Structure the presentation with:\n"
        "- Title slide\n"
        "- Introduction/context\n"
        "- Development of the topic (several slides)\n"
        "- Conclusions/next steps\n"
        "- References\n\n"
        "Start every slide with a markdown heading line ('# ' or '## ') holding its title.\n"
    )

    for flag, clause in FLAG_CLAUSES:
        if flags.get(flag):
            user += f"\n{clause}\n"

    if documents:
        user += "\nReference documents provided:\n" + "\n\n".join(documents)

    return system_directive(prompt_template, prompt_preset), user


def build_chat_system_prompt(context: str | None) -> str:
    return (
        "You are an assistant specialised in creating and refining presentations.\n\n"
        f"Session context: {(context or '').strip() or CHAT_DEFAULT_CONTEXT}\n\n"
        "Your responsibilities:\n"
        "- Help refine and improve existing slides\n"
        "- Suggest improvements to content and structure\n"
        "- Answer questions about the presentation topic\n"
        "- Provide current, accurate information\n"
        "- Stay consistent with the material already created\n\n"
        "Always give constructive, specific answers that improve the presentation."
    )


def build_quiz_prompts(*, content: str, question_types: list[str], question_count: int) -> tuple[str, str]:
    system = (
        "Return JSON only with key questions (array). Each question object has: "
        "type (one of multiple, truefalse, short), question (string), "
        "options (array of strings, multiple only), correctAnswer (string for multiple, boolean for truefalse, "
        "omitted for short)."
    )
    user = json.dumps(
        {
            "slide_content": content,
            "allowed_types": question_types,
            "question_count": question_count,
        },
        ensure_ascii=False,
    )
    return system, user
