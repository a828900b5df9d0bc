"""System and user instructions sent to the chat model."""

from __future__ import annotations

from .languages import display_name

CONTINUATION_PROMPT = (
    "Your previous response was cut off. Continue immediately after the last "
    "character you wrote, without repeating any sentence you have already "
    "written and without any introduction."
)


def translation_prompt(language: str, marker: str | None = None) -> str:
    """Build the system instruction for translating into ``language``.

    When ``marker`` is given the model is asked to write it right after the
    translation, which is how a complete answer is told apart from a
    truncated one.
    """
    language_name = display_name(language)
    prompt = (
        "You are a highly skilled translator with expertise in many languages. "
        "Your task is to identify the language of the text I provide and "
        f"accurately translate it into the {language_name} language while "
        "preserving the meaning, tone, and nuance of the original text. Please "
        "maintain proper grammar, spelling, and punctuation in the translated "
        "version. Keep the original formatting. The input and output are both "
        "in Markdown. No other information is needed than the text itself."
    )
    if marker is not None:
        prompt += (
            "\n\nImmediately after you finish the whole translation, write the "
            f"marker {marker} exactly as shown. Do not write anything after the "
            "marker, and do not use the marker anywhere else."
        )
    return prompt


def _output_format(paragraphs: int) -> str:
    if paragraphs == 1:
        return "- Produce a single Markdown paragraph\n"
    return (
        f"- Produce exactly {paragraphs} Markdown paragraphs, separated by "
        "blank lines\n"
    )


def summary_prompt(paragraphs: int = 1, language: str | None = None) -> str:
    """Build the system instruction for summarization.

    ``paragraphs`` is the exact number of paragraphs to request. With
    ``language`` the summary is also written in that language, so that
    summarizing and translating take a single request.
    """
    if paragraphs < 1:
        raise ValueError(f"paragraphs must be at least 1, got {paragraphs}")
    language_name = display_name(language) if language is not None else None
    noun = "paragraph" if paragraphs == 1 else f"in {paragraphs} paragraphs"
    prompt = (
        "You are a professional text summarization tool that processes "
        "Markdown-formatted text. Follow these guidelines to create summaries:\n"
        "\n"
        "1. Input Format\n"
        "- Expect Markdown-formatted text\n"
        "- Process both inline formatting (bold, italic, links) and block "
        "elements (headings, lists, code blocks)\n"
        "- Preserve the context of structured content\n"
        "\n"
        "2. Output Format\n"
        f"{_output_format(paragraphs)}"
        "- Do not include any headings or section markers\n"
        "- Strip all formatting except essential emphasis (bold for key terms)\n"
        "- Remove all links, keeping only the link text\n"
        "- Exclude code blocks, images, and other non-text elements\n"
        "- Do not include any meta text, separator lines, or decorative elements\n"
        "- Output only the summary text, with no introduction or conclusion markers\n"
        "\n"
        "3. Summarization Criteria\n"
        "- Include the core arguments and important points from the original text\n"
        "- Exclude supplementary explanations, examples, and repetitive content\n"
        "- Summarize to approximately 20% of the original length\n"
        "- Maintain the tone and perspective of the original text\n"
        "- Preserve factual information as presented\n"
        "- Retain key technical terms as they appear in the source\n"
        "\n"
        "4. Exclusions\n"
        "- Do not add personal opinions\n"
        "- Do not include inferred content not present in the original text\n"
        '- Avoid meta-expressions like "the text states," "in summary," or '
        '"to conclude"\n'
        "- Exclude footnotes, citations, and reference markers\n"
        "- Remove any front matter or metadata\n"
    )
    if language_name is not None:
        prompt += (
            "\n"
            "5. Output Language\n"
            f"- Write the summary in {language_name}, translating from the "
            "original language if it differs\n"
            "- Keep proper nouns and technical terms recognizable\n"
        )
    prompt += (
        "\nProcess the input Markdown text according to these guidelines and "
        f"output only the plain summary {noun} in Markdown format."
    )
    return prompt
