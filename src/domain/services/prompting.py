"""Prompt builders for the translation provider."""

TRANSLATION_TEMPERATURE = 0.3
TRANSLATION_MAX_TOKENS = 2000
STORY_TEMPERATURE = 0.7
STORY_MAX_TOKENS = 3000
STORY_PAGE_COUNT = 5


def build_translation_prompt(language_name: str) -> str:
    """System instruction for translating one page into ``language_name``."""
    return (
        "You are a professional translator for children's storybooks. "
        f"Translate the following text to {language_name}. "
        "Keep it child-friendly, maintain the narrative flow, and preserve any "
        "special formatting or punctuation. Only return the translated text, nothing else."
    )


def build_story_prompt(language_name: str, page_count: int = STORY_PAGE_COUNT) -> str:
    """System instruction for drafting a short story as JSON."""
    return (
        f"You are a creative children's story writer. Create a short children's story "
        f"({page_count} pages) based on the given prompt. Write in {language_name}. "
        "For each page, provide:\n"
        "1. A brief text snippet (2-3 sentences) suitable for that page\n"
        "2. An image generation prompt describing what the illustration should look like\n\n"
        "Format your response as a JSON object with this structure:\n"
        "{\n"
        '  "title": "Story Title",\n'
        '  "pages": [\n'
        '    { "text": "Page text here", "imagePrompt": "Description for image generation" }\n'
        "  ]\n"
        "}"
    )
