"""Instruction texts sent along with image requests."""

from typing import Optional

DEFAULT_LANGUAGE = "en"

# Substituted when an image is sent without any prompt text
FALLBACK_INSTRUCTION = "Analyze this image and explain it."

IMAGE_PREAMBLES = {
    "en": (
        "Analyze and explain this image. It is most likely a German exercise "
        "or lesson. Help me with my homework. Approach me like a teacher and "
        "tell me if I made mistakes. You are my German teacher. I will ask you "
        "my questions. Please answer in English. Put German expressions in "
        "italics. The image is attached: "
    ),
    "de": (
        "Analysiere und erkläre dieses Bild. Es handelt sich wahrscheinlich um "
        "eine Deutschübung oder eine Lektion. Hilf mir bei meinen Hausaufgaben. "
        "Geh wie ein Lehrer mit mir um und sag mir, wenn ich Fehler gemacht "
        "habe. Du bist mein Deutschlehrer. Ich werde dir meine Fragen stellen. "
        "Bitte antworte auf Deutsch. Setze deutsche Ausdrücke kursiv. Das Bild "
        "ist angehängt: "
    ),
    "tr": (
        "Bu resmi analiz et ve açıkla. Bu muhtemelen bir Almanca çalışma veya "
        "dersidir. Ödevim için yardımcı ol. Bana öğretmen gibi yaklaş hatalarım "
        "varsa söyle. Sen benim Almanca öğretmenimsin. Sorularımı sana "
        "soracağım. Cevabın lütfen Türkçe olsun. Almanca ifadeleri italic ver. "
        "Resmi ekte gönderiyorum: "
    ),
}

SUPPORTED_LANGUAGES = tuple(IMAGE_PREAMBLES)


def get_image_preamble(language: Optional[str] = None) -> str:
    """Return the image preamble for a locale, falling back to English."""
    return IMAGE_PREAMBLES.get(
        (language or DEFAULT_LANGUAGE).lower(), IMAGE_PREAMBLES[DEFAULT_LANGUAGE]
    )


def compose_image_prompt(prompt_text: str, preamble: Optional[str] = None) -> str:
    """
    Build the text part of an image message.

    Args:
        prompt_text: What the user typed (may be empty)
        preamble: Instruction prepended to the prompt (default: English preamble)

    Returns:
        Preamble followed by the prompt, or by FALLBACK_INSTRUCTION if the
        prompt is empty
    """
    if preamble is None:
        preamble = get_image_preamble()
    text = prompt_text if prompt_text and prompt_text.strip() else FALLBACK_INSTRUCTION
    return preamble + text
