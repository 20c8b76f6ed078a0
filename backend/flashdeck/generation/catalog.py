"""Allow-list of completion models accepted for generation."""

ALLOWED_MODELS: tuple[str, ...] = (
    "openai/gpt-4o-mini",
    "openai/gpt-4",
    "openai/gpt-3.5-turbo",
    "anthropic/claude-3-sonnet",
    "anthropic/claude-3-haiku",
)
DEFAULT_MODEL = "openai/gpt-4o-mini"
MODEL_ALIASES: dict[str, str] = {"default": DEFAULT_MODEL}


def resolve_model(model: str | None) -> str | None:
    """Return the allow-listed model id for ``model``, or None when it is not allowed."""

    if model is None:
        return DEFAULT_MODEL
    clean = model.strip()
    clean = MODEL_ALIASES.get(clean, clean)
    if clean in ALLOWED_MODELS:
        return clean
    return None
