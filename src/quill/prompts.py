# quill: Load prompt templates from quill.resources via importlib.resources and optionally format them with dynamic values.

from importlib import resources


def get_prompt(name: str, **kwargs) -> str:
    """
    Load a text prompt from the quill.resources package.

    If kwargs are provided, apply str.format(**kwargs) to the template so it can
    contain placeholders (e.g., {filename}). Substituted values are inserted
    verbatim, braces included. Without kwargs the raw text is returned.
    """
    data = resources.files("quill.resources").joinpath(name).read_text(encoding="utf-8")
    if kwargs:
        return data.format(**kwargs)
    return data
