"""Model id <-> display label mapping used when writing SOUL.md."""

import re
from collections.abc import Mapping

_SPLIT = re.compile(r"[-_\s]+")
_NUMERIC = re.compile(r"^\d+(\.\d+)?$")


class ModelLabeler:
    """
    Turns model ids into the labels written into the routing document.

    Known ids use the override table; anything else is derived from the
    last path segment, split on dashes, underscores and spaces, with each
    word capitalized and numeric parts left as they are:

        "qwen/qwen2.5-max" -> "Qwen2.5 Max"
        "openai/gpt-4.1"   -> "Gpt 4.1"
    """

    def __init__(self, overrides: Mapping[str, str] | None = None) -> None:
        self._overrides = dict(overrides or {})

    def label(self, model_id: str) -> str:
        if not model_id:
            return model_id
        if model_id in self._overrides:
            return self._overrides[model_id]

        short = model_id.rsplit("/", 1)[-1]
        parts = [part for part in _SPLIT.split(short) if part]
        return " ".join(part if _NUMERIC.match(part) else part[0].upper() + part[1:] for part in parts)

    def model_for_label(self, label: str) -> str | None:
        """
        Reverse lookup: find the model id whose label appears in text.

        The longest matching override label wins, so "Gemini 3 Flash" is not
        mistaken for a shorter label it contains.
        """
        text = label.strip().lower()
        best: tuple[int, str] | None = None
        for model_id, model_label in self._overrides.items():
            candidate = model_label.lower()
            if candidate in text and (best is None or len(candidate) > best[0]):
                best = (len(candidate), model_id)
        return best[1] if best else None
