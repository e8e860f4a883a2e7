"""TabSense - summarize and group open browser tabs"""

from __future__ import annotations

__version__ = "1.0.0"


def __getattr__(name: str):
    """
    Lazy imports so ``import tabsense`` does not pull in FastAPI or httpx.
    """
    if name in ("Topic", "validate_topic"):
        from tabsense.classification import topics

        return getattr(topics, name)

    if name == "classify_locally":
        from tabsense.classification.local_classifier import classify_locally

        return classify_locally

    if name == "TabRecord":
        from tabsense.storage.models import TabRecord

        return TabRecord

    if name == "build_services":
        from tabsense.runtime.services import build_services

        return build_services

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "Topic",
    "validate_topic",
    "classify_locally",
    "TabRecord",
    "build_services",
]
