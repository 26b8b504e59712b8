"""Markdown document wrapped around a raw model analysis."""

from __future__ import annotations

from datetime import datetime

__all__ = ["build_analysis_markdown"]


def build_analysis_markdown(analysis: str, *, provider_label: str, generated_at: datetime) -> str:
    return (
        "# Screen Analysis\n"
        "\n"
        f"**Date:** {generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n"
        f"**Provider:** {provider_label}\n"
        "\n"
        "---\n"
        "\n"
        "## Analysis\n"
        "\n"
        f"{analysis}\n"
        "\n"
        "---\n"
        "\n"
        "*Generated with SnapSight AI*\n"
    )
