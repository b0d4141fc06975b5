"""Rendering of an article into a complete XHTML document."""

from __future__ import annotations

from html import escape

from .errors import TemplateError
from .models import Article

ARTICLE_XHTML = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml" lang="{language}" xml:lang="{language}">
<head>
<meta charset="utf-8"/>
<title>{title}</title>
</head>
<body>
<h1>{title}</h1>
{html}
</body>
</html>
"""


def render_article(article: Article, language: str = "en") -> bytes:
    """Embed the article title and body into the XHTML skeleton.

    The title is escaped; the body is inserted as markup.
    """
    if not isinstance(article.title, str):
        raise TemplateError(f"article title must be a string, got {type(article.title).__name__}")
    if not isinstance(article.html, str):
        raise TemplateError(f"article body must be a string, got {type(article.html).__name__}")
    rendered = ARTICLE_XHTML.format(
        language=escape(language),
        title=escape(article.title),
        html=article.html,
    )
    return rendered.encode("utf-8")
