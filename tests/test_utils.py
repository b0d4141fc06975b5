"""
Unit tests for string helpers.
"""

from article_epub.utils import display_name, safe_entry_name


def test_safe_entry_name():
    assert safe_entry_name("photo.final.JPG") == "photo.final.JPG"
    assert safe_entry_name("a b?c.png") == "a-b-c.png"
    assert safe_entry_name("..") == ""


def test_display_name():
    assert display_name("My Article. ") == "My Article.epub"
    assert display_name("Notes", ".zip") == "Notes.zip"
    assert display_name("") == "article.epub"
