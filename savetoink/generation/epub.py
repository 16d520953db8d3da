"""EPUB document generation from stored articles."""

import html
import io
import logging
from pathlib import Path
from typing import List

from ebooklib import epub

from ..errors import DocumentGenerationError
from ..models import Article

logger = logging.getLogger(__name__)

DEFAULT_CHAPTER_TITLE = "Chapter 1"
DEFAULT_CHAPTER_FILENAME = "chapter1.xhtml"
DEFAULT_LANGUAGE = "en"

_HEADER_STYLE = (
    "font-size: 0.85em; color: #666; margin-bottom: 2em; "
    "padding: 1em; border-left: 3px solid #ccc; background-color: #f9f9f9;"
)


def build_metadata_header(article: Article) -> str:
    """Render source, reading time and dates as a small block above the body."""
    lines: List[str] = []

    source = article.site_name
    if article.source_domain:
        source = f"{source} ({article.source_domain})" if source else article.source_domain
    if source:
        lines.append(f"<p><strong>Source:</strong> {html.escape(source)}</p>")

    if article.reading_time_minutes > 0:
        lines.append(f"<p><strong>Reading time:</strong> {article.reading_time_minutes} min</p>")

    if article.published_at:
        lines.append(f"<p><strong>Published:</strong> {article.published_at:%Y-%m-%d}</p>")

    if article.created_at:
        lines.append(f"<p><strong>Added:</strong> {article.created_at:%Y-%m-%d}</p>")

    if article.content_type:
        lines.append(f"<p><strong>Type:</strong> {html.escape(article.content_type.title())}</p>")

    if not lines:
        return ""
    return f'<div style="{_HEADER_STYLE}">\n' + "".join(lines) + "\n</div>"


class EpubGenerator:
    """Build single-chapter EPUB documents."""

    def generate(self, article: Article) -> bytes:
        """Create an EPUB for the article and return its bytes."""
        language = article.language or DEFAULT_LANGUAGE

        book = epub.EpubBook()
        book.set_identifier(article.id or article.url)
        book.set_title(article.title or "Untitled")
        book.set_language(language)
        if article.author:
            book.add_author(article.author)
        if article.excerpt:
            book.add_metadata("DC", "description", article.excerpt)

        chapter = epub.EpubHtml(
            title=DEFAULT_CHAPTER_TITLE,
            file_name=DEFAULT_CHAPTER_FILENAME,
            lang=language,
        )
        chapter.content = (
            f"<html><body>{build_metadata_header(article)}{article.content}</body></html>"
        )

        book.add_item(chapter)
        book.toc = [chapter]
        book.add_item(epub.EpubNcx())
        book.add_item(epub.EpubNav())
        book.spine = ["nav", chapter]

        buffer = io.BytesIO()
        try:
            epub.write_epub(buffer, book)
        except Exception as e:
            raise DocumentGenerationError(f"failed to write EPUB: {e}") from e

        return buffer.getvalue()

    def write_to_file(self, article: Article, output_path: Path) -> Path:
        """Generate an EPUB and write it to ``output_path``."""
        data = self.generate(article)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            output_path.write_bytes(data)
        except OSError as e:
            raise DocumentGenerationError(f"failed to write EPUB file: {e}") from e

        logger.info("Wrote %d bytes to %s", len(data), output_path)
        return output_path
