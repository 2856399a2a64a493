"""
Parser Registry for Tree-sitter

Manages the tree-sitter parsers for component markup (svelte) and for
the script language of tag expressions and <script> blocks.
"""

import threading

try:
    from tree_sitter import Parser
    from tree_sitter_language_pack import get_language
except ImportError as e:
    raise ImportError(
        "tree-sitter-language-pack is required. " "Install with: pip install tree-sitter tree-sitter-language-pack"
    ) from e

from svelte_unsafe_html.exceptions import ParserUnavailableError
from svelte_unsafe_html.observability import get_logger

logger = get_logger(__name__)


class ParserRegistry:
    """
    Registry for tree-sitter parsers.

    Supports:
    - Svelte (component markup)
    - JavaScript (default for expressions)
    - TypeScript (<script lang="ts">)

    Languages are loaded once and shared. tree-sitter Parser objects are
    not safe to share between threads, so each thread gets its own.
    """

    def __init__(self):
        self._languages: dict[str, object] = {}
        self._lock = threading.Lock()
        self._local = threading.local()
        self._setup_languages()

    def _register_language(self, name: str, aliases: list[str] | None = None) -> None:
        """
        Register a language and its aliases.

        Args:
            name: Language name (e.g., "javascript", "typescript")
            aliases: Optional list of aliases (e.g., ["js"] for javascript)
        """
        try:
            lang = get_language(name)
        except Exception as e:
            logger.warning("grammar_load_failed", language=name, error=str(e))
            return

        self._languages[name] = lang
        for alias in aliases or []:
            self._languages[alias] = lang
        logger.debug("grammar_loaded", language=name, aliases=aliases or [])

    def _setup_languages(self):
        """Setup Tree-sitter languages"""
        with self._lock:
            self._register_language("javascript", ["js"])
            self._register_language("typescript", ["ts"])
            self._register_language("svelte")

    def get_parser(self, language: str) -> Parser:
        """
        Get this thread's parser for the specified language.

        Args:
            language: Language name or alias (svelte, javascript, js, typescript, ts)

        Returns:
            Parser instance

        Raises:
            ParserUnavailableError: If the grammar is not available
        """
        language = language.lower()

        parsers: dict[str, Parser] | None = getattr(self._local, "parsers", None)
        if parsers is None:
            parsers = {}
            self._local.parsers = parsers

        if language in parsers:
            return parsers[language]

        lang = self._languages.get(language)
        if lang is None:
            raise ParserUnavailableError(
                f"Language not supported: {language}",
                details={"supported": self.supported_languages},
            )

        parser = Parser(lang)
        parsers[language] = parser
        return parser

    def supports_language(self, language: str) -> bool:
        """Check if language is supported"""
        return language.lower() in self._languages

    @property
    def supported_languages(self) -> list[str]:
        """Get list of supported languages"""
        aliases = {"js", "ts"}
        return sorted(lang for lang in self._languages if lang not in aliases)


# Global registry instance
_registry: ParserRegistry | None = None
_registry_lock = threading.Lock()


def get_registry() -> ParserRegistry:
    """Get global parser registry instance"""
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = ParserRegistry()
    return _registry
