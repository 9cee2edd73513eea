import importlib
from pathlib import Path
from typing import Any, Dict, Optional, Type

from expense_classifier.config.settings import ConfigLoader
from expense_classifier.parsers.base import ExpenseFileParser


class ParserFactory:
    """
    Factory for creating file parsers.

    Uses a registry pattern to map file suffixes to parser classes.
    """

    _locked = False
    _registry: Dict[str, Type[ExpenseFileParser]] = {}

    @classmethod
    def register(cls, suffix: str, parser_class: Type[ExpenseFileParser]) -> None:
        """
        Register a parser for a file suffix.

        Args:
            suffix: File suffix including the dot (e.g. '.csv')
            parser_class: The parser class

        Raises:
            ValueError: If a parser is already registered for the suffix
            TypeError: If parser_class doesn't inherit from ExpenseFileParser
            RuntimeError: If the parser registry is locked

        Example:
            ParserFactory.register('.csv', CsvExpenseParser)
        """
        if cls._locked:
            raise RuntimeError("Registry is locked, cannot add more parsers")

        suffix = suffix.lower()
        if suffix in cls._registry:
            raise ValueError(f"Parser for '{suffix}' is already registered")

        if not issubclass(parser_class, ExpenseFileParser):
            raise TypeError(f"{parser_class} must inherit from ExpenseFileParser")

        cls._registry[suffix] = parser_class

    @classmethod
    def lock_registry(cls):
        """Prevent further registration (call after app initialization)"""
        cls._locked = True

    @classmethod
    def create_parser(cls, filepath: Path) -> ExpenseFileParser:
        """
        Create a parser instance for a file, chosen by its suffix.

        Raises:
            ValueError: If no parser is registered for the suffix

        Example:
            parser = ParserFactory.create_parser(Path('expenses.csv'))
            expenses = parser.parse(Path('expenses.csv'))
        """
        if not cls._registry:
            cls.load_parsers_from_config()

        suffix = Path(filepath).suffix.lower()
        if suffix not in cls._registry:
            available = ', '.join(cls._registry.keys())
            raise ValueError(
                f"No parser registered for '{suffix}' files. "
                f"Available formats: {available}"
            )

        return cls._registry[suffix]()

    @classmethod
    def get_available_formats(cls) -> list[str]:
        """Return list of all registered file suffixes"""
        return list(cls._registry.keys())

    @classmethod
    def load_parsers_from_config(cls, config: Optional[Dict[str, Any]] = None) -> None:
        """
        Load and register parsers from configuration.

        Suffixes that are already registered are left alone, so loading
        twice is harmless.

        Args:
            config: Optional config dict. If None, loads from ConfigLoader.

        Example (testing):
            test_config = {"parsers": [{"suffix": ".csv", "class": "..."}]}
            ParserFactory.load_parsers_from_config(config=test_config)
        """
        if config is None:
            config = ConfigLoader.load_parsers_config()

        for parser_config in config["parsers"]:
            suffix = str(parser_config["suffix"]).lower()
            if suffix in cls._registry:
                continue

            module_path, class_name = str(parser_config["class"]).rsplit(".", 1)
            module = importlib.import_module(module_path)
            parser_class = getattr(module, class_name)

            cls.register(suffix, parser_class)

    @classmethod
    def _reset(cls) -> None:
        """Clear the registry (tests only)"""
        cls._registry = {}
        cls._locked = False
