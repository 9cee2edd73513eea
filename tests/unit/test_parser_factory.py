import pytest
from expense_classifier.parsers.factory import ParserFactory
from expense_classifier.parsers.csv_parser import CsvExpenseParser
from expense_classifier.parsers.json_parser import JsonExpenseParser


@pytest.mark.unit
@pytest.mark.usefixtures("clean_parser_registry")
class TestParserFactoryConfig:

    def test_load_parsers_from_custom_config(self):
        """Test loading parsers with injected config (no file I/O)"""

        # Arrange
        test_config = {
            "parsers": [
                {
                    "suffix": ".CSV",
                    "class": "expense_classifier.parsers.csv_parser.CsvExpenseParser"
                }
            ]
        }

        # Act
        ParserFactory.load_parsers_from_config(config=test_config)

        # Assert
        assert ParserFactory._registry == {".csv": CsvExpenseParser}
        assert ParserFactory._locked is False

    def test_loading_twice_is_harmless(self):
        test_config = {
            "parsers": [
                {"suffix": ".json", "class": "expense_classifier.parsers.json_parser.JsonExpenseParser"}
            ]
        }

        ParserFactory.load_parsers_from_config(config=test_config)
        ParserFactory.load_parsers_from_config(config=test_config)

        assert ParserFactory.get_available_formats() == [".json"]

    def test_default_config(self):
        ParserFactory.load_parsers_from_config()

        assert set(ParserFactory.get_available_formats()) == {".csv", ".json"}

    def test_load_parsers_with_invalid_module_path(self):
        """Test error handling for invalid parser class"""
        test_config = {"parsers": [{"suffix": ".xml", "class": "nonexistent.module.FakeParser"}]}

        with pytest.raises(ModuleNotFoundError):
            ParserFactory.load_parsers_from_config(config=test_config)

    def test_load_parsers_with_malformed_config(self):
        """Test handling of malformed config"""
        bad_config = {
            "parsers": [
                {
                    "suffix": ".csv"
                    # Missing 'class' key!
                }
            ]
        }

        with pytest.raises(KeyError):
            ParserFactory.load_parsers_from_config(config=bad_config)


@pytest.mark.unit
@pytest.mark.usefixtures("clean_parser_registry")
class TestParserFactoryRegistry:

    def test_successful_registry(self):
        ParserFactory.register('.csv', CsvExpenseParser)

        assert ParserFactory._registry[".csv"] == CsvExpenseParser
        assert ParserFactory._locked is False

    def test_failure_register_after_lock(self):
        ParserFactory.lock_registry()

        with pytest.raises(RuntimeError):
            ParserFactory.register('.csv', CsvExpenseParser)

    def test_failure_register_with_same_suffix(self):
        ParserFactory.register('.csv', CsvExpenseParser)

        with pytest.raises(ValueError):
            ParserFactory.register('.CSV', JsonExpenseParser)

    def test_failure_register_with_invalid_parser(self):
        with pytest.raises(TypeError):
            ParserFactory.register('.csv', ParserFactory)  # Any class thats not an ExpenseFileParser


@pytest.mark.unit
@pytest.mark.usefixtures("clean_parser_registry")
class TestParserFactoryCreateParser:

    def test_parser_chosen_by_suffix(self):
        ParserFactory.register('.csv', CsvExpenseParser)
        ParserFactory.register('.json', JsonExpenseParser)

        assert ParserFactory.create_parser('exports/expenses.CSV').__class__ is CsvExpenseParser
        assert ParserFactory.create_parser('expenses.json').__class__ is JsonExpenseParser

    def test_empty_registry_loads_config(self):
        parser = ParserFactory.create_parser('expenses.csv')

        assert isinstance(parser, CsvExpenseParser)

    def test_failure_on_unregistered_suffix(self):
        ParserFactory.register('.csv', CsvExpenseParser)

        with pytest.raises(ValueError, match="Available formats: .csv"):
            ParserFactory.create_parser('expenses.xlsx')
