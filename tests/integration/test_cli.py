import json
import pandas as pd
import pytest
from pathlib import Path
from typer.testing import CliRunner

from expense_classifier import cli
from expense_classifier.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def fresh_state():
    """Each invocation builds its engine from the test's database"""
    cli.state.engine = None
    cli.state.store = None
    yield
    if cli.state.store is not None:
        cli.state.store.db.close()
    cli.state.engine = None
    cli.state.store = None


@pytest.fixture
def db(tmp_path) -> Path:
    return tmp_path / "patterns.db"


def invoke(db: Path, *args: str):
    """Run a command against a database, as a fresh process would"""
    result = runner.invoke(app, ["--db", str(db), *args])
    if cli.state.store is not None:
        cli.state.store.db.close()
    cli.state.engine = None
    cli.state.store = None
    return result


@pytest.fixture
def expenses_csv(tmp_path) -> Path:
    path = tmp_path / "expenses.csv"
    path.write_text(
        "id,description,notes,amount,category_name\n"
        "1,WAPDA electricity bill,March,4500,Miscellaneous\n"
        "2,Generator diesel refill,,3000,Utilities\n"
        "3,Diesel for generator,,2800,Utilities\n"
        "4,Qzx 77,,10,Miscellaneous\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def categories_csv(tmp_path) -> Path:
    path = tmp_path / "categories.csv"
    path.write_text(
        "id,name,color\n"
        "c1,Utilities,#f59e0b\n"
        "c2,Food & Dining,#10b981\n"
        "c3,Miscellaneous,#6b7280\n",
        encoding="utf-8",
    )
    return path


@pytest.mark.integration
class TestSuggestCommand:

    def test_suggest(self, db: Path):
        result = invoke(db, "suggest", "WAPDA bijli bill")

        assert result.exit_code == 0
        assert "Utilities" in result.output

    def test_no_suggestions(self, db: Path):
        result = invoke(db, "suggest", "zz")

        assert result.exit_code == 0
        assert "No Suggestions" in result.output

    def test_explain(self, db: Path):
        result = invoke(db, "explain", "electricity bill")

        assert result.exit_code == 0
        assert "electricity bill" in result.output


@pytest.mark.integration
class TestLearningCommands:

    def test_learn_persists_terms(self, db: Path, expenses_csv: Path, tmp_path: Path):
        # Act
        learned = invoke(db, "learn", str(expenses_csv))
        exported = invoke(db, "export-patterns", str(tmp_path / "export.json"))

        # Assert
        assert learned.exit_code == 0
        assert exported.exit_code == 0
        data = json.loads((tmp_path / "export.json").read_text(encoding="utf-8"))
        assert "generator" in data["Utilities"]
        assert "Miscellaneous" not in data

    def test_import_and_reset(self, db: Path, tmp_path: Path):
        export = tmp_path / "in.json"
        export.write_text('{"Security": ["chowkidar"]}', encoding="utf-8")

        imported = invoke(db, "import-patterns", str(export))
        listed = invoke(db, "patterns")
        reset = invoke(db, "reset-patterns", "--yes")
        after = invoke(db, "export-patterns", str(tmp_path / "after.json"))

        assert imported.exit_code == 0
        assert "chowkidar" in listed.output
        assert reset.exit_code == 0
        assert after.exit_code == 0
        assert json.loads((tmp_path / "after.json").read_text(encoding="utf-8")) == {}

    def test_import_rejects_bad_file(self, db: Path, tmp_path: Path):
        bad = tmp_path / "bad.json"
        bad.write_text("[1, 2]", encoding="utf-8")

        result = invoke(db, "import-patterns", str(bad))

        assert result.exit_code == 1


@pytest.mark.integration
class TestReclassifyCommand:

    def test_preview_writes_nothing(self, db: Path, expenses_csv: Path, categories_csv: Path):
        result = invoke(db, "reclassify", str(expenses_csv), "-c", str(categories_csv))

        assert result.exit_code == 0
        assert "Preview only" in result.output
        assert not expenses_csv.with_name("expenses.reclassified.csv").exists()

    def test_apply_writes_output(
        self,
        db: Path,
        expenses_csv: Path,
        categories_csv: Path,
        tmp_path: Path
    ):
        # Arrange
        output = tmp_path / "out.csv"

        # Act
        result = invoke(
            db, "reclassify", str(expenses_csv),
            "-c", str(categories_csv), "--apply", "-o", str(output)
        )

        # Assert
        assert result.exit_code == 0
        saved = pd.read_csv(output, dtype=str, keep_default_na=False)
        first = saved[saved["id"] == "1"].iloc[0]
        assert first["category_id"] == "c1"
        assert first["category_name"] == "Utilities"
        odd = saved[saved["id"] == "4"].iloc[0]
        assert odd["category_name"] == "Miscellaneous"

    def test_unsupported_file(self, db: Path, tmp_path: Path):
        path = tmp_path / "expenses.xlsx"
        path.write_bytes(b"")

        result = invoke(db, "reclassify", str(path))

        assert result.exit_code == 1
        assert "No parser registered" in result.output
