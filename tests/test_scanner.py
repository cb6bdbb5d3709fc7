"""
Tests for the file scanner.
"""

import pytest
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from complexityscanner.config import AnalyzerConfig
from complexityscanner.core.types import Language
from complexityscanner.scanner import ComplexityScanner, FileReport, ScanReport


TS_CODE = "export function route(req) {\n  if (req.ok && req.body) {\n    return 1;\n  }\n  return 0;\n}\n"
GO_CODE = "package main\n\nfunc main() {\n\tfor i := 0; i < 3; i++ {\n\t}\n}\n"
PY_CODE = "def handler(event):\n    return event or None\n"


@pytest.fixture
def project(tmp_path):
    """A small mixed-language source tree."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "routes.ts").write_text(TS_CODE)
    (tmp_path / "src" / "main.go").write_text(GO_CODE)
    (tmp_path / "handler.py").write_text(PY_CODE)
    (tmp_path / "README.md").write_text("# docs\n")
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "node_modules" / "dep.js").write_text("function dep() {}\n")
    return tmp_path


class TestComplexityScanner:
    """Tests for discovery and scanning."""

    def test_detect_language(self):
        """Test language detection from file extensions."""
        scanner = ComplexityScanner()
        assert scanner.detect_language("app.py") == Language.PYTHON
        assert scanner.detect_language("index.js") == Language.JAVASCRIPT
        assert scanner.detect_language("main.go") == Language.GO
        assert scanner.detect_language("App.tsx") == Language.TYPESCRIPT
        assert scanner.detect_language("README.md") is None

    def test_detect_language_with_overrides(self):
        """Test configured extension overrides."""
        scanner = ComplexityScanner(AnalyzerConfig(extension_overrides={".es6": "javascript"}))
        assert scanner.detect_language("legacy.es6") == Language.JAVASCRIPT

    def test_should_ignore(self, tmp_path):
        """Test exclude and include patterns."""
        scanner = ComplexityScanner(AnalyzerConfig(
            exclude_patterns=["*.min.js"],
            include_patterns=["*.ts"],
        ))
        base = str(tmp_path)
        assert scanner.should_ignore(os.path.join(base, "app.min.js"), base)
        assert scanner.should_ignore(os.path.join(base, "app.py"), base)
        assert not scanner.should_ignore(os.path.join(base, "app.ts"), base)
        assert not scanner.should_ignore(os.path.join(base, "src"), base, is_dir=True)

    def test_discover_files(self, project):
        """Test that ignored directories and unsupported files are skipped."""
        scanner = ComplexityScanner()
        files = sorted(os.path.relpath(f, project) for f in scanner.discover_files(str(project)))
        assert files == [
            "handler.py",
            os.path.join("src", "main.go"),
            os.path.join("src", "routes.ts"),
        ]

    def test_discover_skips_large_files(self, tmp_path):
        """Test the file size cap."""
        (tmp_path / "big.ts").write_text("x;\n" * 100)
        (tmp_path / "small.ts").write_text("x;\n")
        scanner = ComplexityScanner(AnalyzerConfig(max_file_size=50))
        files = [os.path.basename(f) for f in scanner.discover_files(str(tmp_path))]
        assert files == ["small.ts"]

    def test_scan_directory(self, project):
        """Test scanning a tree in parallel."""
        report = ComplexityScanner(AnalyzerConfig(max_workers=4)).scan(str(project))

        assert isinstance(report, ScanReport)
        assert report.files_scanned == 3
        assert report.languages_detected == ["go", "python", "typescript"]
        assert [r.path for r in report.files] == sorted(r.path for r in report.files)
        assert report.function_count == 3
        assert report.total_ccn == 3 + 2 + 2
        assert report.max_function_ccn == 3
        assert report.errors == []

    def test_scan_sequential_matches_parallel(self, project):
        """Test that worker count does not change results."""
        parallel = ComplexityScanner(AnalyzerConfig(max_workers=4)).scan(str(project))
        sequential = ComplexityScanner(AnalyzerConfig(max_workers=1)).scan(str(project))
        assert [f.to_dict() for f in parallel.files] == [f.to_dict() for f in sequential.files]

    def test_scan_single_file(self, project):
        """Test scanning one file."""
        report = ComplexityScanner().scan(str(project / "handler.py"))
        assert len(report.files) == 1
        file_report = report.files[0]
        assert file_report.language == Language.PYTHON
        assert file_report.result.functions[0].name == "handler"
        assert file_report.score.score >= 1

    def test_scan_missing_target(self, tmp_path):
        """Test that a missing target raises."""
        with pytest.raises(FileNotFoundError):
            ComplexityScanner().scan(str(tmp_path / "missing"))

    def test_binary_file_is_reported(self, tmp_path):
        """Test that binary files become errors instead of results."""
        path = tmp_path / "blob.py"
        path.write_bytes(b"\x00\x01\x02binary")
        scanner = ComplexityScanner()

        file_report = scanner.scan_file(str(path))

        assert not file_report.ok
        assert file_report.error
        assert any("blob.py" in e for e in scanner.errors)

    def test_forced_language(self, tmp_path):
        """Test that a forced language overrides the extension."""
        path = tmp_path / "script.txt"
        path.write_text(PY_CODE)
        report = ComplexityScanner(language=Language.PYTHON).scan(str(path))
        assert report.files[0].language == Language.PYTHON
        assert report.files[0].result.functions[0].name == "handler"

    def test_scan_content(self):
        """Test analyzing an in-memory buffer."""
        scanner = ComplexityScanner()
        assert scanner.scan_content(PY_CODE, "x.py").language == Language.PYTHON
        assert scanner.scan_content(TS_CODE).language == Language.TYPESCRIPT
        assert scanner.scan_content(GO_CODE, "<stdin>", Language.GO).result.functions[0].name == "main"

    def test_report_to_dict(self, project):
        """Test serialization of a scan report."""
        data = ComplexityScanner().scan(str(project)).to_dict()
        assert data["summary"]["files_scanned"] == 3
        assert data["summary"]["function_count"] == 3
        assert len(data["files"]) == 3
        assert data["files"][0]["score"]["score"] >= 1

    def test_file_report_error_to_dict(self):
        """Test serialization of a failed file."""
        data = FileReport(path="a.ts", language=Language.TYPESCRIPT, error="boom").to_dict()
        assert data["result"] is None
        assert data["error"] == "boom"
        assert data["language"] == "typescript"
