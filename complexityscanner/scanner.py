"""
File scanner for the complexity engine.

Discovers source files under a target path, reads them and analyzes each
one with its own ComplexityAnalyzer, in parallel worker threads when
there is more than one file. The engine itself never touches the file
system; all I/O happens here.
"""

import fnmatch
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional, Set

from complexityscanner.config import AnalyzerConfig
from complexityscanner.core.analyzer import ComplexityAnalyzer, language_for_extension
from complexityscanner.core.scorer import ComplexityScorer
from complexityscanner.core.types import AnalysisResult, ComplexityScore, Language
from complexityscanner.utils import is_binary_file

logger = logging.getLogger(__name__)


@dataclass
class FileReport:
    """Analysis outcome for one file: a result and score, or an error."""
    path: str
    language: Optional[Language]
    result: Optional[AnalysisResult] = None
    score: Optional[ComplexityScore] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "language": self.language.value if self.language else None,
            "result": self.result.to_dict() if self.result else None,
            "score": self.score.to_dict() if self.score else None,
            "error": self.error,
        }


@dataclass
class ScanReport:
    """Results of scanning a file or directory tree."""
    files: List[FileReport] = field(default_factory=list)
    scan_time_seconds: float = 0.0
    languages_detected: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def files_scanned(self) -> int:
        return sum(1 for f in self.files if f.ok)

    @property
    def total_ccn(self) -> int:
        return sum(f.result.total_ccn for f in self.files if f.ok)

    @property
    def total_nloc(self) -> int:
        return sum(f.result.nloc for f in self.files if f.ok)

    @property
    def function_count(self) -> int:
        return sum(len(f.result.functions) for f in self.files if f.ok)

    @property
    def max_function_ccn(self) -> int:
        return max((f.result.max_function_ccn for f in self.files if f.ok), default=0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "files_scanned": self.files_scanned,
                "scan_time_seconds": self.scan_time_seconds,
                "languages_detected": self.languages_detected,
                "total_ccn": self.total_ccn,
                "total_nloc": self.total_nloc,
                "function_count": self.function_count,
                "max_function_ccn": self.max_function_ccn,
            },
            "files": [f.to_dict() for f in self.files],
            "errors": self.errors,
        }


class ComplexityScanner:
    """
    Walks a target path and analyzes every supported source file.

    The scanner:
    1. Discovers files in the target directory
    2. Detects languages based on file extensions
    3. Analyzes each file with a fresh analyzer
    4. Scores each result and collects the reports
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None, language: Optional[Language] = None):
        self.config = config or AnalyzerConfig()
        # Overrides extension detection for every analyzed file
        self.language = language
        self.scorer = ComplexityScorer(self.config.scoring)
        self.errors: List[str] = []

        self.max_file_size = self.config.max_file_size
        self.max_workers = self.config.max_workers
        self.exclude_patterns = self.config.exclude_patterns
        self.include_patterns = self.config.include_patterns
        self.extension_overrides = self.config.extension_overrides

    def detect_language(self, file_path: str) -> Optional[Language]:
        """Detect the language of a file, or None if it is unsupported."""
        return language_for_extension(file_path, self.extension_overrides)

    def should_ignore(self, file_path: str, base_path: str, is_dir: bool = False) -> bool:
        """Check if a path should be ignored based on patterns."""
        rel_path = os.path.relpath(file_path, base_path)
        name = os.path.basename(file_path)

        for pattern in self.exclude_patterns:
            if fnmatch.fnmatch(rel_path, pattern) or fnmatch.fnmatch(name, pattern):
                return True

        # Include patterns select files; directories are always descended
        if self.include_patterns and not is_dir:
            for pattern in self.include_patterns:
                if fnmatch.fnmatch(rel_path, pattern) or fnmatch.fnmatch(name, pattern):
                    return False
            return True

        return False

    def discover_files(self, target_path: str) -> Generator[str, None, None]:
        """Discover all supported files to scan in the target path."""
        target = Path(target_path)

        if target.is_file():
            yield str(target)
            return

        for root, dirs, files in os.walk(target):
            # Filter out ignored directories
            dirs[:] = sorted(
                d for d in dirs
                if not self.should_ignore(os.path.join(root, d), target_path, is_dir=True)
            )

            for file in sorted(files):
                file_path = os.path.join(root, file)

                if self.should_ignore(file_path, target_path):
                    continue

                if not self.detect_language(file_path):
                    continue

                try:
                    if os.path.getsize(file_path) > self.max_file_size:
                        logger.debug("Skipping %s: larger than %d bytes", file_path, self.max_file_size)
                        continue
                except OSError:
                    continue

                yield file_path

    def read_file(self, file_path: str) -> Optional[str]:
        """Read a file's contents, recording the error on failure."""
        try:
            if is_binary_file(file_path):
                self.errors.append(f"Skipping binary file {file_path}")
                return None
            with open(file_path, "r", encoding="utf-8", errors="ignore") as f:
                return f.read()
        except OSError as e:
            logger.warning("Error reading %s: %s", file_path, e)
            self.errors.append(f"Error reading {file_path}: {str(e)}")
            return None

    def _analyze(self, content: str, file_path: str, language: Language) -> FileReport:
        analyzer = ComplexityAnalyzer(language, file_path)
        result = analyzer.analyze(content)
        return FileReport(
            path=file_path,
            language=language,
            result=result,
            score=self.scorer.score_analysis(result),
        )

    def scan_file(self, file_path: str) -> FileReport:
        """Analyze a single file."""
        language = self.language or self.detect_language(file_path)
        if language is None:
            return FileReport(path=file_path, language=None, error="Unsupported file type")

        content = self.read_file(file_path)
        if content is None:
            return FileReport(path=file_path, language=language, error="File could not be read")

        return self._analyze(content, file_path, language)

    def scan_content(
        self,
        content: str,
        file_path: str = "<stdin>",
        language: Optional[Language] = None,
    ) -> FileReport:
        """
        Analyze source text that is already in memory.

        Useful for stdin and editor integrations. Without an explicit
        language, the extension of ``file_path`` decides, then the
        configured default language.
        """
        if language is None:
            language = (
                self.language
                or self.detect_language(file_path)
                or Language.coerce(self.config.default_language)
            )
        return self._analyze(content, file_path, language)

    def scan(self, target_path: str) -> ScanReport:
        """
        Scan a target path and return results.

        Args:
            target_path: Path to a file or directory to scan.

        Returns:
            ScanReport with one FileReport per discovered file.
        """
        start_time = time.time()
        reports: List[FileReport] = []
        languages_detected: Set[str] = set()

        if not os.path.exists(target_path):
            raise FileNotFoundError(f"Target not found: {target_path}")

        files = list(self.discover_files(target_path))
        logger.debug("Discovered %d file(s) under %s", len(files), target_path)

        # Scan files (parallel if multiple)
        if len(files) > 1 and self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = {executor.submit(self.scan_file, f): f for f in files}

                for future in as_completed(futures):
                    file_path = futures[future]
                    try:
                        reports.append(future.result())
                    except Exception as e:
                        self.errors.append(f"Error scanning {file_path}: {str(e)}")
        else:
            for file_path in files:
                try:
                    reports.append(self.scan_file(file_path))
                except Exception as e:
                    self.errors.append(f"Error scanning {file_path}: {str(e)}")

        for report in reports:
            if report.ok and report.language:
                languages_detected.add(report.language.value)

        reports.sort(key=lambda r: r.path)
        elapsed_time = time.time() - start_time

        return ScanReport(
            files=reports,
            scan_time_seconds=round(elapsed_time, 3),
            languages_detected=sorted(languages_detected),
            errors=list(self.errors),
        )
