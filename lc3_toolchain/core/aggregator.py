"""
Result Aggregator Module

This module collects per-file formatter and linter results of a batch run,
classifies each file, and derives summary statistics, a JSON-ready report and
the process exit code.
"""

from typing import Any, Dict, List, Optional, Set, Tuple
from dataclasses import dataclass, field
from enum import Enum
import logging
from pathlib import Path

from .diagnostics import Diagnostic
from .formatter import FormatResult
from .linter import LintResult

logger = logging.getLogger(__name__)


class FileStatus(Enum):
    """File status categories."""
    OK = "OK"
    REFORMATTED = "Reformatted"
    FORMAT_MISMATCH = "Needs formatting"
    STYLE_VIOLATIONS = "Style issues"
    SYNTAX_ERROR = "Syntax error"
    IO_ERROR = "I/O error"


FAILING_STATUSES = frozenset({
    FileStatus.FORMAT_MISMATCH,
    FileStatus.STYLE_VIOLATIONS,
    FileStatus.SYNTAX_ERROR,
    FileStatus.IO_ERROR,
})


@dataclass
class FileInfo:
    """Outcome of one file in a batch."""
    filepath: str
    filename: str
    status: FileStatus
    message: str
    diagnostic_count: int = 0
    rules: Set[str] = field(default_factory=set)
    diagnostics: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.status in FAILING_STATUSES


@dataclass
class BatchSummary:
    """Summary statistics for a batch run."""
    total_files: int
    ok_files: int
    reformatted_files: int
    failed_files: int
    syntax_error_files: int
    io_error_files: int
    total_diagnostics: int
    success_rate: float
    most_common_rules: List[Tuple[str, int]]
    rule_distribution: Dict[str, int]


class ResultAggregator:
    """
    Aggregator for formatter and linter results.

    This class provides:
    - File status classification
    - Filtering and grouping by status or violated rule
    - Summary statistics and a serialisable report
    - The exit code of the whole run
    """

    def __init__(self):
        """Initialize the aggregator."""
        self.files: List[FileInfo] = []
        self._positions: Dict[str, int] = {}

    def _add(self, file_info: FileInfo) -> None:
        logger.debug(f"Recorded {file_info.filepath}: {file_info.status.value}")
        # A file processed twice keeps only its latest outcome.
        index = self._positions.get(file_info.filepath)
        if index is not None:
            self.files[index] = file_info
            return
        self._positions[file_info.filepath] = len(self.files)
        self.files.append(file_info)

    def add_format_result(self, result: FormatResult, check: bool = False) -> FileInfo:
        """
        Record a formatter result.

        Args:
            result: FormatResult from the formatter
            check: Whether the run was in check mode, where a change is a failure

        Returns:
            The FileInfo created for the file
        """
        if not result.success:
            status = FileStatus.SYNTAX_ERROR if result.error is not None else FileStatus.IO_ERROR
        elif result.changed:
            status = FileStatus.FORMAT_MISMATCH if check else FileStatus.REFORMATTED
        else:
            status = FileStatus.OK

        file_info = FileInfo(
            filepath=result.filepath,
            filename=Path(result.filepath).name,
            status=status,
            message=result.message,
            diagnostic_count=1 if result.error is not None else 0,
            rules={"syntax"} if result.error is not None else set(),
            diagnostics=[Diagnostic.from_syntax_error(result.error).to_dict()] if result.error is not None else [],
        )
        self._add(file_info)
        return file_info

    def add_lint_result(self, result: LintResult) -> FileInfo:
        """
        Record a linter result.

        Args:
            result: LintResult from the linter

        Returns:
            The FileInfo created for the file
        """
        if not result.success:
            status = FileStatus.SYNTAX_ERROR if result.error is not None else FileStatus.IO_ERROR
        elif result.diagnostics:
            status = FileStatus.STYLE_VIOLATIONS
        else:
            status = FileStatus.OK

        file_info = FileInfo(
            filepath=result.filepath,
            filename=Path(result.filepath).name,
            status=status,
            message=result.message,
            diagnostic_count=len(result.diagnostics),
            rules={d.rule for d in result.diagnostics},
            diagnostics=[d.to_dict() for d in result.diagnostics],
        )
        self._add(file_info)
        return file_info

    def filter_files(self, status: Optional[FileStatus] = None, rule: Optional[str] = None,
                     failed_only: bool = False) -> List[FileInfo]:
        """
        Filter files based on status, violated rule or failure.

        Args:
            status: Keep only files with this status
            rule: Keep only files violating this rule
            failed_only: Keep only files that make the run fail

        Returns:
            List of matching FileInfo objects
        """
        filtered = self.files

        if status:
            filtered = [f for f in filtered if f.status == status]

        if rule:
            filtered = [f for f in filtered if rule in f.rules]

        if failed_only:
            filtered = [f for f in filtered if f.failed]

        return filtered

    def get_files_by_status(self) -> Dict[FileStatus, List[FileInfo]]:
        """Group files by their status."""
        groups = {status: [] for status in FileStatus}

        for file_info in self.files:
            groups[file_info.status].append(file_info)

        return groups

    def generate_summary(self) -> BatchSummary:
        """Generate summary statistics for everything recorded so far."""
        total_files = len(self.files)
        groups = self.get_files_by_status()
        failed_files = sum(1 for f in self.files if f.failed)

        rule_counts: Dict[str, int] = {}
        for file_info in self.files:
            for rule in file_info.rules:
                rule_counts[rule] = rule_counts.get(rule, 0) + 1

        return BatchSummary(
            total_files=total_files,
            ok_files=len(groups[FileStatus.OK]),
            reformatted_files=len(groups[FileStatus.REFORMATTED]),
            failed_files=failed_files,
            syntax_error_files=len(groups[FileStatus.SYNTAX_ERROR]),
            io_error_files=len(groups[FileStatus.IO_ERROR]),
            total_diagnostics=sum(f.diagnostic_count for f in self.files),
            success_rate=((total_files - failed_files) / total_files * 100) if total_files > 0 else 100.0,
            most_common_rules=sorted(rule_counts.items(), key=lambda x: (-x[1], x[0]))[:10],
            rule_distribution=rule_counts,
        )

    @property
    def exit_code(self) -> int:
        """0 when every file passed, 1 otherwise."""
        return 1 if any(f.failed for f in self.files) else 0

    def export_report(self) -> Dict[str, Any]:
        """
        Export the batch outcome as plain data.

        Returns:
            Report dictionary ready for ``json.dump``
        """
        summary = self.generate_summary()

        return {
            'summary': {
                'total_files': summary.total_files,
                'ok_files': summary.ok_files,
                'reformatted_files': summary.reformatted_files,
                'failed_files': summary.failed_files,
                'syntax_error_files': summary.syntax_error_files,
                'io_error_files': summary.io_error_files,
                'total_diagnostics': summary.total_diagnostics,
                'success_rate': summary.success_rate,
                'most_common_rules': summary.most_common_rules,
                'rule_distribution': summary.rule_distribution,
            },
            'files': [
                {
                    'filepath': f.filepath,
                    'filename': f.filename,
                    'status': f.status.value,
                    'message': f.message,
                    'diagnostic_count': f.diagnostic_count,
                    'rules': sorted(f.rules),
                    'diagnostics': f.diagnostics,
                }
                for f in self.files
            ],
            'exit_code': self.exit_code,
        }
