"""
Analysis pipeline - one call from raw input to the two-field output.

Stages, each under its own budget nested inside the overall budget:

    InputValidator -> ColumnTypeAnalyzer -> VisualizationGenerator
                                         -> BusinessIntelligenceAnalyzer
                   -> ReportAssembler -> OutputContract (strict)

Chart generation and business intelligence read the same column metadata
and do not depend on each other. Every intermediate object is created
inside the call and discarded at the end; nothing is cached between calls.

Usage:
    from insight_framework import analyze
    output = analyze({"headers": [...], "sampleData": [[...], ...]})
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from insight_framework.core.budget import Deadline
from insight_framework.core.config import AnalysisConfig, DEFAULT_CONFIG
from insight_framework.core.exceptions import AnalysisError, to_user_error
from insight_framework.core.models import BatchResult
from insight_framework.profiler.analysis_utils import column_values
from insight_framework.profiler.business_intelligence import BusinessIntelligenceAnalyzer
from insight_framework.profiler.input_validator import process_input
from insight_framework.profiler.type_inferrer import ColumnTypeAnalyzer, column_statistics
from insight_framework.profiler.visualization_generator import VisualizationGenerator
from insight_framework.reporters.output_contract import format_output, format_output_robust
from insight_framework.reporters.report_assembler import ReportAssembler

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    """
    Runs the full analysis for one dataset at a time.

    The pipeline holds only configuration and stateless stage objects, so
    one instance may be reused for any number of sequential calls.

    Attributes:
        config: AnalysisConfig shared by every stage
        clock: Monotonic clock used for budgets (replaceable in tests)
        robust: Repair output-contract problems instead of raising
    """

    def __init__(self, config: Optional[AnalysisConfig] = None, clock=None, robust: bool = False):
        self.config = config or DEFAULT_CONFIG
        self.clock = clock
        self.robust = robust
        self.type_analyzer = ColumnTypeAnalyzer(self.config)
        self.chart_generator = VisualizationGenerator(self.config)
        self.insight_analyzer = BusinessIntelligenceAnalyzer(self.config)
        self.report_assembler = ReportAssembler(self.config)

    def _overall_budget(self) -> Deadline:
        if self.clock is None:
            return Deadline("complete dataset analysis", self.config.analysis_timeout)
        return Deadline("complete dataset analysis", self.config.analysis_timeout, clock=self.clock)

    def _format(self, charts, report) -> Dict[str, Any]:
        if not self.robust:
            return format_output(charts, report, self.config)
        result = format_output_robust(charts, report, self.config)
        for warning in result.warnings:
            logger.warning(f"Output repaired: {warning}")
        return result.output

    def run(self, input_data: Any) -> Dict[str, Any]:
        """
        Analyze one dataset.

        Args:
            input_data: Mapping with 'headers' and 'sampleData'

        Returns:
            Output-contract dict (charts_to_generate, full_analysis_report_markdown)

        Raises:
            AnalysisError: Any classified failure; unexpected exceptions are
                converted with to_user_error()
        """
        config = self.config
        try:
            with self._overall_budget() as overall:
                processed = process_input(input_data, config)
                headers, rows, quality = processed["headers"], processed["rows"], processed["quality"]
                logger.info(f"Analyzing dataset: {len(headers)} columns, {len(rows)} rows")

                with overall.child("column analysis", config.column_analysis_timeout) as budget:
                    columns = self.type_analyzer.analyze_columns(headers, rows, budget)
                    column_stats = {}
                    for index, column in enumerate(columns):
                        budget.check()
                        column_stats[column.name] = column_statistics(
                            column_values(rows, index), column.inferred_type
                        )

                with overall.child("chart generation", config.chart_generation_timeout) as budget:
                    charts = self.chart_generator.generate(columns, budget)

                with overall.child("business intelligence analysis",
                                   config.insight_generation_timeout) as budget:
                    insights = self.insight_analyzer.analyze(columns, quality, budget)

                with overall.child("report generation", config.report_generation_timeout) as budget:
                    report = self.report_assembler.assemble(insights, columns, quality,
                                                            column_stats, budget)

                output = self._format(charts, report)

            logger.info(
                f"Analysis complete: {len(output['charts_to_generate'])} charts, "
                f"{len(output['full_analysis_report_markdown']):,} report characters"
            )
            return output

        except AnalysisError as e:
            logger.info(f"Analysis rejected [{e.code}]: {e.message}")
            raise
        except Exception as e:
            error = to_user_error(e)
            logger.error(f"Unexpected error during analysis: {type(e).__name__}: {e}", exc_info=True)
            raise error from e


def analyze(input_data: Any, config: Optional[AnalysisConfig] = None,
            robust: bool = False) -> Dict[str, Any]:
    """
    Analyze one dataset with a fresh pipeline.

    With robust=True the output contract is repaired rather than enforced;
    input validation and quality gates still raise.

    Identical input and config always produce an identical output dict.

    Raises:
        AnalysisError: Classified failure (validation, quality, timeout, formatting)
    """
    return AnalysisPipeline(config, robust=robust).run(input_data)


def analyze_batch(inputs: Iterable[Any], config: Optional[AnalysisConfig] = None) -> List[BatchResult]:
    """
    Analyze several datasets independently.

    A failing dataset produces a BatchResult with an error dict and never
    stops the remaining datasets.

    Returns:
        One BatchResult per input, in input order
    """
    pipeline = AnalysisPipeline(config)
    results: List[BatchResult] = []
    for index, input_data in enumerate(inputs):
        try:
            results.append(BatchResult(index=index, output=pipeline.run(input_data)))
        except Exception as e:
            error = to_user_error(e)
            logger.warning(f"Dataset {index} failed [{error.code}]: {error.message}")
            results.append(BatchResult(index=index, error=error.to_dict()))

    failed = sum(1 for r in results if not r.succeeded)
    logger.info(f"Batch complete: {len(results) - failed} succeeded, {failed} failed")
    return results
