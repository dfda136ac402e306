"""
Analysis orchestration.

Runs each analysis module over the configured inputs, exports the summary
tables as CSV and writes the figures as standalone HTML.
"""

from pathlib import Path
from typing import Dict, List, Optional, Type
import logging

from .config import AnalysisConfig
from .modules import BarcodeAnalyzer, BaseAnalyzer, GCDepthAnalyzer, ReadStatsAnalyzer, RepliconAnalyzer

logger = logging.getLogger(__name__)

ANALYZERS: Dict[str, Type[BaseAnalyzer]] = {
    'reads': ReadStatsAnalyzer,
    'replicons': RepliconAnalyzer,
    'barcodes': BarcodeAnalyzer,
    'gc_depth': GCDepthAnalyzer,
}


class ProtocolComparisonAnalysis:
    """
    Entry point tying the analysis modules together.

    Analyzers are created on first use so that a run limited to some modules
    only loads the inputs those modules need.
    """

    def __init__(self, config: AnalysisConfig, modules: Optional[List[str]] = None):
        """
        Initialize the analysis.

        Args:
            config: Analysis configuration
            modules: Names of the modules to run (default: all)
        """
        self.config = config
        self.module_names = list(modules) if modules else list(ANALYZERS)
        unknown = [name for name in self.module_names if name not in ANALYZERS]
        if unknown:
            raise ValueError(f"Unknown analysis modules: {unknown}")
        self._analyzers: Dict[str, BaseAnalyzer] = {}

    def analyzer(self, name: str) -> BaseAnalyzer:
        if name not in self._analyzers:
            logger.info("Loading %s data", name)
            self._analyzers[name] = ANALYZERS[name](self.config)
        return self._analyzers[name]

    def export_statistics(self, output_path: Path) -> None:
        """Write every module's summary tables to output_path."""
        for name in self.module_names:
            self.analyzer(name).export_results(output_path)
        logger.info("Statistics exported to %s", output_path)

    def write_figures(self, output_path: Path) -> List[Path]:
        """
        Write every module's figures as HTML files.

        Args:
            output_path: Directory for the figures

        Returns:
            Paths of the written files
        """
        output_path.mkdir(parents=True, exist_ok=True)
        written = []
        for name in self.module_names:
            for figure_name, fig in self.analyzer(name).create_visualizations().items():
                target = output_path / f"{figure_name}.html"
                fig.write_html(target, include_plotlyjs='cdn')
                written.append(target)
                logger.info("Wrote figure %s", target.name)
        return written

    def log_headline_statistics(self) -> None:
        """Log the per-run and regression headline numbers."""
        if 'reads' in self.module_names:
            runs = self.analyzer('reads').generate_summary_stats()['runs']
            for run_name, row in runs.iterrows():
                logger.info(
                    "%s: yield %.2f Gbp, N50 %s bp, demux errors %.3f%%, chimeras %.3f%%",
                    run_name, row['total_yield'] / 1e9, row['read_n50'],
                    row['demux_total_pct'], row['chimera_overall_pct'],
                )
        if 'replicons' in self.module_names:
            regressions = self.analyzer('replicons').generate_summary_stats()['regressions']
            for fit_name, row in regressions.iterrows():
                logger.info("%s: slope %.3f, R2 %.3f, p %.3g", fit_name, row['slope'], row['r_squared'], row['p_value'])
