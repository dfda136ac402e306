"""
Depth-ratio regressions.

Ordinary least squares fits (with intercept, base-10 logs) describing how ONT
depth tracks Illumina depth and whether ONT under-representation of plasmids
depends on plasmid size. R² is the in-sample coefficient of determination.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional
import numpy as np
import pandas as pd
import logging
import statsmodels.formula.api as smf
from scipy.stats import linregress

from ...errors import UNDEFINED

logger = logging.getLogger(__name__)

MIN_DISTINCT_X = 2


@dataclass(frozen=True)
class RegressionResult:
    """Slope, intercept, R² and slope p-value of one fit."""

    slope: float
    intercept: float
    r_squared: float
    p_value: float
    n: int
    category_slopes: Dict[str, float] = field(default_factory=dict)
    category_intercepts: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def undefined(cls, n: int = 0) -> 'RegressionResult':
        return cls(UNDEFINED, UNDEFINED, UNDEFINED, UNDEFINED, n)

    @property
    def defined(self) -> bool:
        return not np.isnan(self.slope)

    def as_record(self) -> Dict[str, float]:
        record = {
            'slope': self.slope,
            'intercept': self.intercept,
            'r_squared': self.r_squared,
            'p_value': self.p_value,
            'n': self.n,
        }
        for category, slope in self.category_slopes.items():
            record[f'slope_{category}'] = slope
        for category, intercept in self.category_intercepts.items():
            record[f'intercept_{category}'] = intercept
        return record


def _complete_rows(table: pd.DataFrame, columns, label: str) -> pd.DataFrame:
    """Rows with finite values in every column; dropped rows are logged."""
    data = table[list(columns)].replace([np.inf, -np.inf], np.nan).dropna()
    dropped = len(table) - len(data)
    if dropped:
        logger.info("%s: dropped %d replicons with missing or non-positive values", label, dropped)
    return data


def _has_enough_points(x: pd.Series, label: str) -> bool:
    if x.nunique() < MIN_DISTINCT_X:
        logger.debug("%s undefined: fewer than %d distinct x values", label, MIN_DISTINCT_X)
        return False
    return True


def fit_depth_regression(plasmids: pd.DataFrame, protocol: str,
                         interaction: Optional[bool] = None) -> RegressionResult:
    """
    Regress log10(ONT depth) on log10(Illumina depth).

    With ``interaction`` the slope may differ by size category; the reported
    slope is that of the reference category ("big"); category_slopes and
    category_intercepts hold the line of every category. Ligation uses the
    interaction by default.
    When a category has fewer than two distinct x values the interaction is
    dropped and that category's slope is reported as UNDEFINED.

    Args:
        plasmids: Output of prepare_replicon_table
        protocol: 'ligation' or 'rapid'
        interaction: Include a log10(Illumina depth) x size_category term

    Returns:
        RegressionResult (all NaN when fewer than two distinct x values)
    """
    if interaction is None:
        interaction = protocol == 'ligation'

    x, y = 'log_illumina_depth', f'log_{protocol}_depth'
    label = f"{protocol} depth regression"
    columns = [x, y, 'size_category'] if interaction else [x, y]
    data = _complete_rows(plasmids, columns, label)
    if not _has_enough_points(data[x], label):
        return RegressionResult.undefined(len(data))

    category_slopes: Dict[str, float] = {}
    category_intercepts: Dict[str, float] = {}
    if interaction:
        distinct_x = data.groupby('size_category')[x].nunique()
        too_few = sorted(str(c) for c in distinct_x[distinct_x < MIN_DISTINCT_X].index)
        if len(distinct_x) < 2:
            logger.info("%s: only one size category present, fitting without interaction", label)
            interaction = False
        elif too_few:
            # A per-category slope is not identifiable from a single x value
            logger.info("%s: fewer than %d distinct x values for %s, fitting without interaction",
                        label, MIN_DISTINCT_X, too_few)
            category_slopes = {category: UNDEFINED for category in too_few}
            category_intercepts = {category: UNDEFINED for category in too_few}
            interaction = False

    formula = f"{y} ~ {x} * C(size_category)" if interaction else f"{y} ~ {x}"
    fit = smf.ols(formula, data=data).fit()

    slope = float(fit.params[x])
    intercept = float(fit.params['Intercept'])
    if interaction:
        reference = sorted(data['size_category'].unique())[0]
        category_slopes[reference] = slope
        category_intercepts[reference] = intercept
        for name in fit.params.index:
            if '[T.' not in name:
                continue
            category = name.split('[T.', 1)[1].rstrip(']')
            if ':' in name:
                category_slopes[category] = slope + float(fit.params[name])
            else:
                category_intercepts[category] = intercept + float(fit.params[name])

    result = RegressionResult(
        slope=slope,
        intercept=intercept,
        r_squared=float(fit.rsquared),
        p_value=float(fit.pvalues[x]),
        n=int(fit.nobs),
        category_slopes=category_slopes,
        category_intercepts=category_intercepts,
    )
    logger.info("%s: slope=%.3f intercept=%.3f R2=%.3f (n=%d)",
                label, result.slope, result.intercept, result.r_squared, result.n)
    return result


def fit_size_regression(plasmids: pd.DataFrame, protocol: str) -> RegressionResult:
    """
    Regress log10(ONT/Illumina depth ratio) on log10(replicon size).

    Args:
        plasmids: Output of prepare_replicon_table
        protocol: 'ligation' or 'rapid'

    Returns:
        RegressionResult with the p-value for the null hypothesis slope = 0
    """
    x, y = 'log_size', f'log_{protocol}_ratio'
    label = f"{protocol} ratio vs size regression"
    data = _complete_rows(plasmids, [x, y], label)
    if not _has_enough_points(data[x], label):
        return RegressionResult.undefined(len(data))

    fit = linregress(data[x], data[y])
    result = RegressionResult(
        slope=float(fit.slope),
        intercept=float(fit.intercept),
        r_squared=float(fit.rvalue ** 2),
        p_value=float(fit.pvalue),
        n=len(data),
    )
    logger.info("%s: slope=%.3f R2=%.3f p=%.3g (n=%d)",
                label, result.slope, result.r_squared, result.p_value, result.n)
    return result


def fit_all_regressions(plasmids: pd.DataFrame) -> Dict[str, RegressionResult]:
    """Depth and size regressions for both protocols."""
    return {
        'ligation_depth': fit_depth_regression(plasmids, 'ligation', interaction=True),
        'rapid_depth': fit_depth_regression(plasmids, 'rapid', interaction=False),
        'ligation_size': fit_size_regression(plasmids, 'ligation'),
        'rapid_size': fit_size_regression(plasmids, 'rapid'),
    }


def regressions_table(results: Dict[str, RegressionResult]) -> pd.DataFrame:
    """One row per fit, indexed by fit name."""
    return pd.DataFrame.from_dict({name: r.as_record() for name, r in results.items()}, orient='index')
