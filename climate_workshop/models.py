import logging
from collections import namedtuple

import numpy as np
import pandas as pd
import patsy
from scipy import linalg, stats

from climate_workshop.errors import InsufficientData

logger = logging.getLogger(__name__)

TREND_FORMULA = 'temp_delta ~ day_of_year + I(day_of_year ** 2)'

TrendModel = namedtuple('TrendModel', ['params', 'cov_unscaled', 'scale', 'df_resid',
                                       'nobs', 'days', 'design_info'])


def station_is(name):
    """Predicate selecting the records of one named station."""
    def predicate(record):
        return record['station_name'] == name
    return predicate


def fit_trend(records, predicate=None):
    """Fit OLS quadratic seasonal trend of the daily temperature difference.

    Parameters
    ----------
    records : pandas dataframe
        Normalized observation records
    predicate : callable or None
        Called on each record (row); rows where it returns True are used. All rows if None.

    Returns
    -------
    model : TrendModel
        Coefficients (intercept, day, day^2), (X'X)^-1, residual variance and sample info
    """

    if predicate is not None and len(records):
        keep = records.apply(predicate, axis=1).astype(bool)
        records = records[keep.values]

    if len(records) < 3:
        raise InsufficientData('Need at least 3 records to fit a quadratic, got %i' % len(records))

    # Missing values are dropped, as in R's lm
    y, X = patsy.dmatrices(TREND_FORMULA, records, return_type='dataframe')
    n, k = X.shape
    if n < k:
        raise InsufficientData('Need at least %i complete records to fit, got %i' % (k, n))
    if np.linalg.matrix_rank(X.values) < k:
        raise InsufficientData('Design matrix is rank deficient; day_of_year does not vary enough')

    # QR keeps day^2 (up to ~1.3e5) well conditioned
    Q, R = np.linalg.qr(X.values)
    params = linalg.solve_triangular(R, np.dot(Q.T, y.values[:, 0]))
    R_inv = linalg.solve_triangular(R, np.identity(k))
    cov_unscaled = np.dot(R_inv, R_inv.T)

    resid = y.values[:, 0] - np.dot(X.values, params)
    df_resid = n - k
    scale = np.dot(resid, resid)/df_resid if df_resid > 0 else np.nan

    logger.info('Fit %s on %i records', TREND_FORMULA, n)

    return TrendModel(params=params,
                      cov_unscaled=cov_unscaled,
                      scale=scale,
                      df_resid=df_resid,
                      nobs=n,
                      days=X['day_of_year'].values.astype(int),
                      design_info=X.design_info)


def predict_band(model, days=None, level=0.95):
    """Predict the trend with a confidence interval for the mean.

    Parameters
    ----------
    model : TrendModel
        Output of fit_trend
    days : sequence of int or None
        Days of year to evaluate. Default is each distinct day in the fitting data, sorted.
    level : float
        Confidence level in (0, 1)

    Returns
    -------
    band : pandas dataframe
        Columns day_of_year, fit, lower, upper
    """

    if not 0 < level < 1:
        raise ValueError('level must be in (0, 1), got %r' % level)
    if model.df_resid <= 0:
        raise InsufficientData('No residual degrees of freedom (%i records for %i parameters)'
                               % (model.nobs, len(model.params)))

    if days is None:
        days = np.unique(model.days)
    days = np.asarray(days, dtype=int)

    X = np.asarray(patsy.build_design_matrices([model.design_info],
                                               pd.DataFrame({'day_of_year': days}))[0])
    fit = np.dot(X, model.params)

    leverage = np.einsum('ij,jk,ik->i', X, model.cov_unscaled, X)
    se = np.sqrt(np.clip(model.scale*leverage, 0, None))
    half_width = stats.t.ppf((1 + level)/2, model.df_resid)*se

    return pd.DataFrame({'day_of_year': days,
                         'fit': fit,
                         'lower': fit - half_width,
                         'upper': fit + half_width})
