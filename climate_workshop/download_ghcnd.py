"""
Download daily GHCND station records from NOAA NCEI.

Variables (and the dataset more broadly) are documented at
https://www1.ncdc.noaa.gov/pub/data/ghcn/daily/readme.txt
"""

import io
import logging

import numpy as np
import pandas as pd
import requests

from climate_workshop.errors import SourceUnavailable, UnknownStation

logger = logging.getLogger(__name__)

GHCND_BASE_URL = 'https://www.ncei.noaa.gov/pub/data/ghcn/daily/by_station'
DEFAULT_VARIABLES = ('TMAX', 'TMIN', 'PRCP')
REQUEST_TIMEOUT = 60  # seconds

# Column layout of the by_station csv files (no header row)
GHCND_COLUMNS = ['station_id', 'date', 'element', 'value', 'mflag', 'qflag', 'sflag', 'obs_time']
RAW_COLUMNS = ['station_id', 'date', 'tmax', 'tmin', 'prcp']


def _empty_raw():
    df = pd.DataFrame({c: pd.Series(dtype=float) for c in RAW_COLUMNS})
    df['station_id'] = df['station_id'].astype(object)
    df['date'] = pd.to_datetime(df['date'])
    return df


def download_station(station_id, base_url=GHCND_BASE_URL, session=None, timeout=REQUEST_TIMEOUT):
    """Fetch the gzipped csv record for a single station.

    Parameters
    ----------
    station_id : str
        GHCND monitor identifier, e.g. 'USW00023271'
    base_url : str
        Location of the by_station directory
    session : requests.Session or None
        Session to reuse across stations. A new session is used if None.
    timeout : float
        Seconds to wait on the connection before giving up

    Returns
    -------
    content : bytes
        Raw (compressed) payload
    """
    url = '%s/%s.csv.gz' % (base_url.rstrip('/'), station_id)
    if session is None:
        session = requests.Session()

    try:
        r = session.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise SourceUnavailable('Could not reach %s: %s' % (url, e)) from e

    if r.status_code == 404:
        raise UnknownStation('GHCND has no station %r' % station_id)
    try:
        r.raise_for_status()
    except requests.HTTPError as e:
        raise SourceUnavailable('Request for %s failed: %s' % (station_id, e)) from e

    return r.content


def parse_station_csv(content):
    """Parse a by_station payload into long format (one row per station, date, element)."""
    try:
        df = pd.read_csv(io.BytesIO(content), compression='gzip', header=None,
                         names=GHCND_COLUMNS, dtype={'station_id': str, 'date': str, 'element': str,
                                                     'qflag': str, 'mflag': str, 'sflag': str})
    except pd.errors.EmptyDataError:
        return pd.DataFrame(columns=GHCND_COLUMNS)
    except (ValueError, OSError, EOFError) as e:
        raise SourceUnavailable('Malformed GHCND payload: %s' % e) from e

    try:
        df['date'] = pd.to_datetime(df['date'], format='%Y%m%d')
    except ValueError as e:
        raise SourceUnavailable('Malformed GHCND dates: %s' % e) from e

    return df


def get_data(station_ids, start, end, variables=DEFAULT_VARIABLES, base_url=GHCND_BASE_URL,
             session=None, drop_flagged=True, timeout=REQUEST_TIMEOUT):
    """Pull daily observations for a set of monitors over a date range.

    Parameters
    ----------
    station_ids : iterable of str
        GHCND monitor identifiers
    start : str or datetime-like
        First day (inclusive)
    end : str or datetime-like
        Last day (inclusive)
    variables : iterable of str
        Subset of TMAX, TMIN, PRCP
    base_url : str
        Location of the by_station directory
    session : requests.Session or None
        Session shared across station downloads
    drop_flagged : bool
        If True, values that failed a GHCND quality check are set to NaN
    timeout : float
        Per-request timeout in seconds

    Returns
    -------
    df : pandas dataframe
        Columns station_id, date, tmax, tmin, prcp. Temperatures are tenths of deg C,
        precipitation tenths of mm. Missing days are absent; unrequested or missing
        variables are NaN.
    """

    variables = [v.upper() for v in variables]
    unknown = set(variables) - set(DEFAULT_VARIABLES)
    if unknown:
        raise ValueError('Variables must be among %s, got %s' % (DEFAULT_VARIABLES, sorted(unknown)))

    start = pd.Timestamp(start)
    end = pd.Timestamp(end)
    if start > end:
        raise ValueError('start (%s) is after end (%s)' % (start.date(), end.date()))

    if session is None:
        session = requests.Session()

    # dict keeps the requested order while dropping duplicates
    station_ids = list(dict.fromkeys(station_ids))

    frames = []
    for station in station_ids:
        content = download_station(station, base_url=base_url, session=session, timeout=timeout)
        df = parse_station_csv(content)

        df = df[df['element'].isin(variables) & (df['date'] >= start) & (df['date'] <= end)]
        logger.info('%s: %i records between %s and %s', station, len(df), start.date(), end.date())
        if df.empty:  # no data in range
            continue

        values = df['value'].astype(float)
        if drop_flagged:
            # blank QFLAG means the value passed every quality check
            flagged = df['qflag'].fillna('').astype(str).str.strip() != ''
            values[flagged] = np.nan
        df = df.assign(value=values)

        wide = (df.drop_duplicates(['date', 'element'])
                  .set_index(['date', 'element'])['value']
                  .unstack('element'))
        wide.columns = [c.lower() for c in wide.columns]
        wide = wide.reindex(columns=RAW_COLUMNS[2:]).sort_index().reset_index()
        wide.insert(0, 'station_id', station)
        frames.append(wide)

    if not frames:
        return _empty_raw()

    raw = pd.concat(frames, ignore_index=True)
    return raw[RAW_COLUMNS].astype({'tmax': float, 'tmin': float, 'prcp': float})
