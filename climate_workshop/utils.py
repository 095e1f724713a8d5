from collections.abc import Mapping

import pandas as pd

from climate_workshop.errors import UnknownStationReference

MONTH_NAMES = ['January', 'February', 'March', 'April', 'May', 'June', 'July',
               'August', 'September', 'October', 'November', 'December']

RECORD_COLUMNS = ['station_id', 'station_name', 'date', 'year', 'month_name', 'day_of_year',
                  'temp_min', 'temp_max', 'temp_delta', 'precipitation', 'lat', 'lon']


def add_date_columns(df):
    """Add columns with calendar information derived from the date.

    Parameters
    ----------
    df : pandas dataframe
        Dataframe containing a column, 'date', with datetimes or YYYY-MM-DD strings

    Returns
    -------
    df : pandas dataframe
        Copy of df with additional columns: year, month_name, day_of_year
    """

    dt = pd.to_datetime(df['date'])
    # month 1..12 indexes the fixed name table
    month_name = pd.Categorical.from_codes(dt.dt.month.values - 1, categories=MONTH_NAMES,
                                           ordered=True)

    return df.assign(date=dt,
                     year=dt.dt.year.astype(int),
                     month_name=month_name,
                     day_of_year=dt.dt.dayofyear.astype(int))


def tenths_to_units(ts):
    """Convert GHCND integer tenths (of deg C, mm) to floating units."""
    return ts.astype(float)/10


def normalize(raw, stations):
    """Join raw observations to station metadata and derive the analysis columns.

    Parameters
    ----------
    raw : pandas dataframe
        Raw observations with columns station_id, date, tmax, tmin, prcp
    stations : mapping or sequence of Station
        Station metadata, keyed by id if a mapping

    Returns
    -------
    df : pandas dataframe
        One record per raw row, in the same order, with columns RECORD_COLUMNS
    """
    if isinstance(stations, Mapping):
        stations = list(stations.values())
    meta = pd.DataFrame([(s.id, s.name, s.lat, s.lon) for s in stations],
                        columns=['station_id', 'station_name', 'lat', 'lon'])

    missing = sorted(set(raw['station_id']) - set(meta['station_id']))
    if missing:
        raise UnknownStationReference('No station metadata for: %s' % ', '.join(missing))

    # left merge keeps the order of raw
    df = raw.merge(meta, on='station_id', how='left', validate='many_to_one')
    df = add_date_columns(df)

    temp_min = tenths_to_units(df['tmin'])
    temp_max = tenths_to_units(df['tmax'])
    df = df.assign(temp_min=temp_min,
                   temp_max=temp_max,
                   temp_delta=temp_max - temp_min,
                   # precipitation stays in tenths of mm
                   precipitation=df['prcp'].astype(float))

    return df[RECORD_COLUMNS].reset_index(drop=True)
