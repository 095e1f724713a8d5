import logging
from collections import namedtuple

import numpy as np
import pandas as pd
import cartopy.crs as ccrs

from climate_workshop.errors import ProjectionError

logger = logging.getLogger(__name__)

Station = namedtuple('Station', ['id', 'name', 'lat', 'lon'])

# GHCND monitors. Interactive map: https://www.ncdc.noaa.gov/cdo-web/datatools/findstation
STATIONS = (
    Station('USC00042294', 'Davis', 38.5349, -121.7761),
    Station('USW00023271', 'Sacramento', 38.5552, -121.4183),
    Station('USW00093230', 'Lake Tahoe', 38.8983, -119.9947),
    Station('USC00045360', 'Lake Berryessa', 38.4916, -122.1241),
)

# +proj=utm +zone=10 +datum=NAD83
UTM_ZONE_10 = ccrs.UTM(zone=10, globe=ccrs.Globe(datum='NAD83', ellipse='GRS80'))


def list_stations():
    """Return the station registry, in table order."""
    return list(STATIONS)


def station_index(stations):
    """Map station id to Station."""
    return {s.id: s for s in stations}


def stations_frame(stations):
    """Tabular form of a sequence of stations (columns id, name, lat, lon)."""
    return pd.DataFrame(list(stations), columns=list(Station._fields))


def project(stations, target_crs=UTM_ZONE_10):
    """Project station coordinates from lat/lon onto a planar CRS.

    Parameters
    ----------
    stations : sequence of Station
        Stations with geographic (WGS84) coordinates.
    target_crs : cartopy.crs.Projection
        Planar projection to transform to. Default is UTM zone 10 (NAD83).

    Returns
    -------
    df : pandas dataframe
        Station columns plus 'easting' and 'northing' (metres)

    Raises
    ------
    ProjectionError
        If a coordinate is outside the domain of the projection.
    """

    df = stations_frame(stations)
    lat = df['lat'].values.astype(float)
    lon = df['lon'].values.astype(float)

    bad = (np.abs(lat) > 90) | (np.abs(lon) > 180) | ~np.isfinite(lat) | ~np.isfinite(lon)
    if bad.any():
        raise ProjectionError('Coordinates outside geographic bounds for station(s): %s'
                              % ', '.join(df.loc[bad, 'id']))

    xyz = target_crs.transform_points(ccrs.Geodetic(), lon, lat)

    bad = ~np.isfinite(xyz[:, :2]).all(axis=1)
    if bad.any():
        raise ProjectionError('Projection undefined for station(s): %s'
                              % ', '.join(df.loc[bad, 'id']))

    df['easting'] = xyz[:, 0]
    df['northing'] = xyz[:, 1]
    logger.info('Projected %i stations', len(df))

    return df
