"""
Console script for climate_workshop.

Workflow:
(1) `climate-workshop build` to download GHCND data for the registry stations and save
    the station tables and the normalized temperature table under the data directory
(2) `climate-workshop trend` to fit the seasonal trend in daily temperature difference
    for one station, with a confidence band for plotting
"""

import logging
from functools import wraps

import click

from climate_workshop import download_ghcnd, storage
from climate_workshop.errors import ClimateWorkshopError
from climate_workshop.models import fit_trend, predict_band, station_is
from climate_workshop.stations import list_stations, project, station_index, stations_frame
from climate_workshop.utils import normalize

DEFAULT_START = '2009-01-01'
DEFAULT_END = '2018-12-31'
DEFAULT_TREND_STATION = 'Sacramento'


def fail_fast(f):
    """Report pipeline errors as a message and non-zero exit."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (ClimateWorkshopError, OSError) as e:
            raise click.ClickException('%s: %s' % (type(e).__name__, e)) from e
    return wrapper


data_dir_option = click.option('--data-dir', default=storage.DATA_DIR, show_default=True,
                               envvar='CLIMATE_WORKSHOP_DATA_DIR', type=click.Path(file_okay=False),
                               help='Directory holding the saved datasets.')


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Log progress.')
def main(verbose):
    """Build and analyze the workshop's weather station datasets."""
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING,
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')


@main.command()
@fail_fast
def stations():
    """List the monitoring stations."""
    df = project(list_stations())
    click.echo(df.to_string(index=False))


@main.command()
@data_dir_option
@click.option('--start', default=DEFAULT_START, show_default=True, type=click.DateTime(['%Y-%m-%d']),
              help='First day (YYYY-MM-DD).')
@click.option('--end', default=DEFAULT_END, show_default=True, type=click.DateTime(['%Y-%m-%d']),
              help='Last day (YYYY-MM-DD).')
@click.option('--station', 'station_ids', multiple=True,
              help='GHCND id to fetch (repeatable). Default is every registry station.')
@click.option('--variable', 'variables', multiple=True,
              type=click.Choice(download_ghcnd.DEFAULT_VARIABLES, case_sensitive=False),
              help='Variable to fetch (repeatable). Default is all.')
@click.option('--base-url', default=download_ghcnd.GHCND_BASE_URL, show_default=True,
              envvar='CLIMATE_WORKSHOP_GHCND_URL', help='GHCND by_station location.')
@fail_fast
def build(data_dir, start, end, station_ids, variables, base_url):
    """Download, normalize and save the station and temperature datasets."""
    registry = list_stations()
    index = station_index(registry)

    unknown = [s for s in station_ids if s not in index]
    if unknown:
        raise click.BadParameter('not in the station registry: %s' % ', '.join(unknown),
                                 param_hint='--station')
    if start > end:
        raise click.BadParameter('start (%s) is after end (%s)' % (start.date(), end.date()),
                                 param_hint='--start')
    station_ids = station_ids or [s.id for s in registry]
    variables = variables or download_ghcnd.DEFAULT_VARIABLES

    stations_utm = project(registry)

    raw = download_ghcnd.get_data(station_ids, start, end, variables=variables, base_url=base_url)
    click.echo('Found %i daily records for %i stations' % (len(raw), len(station_ids)))

    temp = normalize(raw, index)

    storage.save(storage.STATIONS_NAME, stations_frame(registry), data_dir)
    storage.save(storage.STATIONS_UTM_NAME, stations_utm, data_dir)
    path = storage.save(storage.TEMP_NAME, temp, data_dir)
    click.echo('Saved datasets to %s' % path.parent)


@main.command()
@data_dir_option
@click.option('--station-name', default=DEFAULT_TREND_STATION, show_default=True,
              help='Station to fit.')
@click.option('--level', default=0.95, show_default=True, type=click.FloatRange(0, 1, min_open=True,
                                                                                 max_open=True),
              help='Confidence level of the band.')
@click.option('--output', type=click.Path(dir_okay=False), help='Write the band to this csv file.')
@fail_fast
def trend(data_dir, station_name, level, output):
    """Fit temp_delta ~ day + day^2 for one station and report the confidence band."""
    temp = storage.load(storage.TEMP_NAME, data_dir)

    model = fit_trend(temp, station_is(station_name))
    band = predict_band(model, level=level)

    click.echo('%s: %i records' % (station_name, model.nobs))
    for label, value in zip(['Intercept', 'day', 'day^2'], model.params):
        click.echo('%-10s %.6g' % (label, value))

    if output:
        band.to_csv(output, index=False)
        click.echo('Wrote %i rows to %s' % (len(band), output))
    else:
        click.echo(band.to_string(index=False))


if __name__ == '__main__':
    main()
