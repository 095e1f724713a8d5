import logging
from pathlib import Path

import pandas as pd

from climate_workshop.errors import DatasetNotFound

logger = logging.getLogger(__name__)

DATA_DIR = 'data/'

# Artifacts written by the build step
STATIONS_NAME = 'stations'
STATIONS_UTM_NAME = 'stations_utm'
TEMP_NAME = 'temp'


def dataset_path(name, data_dir=DATA_DIR):
    return Path(data_dir) / ('%s.pkl' % name)


def save(name, value, data_dir=DATA_DIR):
    """Write a table to data_dir under name. Returns the path written."""
    path = dataset_path(name, data_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.to_pickle(value, path)
    logger.info('Saved %s (%i rows) to %s', name, len(value), path)
    return path


def load(name, data_dir=DATA_DIR):
    """Read a table saved with save()."""
    path = dataset_path(name, data_dir)
    if not path.is_file():
        raise DatasetNotFound('No dataset %r in %s' % (name, data_dir))
    value = pd.read_pickle(path)
    logger.info('Loaded %s from %s', name, path)
    return value
