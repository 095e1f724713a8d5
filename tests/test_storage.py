"""Tests for `climate_workshop.storage`."""

import os
import shutil
import tempfile
import unittest

import pandas as pd
from pandas.testing import assert_frame_equal

from climate_workshop import storage
from climate_workshop.errors import DatasetNotFound
from climate_workshop.stations import list_stations, project, stations_frame
from climate_workshop.utils import normalize


class TestStorage(unittest.TestCase):

    def setUp(self):
        self.data_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.data_dir)

    def test_round_trip_records(self):
        registry = list_stations()
        raw = pd.DataFrame({'station_id': [registry[0].id, registry[1].id],
                            'date': pd.to_datetime(['2012-02-29', '2012-03-01']),
                            'tmax': [150.0, 160.0],
                            'tmin': [50.0, float('nan')],
                            'prcp': [0.0, 5.0]})
        temp = normalize(raw, registry)

        path = storage.save(storage.TEMP_NAME, temp, self.data_dir)
        self.assertTrue(path.is_file())
        assert_frame_equal(storage.load(storage.TEMP_NAME, self.data_dir), temp)

    def test_round_trip_stations(self):
        for name, df in [(storage.STATIONS_NAME, stations_frame(list_stations())),
                         (storage.STATIONS_UTM_NAME, project(list_stations()))]:
            storage.save(name, df, self.data_dir)
            assert_frame_equal(storage.load(name, self.data_dir), df)

    def test_creates_directory(self):
        nested = os.path.join(self.data_dir, 'a', 'b')
        storage.save('x', pd.DataFrame({'a': [1]}), nested)
        self.assertTrue(os.path.isfile(os.path.join(nested, 'x.pkl')))

    def test_not_found(self):
        with self.assertRaises(DatasetNotFound):
            storage.load('temp', self.data_dir)
        with self.assertRaises(FileNotFoundError):
            storage.load('temp', os.path.join(self.data_dir, 'missing'))

    def test_write_failure(self):
        blocker = os.path.join(self.data_dir, 'file')
        open(blocker, 'w').close()
        with self.assertRaises(OSError):
            storage.save('x', pd.DataFrame({'a': [1]}), blocker)


if __name__ == '__main__':
    unittest.main()
