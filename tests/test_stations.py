"""Tests for `climate_workshop.stations`."""

import unittest

import numpy as np

from climate_workshop.errors import ProjectionError
from climate_workshop.stations import STATIONS, Station, list_stations, project, station_index


class TestStations(unittest.TestCase):

    def test_registry(self):
        stations = list_stations()
        self.assertEqual([s.name for s in stations],
                         ['Davis', 'Sacramento', 'Lake Tahoe', 'Lake Berryessa'])
        self.assertEqual(len(station_index(stations)), len(STATIONS))
        self.assertEqual(station_index(stations)['USW00023271'].name, 'Sacramento')

    def test_project_utm(self):
        df = project(list_stations())
        self.assertEqual(list(df['id']), [s.id for s in STATIONS])

        davis = df.iloc[0]
        # zone 10 central meridian is 123W, so Davis is ~106 km east of the 500 km false easting
        self.assertTrue(600000 < davis['easting'] < 615000)
        self.assertTrue(4250000 < davis['northing'] < 4280000)

        # Tahoe lies east of Sacramento, which lies east of Davis
        self.assertTrue(np.all(np.diff(df['easting'].values[:3]) > 0))

    def test_out_of_domain(self):
        with self.assertRaises(ProjectionError):
            project([Station('X', 'Nowhere', 95.0, -121.0)])
        with self.assertRaises(ProjectionError):
            project([Station('X', 'Nowhere', 38.0, 200.0)])


if __name__ == '__main__':
    unittest.main()
