import pytest

CONFIRMED_CSV = """Province/State,Country/Region,Lat,Long,1/22/2020,1/23/2020,1/24/2020,1/25/2020
,Germany,51.0,9.0,0,1,4,5
,Italy,41.87,12.56,0,0,2,3
Ontario,Canada,51.25,-85.32,0,0,1,2
Quebec,Canada,52.94,-73.55,0,1,1,1
,Holy See,41.90,12.45,0,0,0,0
"""

DEATHS_CSV = """Province/State,Country/Region,Lat,Long,1/22/2020,1/23/2020,1/24/2020,1/25/2020
,Germany,51.0,9.0,0,0,0,1
,Italy,41.87,12.56,0,0,1,1
Ontario,Canada,51.25,-85.32,0,0,0,0
Quebec,Canada,52.94,-73.55,0,0,0,1
,Holy See,41.90,12.45,0,0,0,0
"""


@pytest.fixture
def data_tree(tmp_path):
    """A local copy of the JHU directory layout holding both metrics."""
    ts_dir = tmp_path / "COVID-19" / "csse_covid_19_data" / "csse_covid_19_time_series"
    ts_dir.mkdir(parents=True)
    (ts_dir / "time_series_covid19_confirmed_global.csv").write_text(CONFIRMED_CSV, encoding="utf-8")
    (ts_dir / "time_series_covid19_deaths_global.csv").write_text(DEATHS_CSV, encoding="utf-8")
    return tmp_path


@pytest.fixture
def dashboard(data_tree):
    from racoon.dashboard import Dashboard

    d = Dashboard(base_url=str(data_tree))
    assert d.load()
    return d
