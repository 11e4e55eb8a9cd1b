"""
racoon package
==============

racoon is a small COVID-19 dashboard over the JHU CSSE global time series.

- The CLI entry point is in `racoon/cli.py`.
- The CSV -> per-country time series transformation is in `racoon/transform.py`.
- Dataset fetching is in `racoon/loader.py`.
"""

__version__ = '0.3.0'
