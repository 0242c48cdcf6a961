"""SQL-driven exploratory data analysis of the diabetes health-indicators table."""

__version__ = "1.0.0"
