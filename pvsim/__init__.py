"""pvsim: photovoltaic production, battery dispatch and investment economics."""

__version__ = "0.1.0"
