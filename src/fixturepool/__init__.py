"""FixturePool - isolated test fixture data for parallel test workers."""

__version__ = "1.0.0"
