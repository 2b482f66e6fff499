"""vaporbench — Track the bundle size of Vue Vapor builds against classic builds."""

__version__ = "0.1.0"
