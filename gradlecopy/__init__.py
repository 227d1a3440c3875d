"""Copy Gradle's module cache into a Maven layout, find missing packages and download them."""

__version__ = "1.0.0"