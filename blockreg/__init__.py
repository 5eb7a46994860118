"""
blockreg - publish, version and install block assets.

Asset definitions are versioned against a central registry, their build
artifacts (Docker images, NPM packages, Maven artifacts) pushed alongside,
and the source checkout tagged on success.
"""
