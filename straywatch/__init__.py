"""StrayWatch: crowd-sourced map of stray-dog sightings, bites and garbage hotspots."""

__version__ = "0.1.0"
