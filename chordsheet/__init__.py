"""chordsheet: render tab-markup song documents and their chord diagrams."""

__version__ = "0.1.0"
