"""Terminal browser for the Rick and Morty episode catalog, with favourites."""

__version__ = "0.1.0"
