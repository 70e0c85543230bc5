"""portfolio-engine — commit cache curation and working-tree bridge for a portfolio vault."""

__version__ = "0.1.0"
