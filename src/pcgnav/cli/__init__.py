"""Command-line front-end for pcgnav."""
