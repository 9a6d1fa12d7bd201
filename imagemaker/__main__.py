"""
Main entry point for the ImageMaker package when executed as a module.

This allows running the package with `python -m imagemaker`.
"""

from imagemaker.cli import main

if __name__ == '__main__':
    main()
