"""lit - a minimal content-addressed version control engine.

lit snapshots a working directory into immutable blob, tree and commit
objects, tracks drift between the working tree, the staging index and the
HEAD commit, and moves safely between branches and commits.
"""

from loguru import logger

__version__ = "0.1.0"
__author__ = "lit Contributors"

# Library code stays silent until an application (the CLI) opts in.
logger.disable("litvcs")

__all__ = ["__version__", "__author__"]
