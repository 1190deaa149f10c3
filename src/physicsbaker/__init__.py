"""
Physics Baker
=============
Turns a physics-driven animation capture into distributable motion files.

The MODEL layer (``physicsbaker.model``) holds records, keyframes, motions and
the rig model. The CONTROLLER layer (``physicsbaker.controller``) holds the
bake engine that transforms them.
"""
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("physicsbaker")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
