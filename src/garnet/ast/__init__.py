"""Syntax tree nodes for garnet.

The node set is closed. The vm matches on these classes and treats any
other object in a statement list as an internal error.
"""

from ._node import *
from ._literal import *
from ._ref import *
from ._decl import *
from ._flow import *
