"""
Garnet Ruby Interpreter

A tree walking interpreter for a small subset of Ruby: classes, modules,
methods, begin/rescue and require.
"""

__version__ = "0.1.0"


from ._error import *
from ._value import *
from ._object import *
from ._stack import *
from ._builtin import *
from ._parser import *
from ._vm import *
from . import ast
