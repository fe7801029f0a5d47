from ._fixed import *
